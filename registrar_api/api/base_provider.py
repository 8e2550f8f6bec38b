"""
Base Registrar Adapter Interface
Abstract base class every provider adapter implements
"""

import json
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from pydantic import ValidationError

from registrar_api.api.exceptions import MissingCredentialsError
from registrar_api.api.http import HttpResponse, HttpTransport
from registrar_api.api.models import (
    AvailabilityResult,
    DnsListResult,
    DnsRecord,
    DnsSelector,
    ErrorKind,
    OperationResult,
    RegisterOptions,
    TransferOptions,
    unsupported,
)
from registrar_api.utils.config import Settings, get_settings
from registrar_api.utils.logger import get_logger


logger = get_logger(__name__)

RecordInput = Union[DnsRecord, Mapping[str, Any]]
SelectorInput = Union[DnsSelector, DnsRecord, Mapping[str, Any]]

# Raised while normalizing a provider row with missing or badly typed fields
ROW_ERRORS = (KeyError, TypeError, ValueError, AttributeError, ValidationError)

# Record types whose priority field is meaningful
PRIORITY_TYPES = ("MX", "SRV")


class ParseFailure:
    """Marker for a response body that could not be decoded"""

    def __init__(self, text: str, reason: str = ""):
        self.text = text
        self.reason = reason

    def __repr__(self):
        return f"ParseFailure({self.reason!r})"


class BaseRegistrarAdapter(ABC):
    """
    Abstract base class for registrar / DNS provider adapters.
    All provider implementations must inherit this class.

    Operations never raise: every failure comes back as a result with ok=False.
    Only construction raises (MissingCredentialsError).
    """

    brand: str = ""

    # Each group is a tuple of alternative keys; one key of every group must be set
    required_credentials: Tuple[Tuple[str, ...], ...] = ()

    def __init__(
        self,
        credentials: Mapping[str, Any],
        transport: Optional[HttpTransport] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the adapter.

        Args:
            credentials: Provider-specific credential mapping
            transport: Optional HttpTransport. Built from settings if None
            settings: Optional Settings instance. Uses default if None

        Raises:
            MissingCredentialsError: If a required credential is absent
        """
        credentials = dict(credentials or {})
        missing = [
            "/".join(group) for group in self.required_credentials
            if not any(credentials.get(key) for key in group)
        ]
        if missing:
            raise MissingCredentialsError(self.get_provider_name(), missing)

        self.settings = settings or get_settings()
        self._credentials = MappingProxyType(credentials)
        self.transport = transport or HttpTransport(
            read_timeout=self.settings.http_read_timeout,
            write_timeout=self.settings.http_write_timeout
        )

    @property
    def credentials(self) -> Mapping[str, Any]:
        """Read-only view of the credentials supplied at construction"""
        return self._credentials

    def _cred(self, *keys: str, default: str = "") -> str:
        for key in keys:
            value = self._credentials.get(key)
            if value:
                return str(value)
        return default

    @property
    def sandbox(self) -> bool:
        return str(self._credentials.get("sandbox", "")).lower() in ("1", "true", "yes", "on", "ote")

    # ==================== Normalized interface ====================

    @abstractmethod
    def check_availability(self, domains: List[str]) -> AvailabilityResult:
        """
        Partition domains into available / unavailable / invalid.

        Every requested domain lands in exactly one of the three lists.
        """
        pass

    @abstractmethod
    def register_domain(
        self,
        domain: str,
        options: Union[RegisterOptions, Mapping[str, Any], None] = None
    ) -> OperationResult:
        """
        Register a domain.

        Args:
            domain: Domain to register
            options: years, privacy, auto_renew, contacts and brand-specific keys

        Returns:
            OperationResult with the provider response in raw
        """
        pass

    @abstractmethod
    def renew_domain(
        self,
        domain: str,
        years: int = 1,
        options: Optional[Mapping[str, Any]] = None
    ) -> OperationResult:
        pass

    @abstractmethod
    def transfer_domain(
        self,
        domain: str,
        options: Union[TransferOptions, Mapping[str, Any], None] = None
    ) -> OperationResult:
        """Start an inbound transfer; options carry auth_code"""
        pass

    @abstractmethod
    def get_domain(self, domain: str) -> OperationResult:
        """Provider-side domain info, unnormalized beyond the envelope"""
        pass

    @abstractmethod
    def get_dns(self, domain: str) -> DnsListResult:
        pass

    @abstractmethod
    def set_dns(self, domain: str, records: Iterable[RecordInput]) -> OperationResult:
        """Replace the full record set (strategy documented per adapter)"""
        pass

    @abstractmethod
    def add_dns(self, domain: str, record: RecordInput) -> OperationResult:
        pass

    @abstractmethod
    def del_dns(self, domain: str, selector: SelectorInput) -> OperationResult:
        """Delete by record id when given, else by type/host/value match"""
        pass

    @abstractmethod
    def set_nameservers(self, domain: str, nameservers: List[str]) -> OperationResult:
        pass

    @abstractmethod
    def raw(self, op: str, params: Optional[Mapping[str, Any]] = None) -> OperationResult:
        """Forward an arbitrary provider operation unmodified"""
        pass

    def get_provider_name(self) -> str:
        """
        Get provider name.
        Default implementation returns class name.

        Returns:
            Provider name string
        """
        return self.__class__.__name__.replace("Adapter", "")

    # ==================== Helpers ====================

    def _parse_json(self, text: str) -> Any:
        """Decode a JSON body; empty body -> {}, garbage -> ParseFailure"""
        if not text or not text.strip():
            return {}
        try:
            return json.loads(text)
        except ValueError as e:
            return ParseFailure(text, str(e))

    def _provider_error(self, parsed: Any) -> Optional[str]:
        """Hook for semantic failures reported inside a 2xx body"""
        return None

    def _result(
        self,
        response: HttpResponse,
        parsed: Any = None,
        cls=OperationResult,
        **fields
    ) -> OperationResult:
        """
        Build a result from one HTTP exchange.

        Args:
            response: Transport outcome
            parsed: Decoded body; decoded as JSON when None
            cls: Result class to build
            **fields: Extra result fields (records, available, ...)

        Returns:
            Result with ok/error/error_kind filled in
        """
        if response.error:
            return self._failure(cls, response, None, response.error, ErrorKind.TRANSPORT, **fields)

        if parsed is None:
            parsed = self._parse_json(response.text)

        if isinstance(parsed, ParseFailure):
            error = f"Could not parse {self.get_provider_name()} response: {parsed.reason}"
            return self._failure(cls, response, parsed.text, error, ErrorKind.PARSE, **fields)

        if response.status_code >= 400:
            error = self._http_error_message(response, parsed)
            return self._failure(cls, response, parsed, error, ErrorKind.HTTP, **fields)

        provider_error = self._provider_error(parsed)
        if provider_error:
            return self._failure(cls, response, parsed, provider_error, ErrorKind.PROVIDER, **fields)

        return cls(ok=True, raw=parsed, http_status=response.status_code, **fields)

    def _failure(
        self,
        cls,
        response: HttpResponse,
        raw: Any,
        error: str,
        kind: ErrorKind,
        **fields
    ) -> OperationResult:
        logger.warning(f"{self.get_provider_name()} call failed ({kind.value}): {error}")
        return cls(
            ok=False,
            raw=raw,
            http_status=response.status_code,
            error=error,
            error_kind=kind,
            **fields
        )

    def _http_error_message(self, response: HttpResponse, parsed: Any) -> str:
        message = None
        if isinstance(parsed, dict):
            message = parsed.get("message")
        return f"{self.get_provider_name()} HTTP {response.status_code}: {message or 'request failed'}"

    @staticmethod
    def _empty_selector(domain: str) -> OperationResult:
        return unsupported(f"Refusing to delete on {domain}: selector matches every record")

    @staticmethod
    def _combine(results: List[OperationResult], raw_extra: Optional[Dict[str, Any]] = None) -> OperationResult:
        """Fold the sub-results of a multi-call flow into one result"""
        failures = [r for r in results if not r.ok]
        first = failures[0] if failures else None
        raw: Any = [r.to_dict() for r in results]
        if raw_extra:
            raw = {**raw_extra, "results": raw}
        return OperationResult(
            ok=not failures,
            raw=raw,
            http_status=results[-1].http_status if results else 0,
            error=first.error if first else None,
            error_kind=first.error_kind if first else None
        )

    @staticmethod
    def _backfill(result: AvailabilityResult, domains: Iterable[str]) -> AvailabilityResult:
        """
        Make every requested domain land in exactly one bucket.

        Duplicates across buckets keep their first placement; requested
        domains the provider left out of its reply count as unavailable.
        """
        seen = set()
        for bucket in (result.available, result.unavailable, result.invalid):
            unique = []
            for name in bucket:
                key = name.lower()
                if key not in seen:
                    seen.add(key)
                    unique.append(name)
            bucket[:] = unique
        for name in domains:
            key = name.lower()
            if key not in seen:
                seen.add(key)
                result.unavailable.append(key)
        return result

    def _malformed(self, source: OperationResult, exc: Exception, cls=OperationResult) -> OperationResult:
        error = f"Malformed {self.get_provider_name()} record: {exc!r}"
        logger.warning(error)
        return cls(
            ok=False,
            raw=source.raw,
            http_status=source.http_status,
            error=error,
            error_kind=ErrorKind.PARSE
        )

    def _records(
        self,
        result: DnsListResult,
        rows: Iterable[Any],
        convert: Callable[[Any], DnsRecord]
    ) -> DnsListResult:
        """Normalize provider rows into result.records; a bad row fails the listing"""
        try:
            result.records = [convert(row) for row in rows]
        except ROW_ERRORS as e:
            return self._malformed(result, e, DnsListResult)
        return result
