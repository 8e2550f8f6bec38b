"""
Domain Service
High-level workflows over a single registrar adapter
"""

from typing import Any, Iterable, List, Mapping, Optional

from registrar_api.api import BaseRegistrarAdapter, get_registrar
from registrar_api.api.base_provider import RecordInput
from registrar_api.api.models import (
    AvailabilityResult,
    DnsListResult,
    ErrorKind,
    OperationResult,
    RegisterOptions,
)
from registrar_api.utils.logger import get_logger
from registrar_api.utils.validators import DomainValidator, ValidationError, validate_domain

logger = get_logger(__name__)


class DomainServiceError(Exception):
    """Raised for invalid caller input"""
    pass


class DomainService:
    """
    High-level domain operations service.
    Works with any adapter returned by get_registrar().
    """

    def __init__(
        self,
        adapter: Optional[BaseRegistrarAdapter] = None,
        brand: Optional[str] = None,
        credentials: Optional[Mapping[str, Any]] = None
    ):
        """
        Initialize domain service.

        Args:
            adapter: Optional adapter instance. If None, creates one via get_registrar.
            brand: Optional brand string. If None, reads from config.
            credentials: Optional credential mapping. If None, reads from config.

        Example:
            # Use configured brand
            service = DomainService()

            # Use a specific brand
            service = DomainService(brand="godaddy", credentials={...})
        """
        if adapter:
            self.client = adapter
        else:
            self.client = get_registrar(brand, credentials)

        logger.info(f"Domain service initialized - Provider: {self.client.get_provider_name()}")

    def search_domains(self, domains: Iterable[str]) -> AvailabilityResult:
        """
        Check availability, rejecting malformed names locally.

        Args:
            domains: Domain names (scheme, case and whitespace are cleaned)

        Returns:
            AvailabilityResult; locally rejected names are merged into invalid
        """
        valid: List[str] = []
        rejected: List[str] = []
        for domain in domains:
            cleaned = DomainValidator.clean(domain)
            if cleaned in valid or cleaned in rejected:
                continue
            if DomainValidator.is_valid(cleaned):
                valid.append(cleaned)
            else:
                rejected.append(cleaned)

        if rejected:
            logger.info(f"Rejected locally: {', '.join(rejected)}")

        if not valid:
            return AvailabilityResult(ok=True, invalid=rejected)

        result = self.client.check_availability(valid)
        result.invalid = result.invalid + [d for d in rejected if d not in result.invalid]
        return result

    def register_if_available(
        self,
        domain: str,
        options: Optional[Mapping[str, Any]] = None
    ) -> OperationResult:
        """
        Register a domain only when the provider reports it available.

        Args:
            domain: Domain to register
            options: RegisterOptions or mapping

        Returns:
            Registration result, or the failed/negative availability check

        Raises:
            DomainServiceError: If the domain name is malformed
        """
        try:
            domain = validate_domain(domain)
        except ValidationError as e:
            raise DomainServiceError(f"Invalid domain format: {str(e)}") from e

        logger.info(f"Starting registration workflow for: {domain}")

        availability = self.client.check_availability([domain])
        if not availability.ok:
            return availability

        if domain not in availability.available:
            logger.info(f"❌ {domain} is NOT available")
            return OperationResult(
                ok=False,
                raw=availability.raw,
                http_status=availability.http_status,
                error=f"Domain {domain} is not available for registration",
                error_kind=ErrorKind.PROVIDER
            )

        logger.info(f"✅ {domain} is AVAILABLE - registering")
        return self.client.register_domain(domain, RegisterOptions.coerce(options))

    def sync_records(self, domain: str, records: Iterable[RecordInput]) -> DnsListResult:
        """
        Replace the zone and read it back.

        Returns:
            The listing after the replace; the failed replace when it did not succeed
        """
        replaced = self.client.set_dns(domain, records)
        if not replaced.ok:
            logger.warning(f"DNS replace for {domain} failed: {replaced.error}")
            return DnsListResult(
                ok=False,
                raw=replaced.raw,
                http_status=replaced.http_status,
                error=replaced.error,
                error_kind=replaced.error_kind
            )
        return self.client.get_dns(domain)

    def point_nameservers(self, domain: str, nameservers: List[str]) -> OperationResult:
        """
        Delegate a domain to the given nameservers.

        Raises:
            DomainServiceError: If the list is empty or a host is malformed
        """
        if not nameservers:
            raise DomainServiceError("At least one nameserver is required")

        cleaned = []
        for ns in nameservers:
            try:
                cleaned.append(validate_domain(ns))
            except ValidationError as e:
                raise DomainServiceError(f"Invalid nameserver: {str(e)}") from e

        return self.client.set_nameservers(domain, cleaned)
