"""
Cloudflare API Adapter
Zone and DNS management only; Cloudflare is not used as a registrar here
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from registrar_api.api.base_provider import (
    PRIORITY_TYPES,
    ROW_ERRORS,
    BaseRegistrarAdapter,
    RecordInput,
    SelectorInput,
)
from registrar_api.api.exceptions import ProviderError
from registrar_api.api.http import HttpResponse
from registrar_api.api.models import (
    AvailabilityResult,
    DnsListResult,
    DnsRecord,
    DnsSelector,
    ErrorKind,
    OperationResult,
    unsupported,
)
from registrar_api.utils.logger import get_logger


logger = get_logger(__name__)

NOT_A_REGISTRAR = "Cloudflare adapter manages zones and DNS only; {op} is not supported"

# Largest page the dns_records listing returns; only the first page is read
PAGE_SIZE = 100

# Zone settings flipped together by toggle_free_features
FREE_FEATURES = (
    "always_use_https",
    "automatic_https_rewrites",
    "brotli",
    "rocket_loader",
    "development_mode",
)


class CloudflareAdapter(BaseRegistrarAdapter):
    """
    Cloudflare adapter (bearer token, JSON envelope with a success flag).

    add_dns is an upsert keyed on type + name: an existing record is patched
    when content, ttl or proxied differ and returned unchanged otherwise.
    set_dns deletes every record in the zone, then creates the new ones.

    Record listings (get_dns, set_dns, del_dns) read a single page of
    PAGE_SIZE records. Zones holding more than that are only partly seen:
    get_dns returns the first page and set_dns leaves the rest in place.
    A warning is logged whenever a listing comes back full.
    """

    brand = "cloudflare"
    required_credentials = (("api_token",),)

    BASE_URL = "https://api.cloudflare.com/client/v4"

    def __init__(self, credentials, transport=None, settings=None):
        super().__init__(credentials, transport=transport, settings=settings)
        self.base_url = (self._cred("base") or self.BASE_URL).rstrip("/")
        self.account_id = self._cred("account_id") or None
        self.headers = {
            "Authorization": f"Bearer {self._cred('api_token')}",
            "Content-Type": "application/json",
        }
        logger.info(f"Cloudflare adapter initialized - Base URL: {self.base_url}")

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method: str, path: str, payload: Optional[Mapping[str, Any]] = None) -> HttpResponse:
        if method == "GET":
            return self.transport.request(method, self._url(path), params=payload, headers=self.headers)
        return self.transport.request(method, self._url(path), json=payload, headers=self.headers)

    def _first_error(self, parsed: Any) -> Optional[str]:
        if isinstance(parsed, dict):
            errors = parsed.get("errors") or []
            if errors and isinstance(errors[0], dict) and errors[0].get("message"):
                return errors[0]["message"]
        return None

    def _provider_error(self, parsed: Any) -> Optional[str]:
        if isinstance(parsed, dict) and parsed.get("success"):
            return None
        return f"Cloudflare API error: {self._first_error(parsed) or parsed}"

    def _http_error_message(self, response: HttpResponse, parsed: Any) -> str:
        return f"Cloudflare API error: {self._first_error(parsed) or response.text or 'HTTP ' + str(response.status_code)}"

    def _call(self, method: str, path: str, payload: Optional[Mapping[str, Any]] = None) -> OperationResult:
        """
        Perform one call and unwrap the envelope.

        Returns:
            OperationResult whose raw is the envelope's 'result'

        Raises:
            ProviderError: For any failure, carrying the failed result
        """
        result = self._result(self._send(method, path, payload))
        if not result.ok:
            raise ProviderError(result.error, brand=self.brand, status_code=result.http_status, result=result)
        result.raw = result.raw.get("result")
        return result

    @staticmethod
    def _fold(error: ProviderError, cls=OperationResult, **fields) -> OperationResult:
        """Turn an internal ProviderError into the operation's result type"""
        failed = error.result
        if failed is None:
            return cls(ok=False, error=error.message, error_kind=ErrorKind.PROVIDER, **fields)
        return cls(
            ok=False,
            raw=failed.raw,
            http_status=failed.http_status,
            error=failed.error,
            error_kind=failed.error_kind,
            **fields
        )

    # ==================== Zones ====================

    def _zone(self, domain: str) -> Dict[str, Any]:
        found = self._call("GET", "zones", {"name": domain, "per_page": 1})
        zones = found.raw or []
        if not zones:
            logger.warning(f"Cloudflare zone not found: {domain}")
            raise ProviderError(
                f"Cloudflare zone not found: {domain}",
                brand=self.brand,
                result=OperationResult(
                    ok=False,
                    raw=zones,
                    http_status=found.http_status,
                    error=f"Cloudflare zone not found: {domain}",
                    error_kind=ErrorKind.PROVIDER
                )
            )
        return zones[0]

    def get_zone_id(self, domain: str) -> Optional[str]:
        """Zone id for a domain, or None when it can't be resolved"""
        try:
            return self._zone(domain)["id"]
        except ProviderError as e:
            logger.warning(f"Zone lookup for {domain} failed: {e.message}")
            return None

    def create_zone(self, domain: str, jump_start: bool = False) -> OperationResult:
        """
        Create a zone in the account.

        Args:
            domain: Zone apex
            jump_start: Let Cloudflare import existing records

        Returns:
            OperationResult with the new zone (id, name_servers, status) in raw
        """
        logger.info(f"Creating Cloudflare zone: {domain}")
        payload: Dict[str, Any] = {"name": domain, "jump_start": jump_start}
        if self.account_id:
            payload["account"] = {"id": self.account_id}
        try:
            return self._call("POST", "zones", payload)
        except ProviderError as e:
            return self._fold(e)

    def purge_cache(self, domain: str, urls: Optional[List[str]] = None) -> OperationResult:
        """Purge everything, or only the given URLs"""
        logger.info(f"Purging cache for {domain}")
        payload = {"files": list(urls)} if urls else {"purge_everything": True}
        try:
            zone_id = self._zone(domain)["id"]
            return self._call("POST", f"zones/{zone_id}/purge_cache", payload)
        except ProviderError as e:
            return self._fold(e)

    def get_zone(self, zone_id: str) -> OperationResult:
        """Zone details (name, status, name_servers, plan) by zone id"""
        logger.info(f"Getting Cloudflare zone {zone_id}")
        try:
            return self._call("GET", f"zones/{zone_id}")
        except ProviderError as e:
            return self._fold(e)

    def _patch_setting(self, zone_id: str, name: str, value: Any) -> OperationResult:
        try:
            return self._call("PATCH", f"zones/{zone_id}/settings/{name}", {"value": value})
        except ProviderError as e:
            return self._fold(e)

    def set_setting(self, domain: str, name: str, value: Any) -> OperationResult:
        """Change one zone setting (always_use_https, brotli, minify, ...)"""
        logger.info(f"Setting {name} on {domain}")
        try:
            zone_id = self._zone(domain)["id"]
        except ProviderError as e:
            return self._fold(e)
        return self._patch_setting(zone_id, name, value)

    def toggle_free_features(self, domain: str, on: bool = True) -> OperationResult:
        """
        Switch the free-plan performance and HTTPS settings on or off together.

        Covers FREE_FEATURES plus minify for css, js and html. Cloudflare
        turns development_mode off again by itself after three hours.

        Args:
            domain: Zone apex
            on: True for "on", False for "off"

        Returns:
            Combined result; ok only when every setting was applied
        """
        value = "on" if on else "off"
        logger.info(f"Turning free features {value} for {domain}")
        try:
            zone_id = self._zone(domain)["id"]
        except ProviderError as e:
            return self._fold(e)

        results = [self._patch_setting(zone_id, name, value) for name in FREE_FEATURES]
        results.append(self._patch_setting(zone_id, "minify", {"css": value, "js": value, "html": value}))
        combined = self._combine(results, raw_extra={"zone_id": zone_id})
        if not combined.ok:
            logger.warning(f"Free features for {domain} only partly applied: {combined.error}")
        return combined

    # ==================== Registrar operations ====================

    def check_availability(self, domains: List[str]) -> AvailabilityResult:
        return unsupported(
            NOT_A_REGISTRAR.format(op="availability check"),
            cls=AvailabilityResult,
            unavailable=[d.lower() for d in domains]
        )

    def register_domain(self, domain, options=None) -> OperationResult:
        return unsupported(NOT_A_REGISTRAR.format(op="registration"))

    def renew_domain(self, domain, years=1, options=None) -> OperationResult:
        return unsupported(NOT_A_REGISTRAR.format(op="renewal"))

    def transfer_domain(self, domain, options=None) -> OperationResult:
        return unsupported(NOT_A_REGISTRAR.format(op="transfer"))

    def set_nameservers(self, domain, nameservers: List[str]) -> OperationResult:
        return unsupported(NOT_A_REGISTRAR.format(op="setting nameservers"))

    def get_domain(self, domain) -> OperationResult:
        logger.info(f"Getting zone for domain: {domain}")
        try:
            zone = self._zone(domain)
        except ProviderError as e:
            return self._fold(e)
        return OperationResult(ok=True, raw=zone, http_status=200)

    # ==================== DNS ====================

    @staticmethod
    def _fqdn(domain: str, host: str) -> str:
        if host in ("", "@") or host == domain:
            return domain
        if host.endswith("." + domain):
            return host
        return f"{host}.{domain}"

    @staticmethod
    def _relative(domain: str, name: str) -> str:
        if name == domain:
            return "@"
        suffix = "." + domain
        if name.endswith(suffix):
            return name[:-len(suffix)]
        return name

    def _to_record(self, domain: str, row: Mapping[str, Any]) -> DnsRecord:
        priority = row.get("priority")
        return DnsRecord(
            type=row["type"],
            host=self._relative(domain, row["name"]),
            value=str(row["content"]),
            ttl=int(row.get("ttl") or 1),
            prio=int(priority) if priority not in (None, "") and row["type"].upper() in PRIORITY_TYPES else None,
            record_id=row.get("id")
        )

    def _fields(self, domain: str, record: DnsRecord, proxied: bool) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "type": record.type,
            "name": self._fqdn(domain, record.host),
            "content": record.value,
            "ttl": record.ttl,
            "proxied": proxied,
        }
        if record.prio is not None:
            fields["priority"] = record.prio
        return fields

    def _list_records(self, zone_id: str, query: Optional[Mapping[str, Any]] = None) -> OperationResult:
        """
        List one page of dns_records.

        Raises:
            ProviderError: For any failure
        """
        listed = self._call("GET", f"zones/{zone_id}/dns_records", {**(query or {}), "per_page": PAGE_SIZE})
        if isinstance(listed.raw, list) and len(listed.raw) >= PAGE_SIZE:
            logger.warning(f"Zone {zone_id} listing is a full page of {PAGE_SIZE}; later records are not read")
        return listed

    def get_dns(self, domain) -> DnsListResult:
        logger.info(f"Listing DNS records for: {domain}")
        try:
            zone_id = self._zone(domain)["id"]
            listed = self._list_records(zone_id)
        except ProviderError as e:
            return self._fold(e, cls=DnsListResult)

        rows = listed.raw or []
        result = DnsListResult(ok=True, raw=rows, http_status=listed.http_status)
        return self._records(result, rows, lambda row: self._to_record(domain, row))

    def ensure_dns_record(self, domain: str, record: RecordInput, proxied: bool = False) -> OperationResult:
        """
        Upsert a record keyed on type + name.

        Args:
            domain: Zone apex
            record: DnsRecord or mapping
            proxied: Route through Cloudflare's proxy

        Returns:
            OperationResult with the patched, existing or created record in raw
        """
        record = DnsRecord.coerce(record)
        try:
            zone_id = self._zone(domain)["id"]
            fields = self._fields(domain, record, proxied)
            found = self._list_records(zone_id, {"type": record.type, "name": fields["name"]})
            existing = (found.raw or [None])[0]

            if existing and (
                existing.get("content") != record.value
                or bool(existing.get("proxied")) != proxied
                or int(existing.get("ttl") or 0) != record.ttl
            ):
                logger.info(f"Updating {record.type} {fields['name']} on {domain}")
                return self._call("PATCH", f"zones/{zone_id}/dns_records/{existing['id']}", fields)
            if existing:
                logger.info(f"{record.type} {fields['name']} already up to date")
                return OperationResult(ok=True, raw=existing, http_status=found.http_status)

            logger.info(f"Creating {record.type} {fields['name']} on {domain}")
            return self._call("POST", f"zones/{zone_id}/dns_records", fields)
        except ProviderError as e:
            return self._fold(e)

    def add_dns(self, domain, record: RecordInput) -> OperationResult:
        proxied = bool(record.get("proxied", False)) if isinstance(record, Mapping) else False
        return self.ensure_dns_record(domain, record, proxied=proxied)

    def set_dns(self, domain, records: Iterable[RecordInput]) -> OperationResult:
        records = list(records)
        logger.info(f"Replacing DNS for {domain} with {len(records)} record(s)")
        try:
            zone_id = self._zone(domain)["id"]
            listed = self._list_records(zone_id)
        except ProviderError as e:
            return self._fold(e)

        try:
            record_ids = [row["id"] for row in listed.raw or []]
        except ROW_ERRORS as e:
            return self._malformed(listed, e)

        results: List[OperationResult] = [self._delete(zone_id, record_id) for record_id in record_ids]
        for item in records:
            proxied = bool(item.get("proxied", False)) if isinstance(item, Mapping) else False
            record = DnsRecord.coerce(item)
            try:
                results.append(self._call("POST", f"zones/{zone_id}/dns_records", self._fields(domain, record, proxied)))
            except ProviderError as e:
                results.append(self._fold(e))
        return self._combine(results)

    def _delete(self, zone_id: str, record_id: str) -> OperationResult:
        try:
            return self._call("DELETE", f"zones/{zone_id}/dns_records/{record_id}")
        except ProviderError as e:
            return self._fold(e)

    def del_dns(self, domain, selector: SelectorInput) -> OperationResult:
        selector = DnsSelector.coerce(selector)
        if selector.is_empty():
            return self._empty_selector(domain)
        if selector.host is not None:
            selector = selector.model_copy(
                update={"host": self._relative(domain, self._fqdn(domain, selector.host))}
            )

        try:
            zone_id = self._zone(domain)["id"]
            if selector.record_id:
                return self._call("DELETE", f"zones/{zone_id}/dns_records/{selector.record_id}")

            query: Dict[str, Any] = {}
            if selector.type:
                query["type"] = selector.type.upper()
            if selector.host is not None:
                query["name"] = self._fqdn(domain, selector.host)
            listed = self._list_records(zone_id, query)
        except ProviderError as e:
            return self._fold(e)

        try:
            matches = [
                row["id"] for row in listed.raw or []
                if selector.matches(self._to_record(domain, row))
            ]
        except ROW_ERRORS as e:
            return self._malformed(listed, e)

        if not matches:
            return OperationResult(
                ok=False,
                raw=listed.raw,
                http_status=listed.http_status,
                error=f"No DNS record on {domain} matches {selector.model_dump(exclude_none=True)}",
                error_kind=ErrorKind.PROVIDER
            )
        return self._combine([self._delete(zone_id, record_id) for record_id in matches])

    def raw(self, op, params=None) -> OperationResult:
        logger.info(f"Raw Cloudflare call: {op}")
        response = self._send("GET", op, dict(params or {}))
        result = self._result(response)
        result.endpoint = response.url
        return result
