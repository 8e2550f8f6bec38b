"""
NameSilo API Adapter
GET-only API, key passed in the query string, JSON replies
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from registrar_api.api.base_provider import PRIORITY_TYPES, BaseRegistrarAdapter, RecordInput, SelectorInput
from registrar_api.api.http import HttpResponse
from registrar_api.api.models import (
    AvailabilityResult,
    DnsListResult,
    DnsRecord,
    DnsSelector,
    ErrorKind,
    OperationResult,
    RegisterOptions,
    TransferOptions,
)
from registrar_api.utils.logger import get_logger


logger = get_logger(__name__)

# Registrant field -> NameSilo inline contact parameter
REGISTRANT_PARAMS = {
    "first_name": "fn",
    "last_name": "ln",
    "address": "ad",
    "city": "cy",
    "state": "st",
    "zip": "zp",
    "country": "ct",
    "email": "em",
    "phone": "ph",
}

SUCCESS_CODES = {"300", "301", "302"}


def as_list(value: Any) -> List[Any]:
    """NameSilo returns a scalar instead of a list when there is exactly one item"""
    if value is None or value == "" or value == []:
        return []
    if isinstance(value, list):
        return value
    return [value]


class NameSiloAdapter(BaseRegistrarAdapter):
    """
    NameSilo adapter.

    DNS replace is delete-all-then-add-all and is not atomic: a failure
    midway leaves the zone partially rewritten.
    """

    brand = "namesilo"
    required_credentials = (("api_key",),)

    BASE_URL = "https://www.namesilo.com/api"
    SANDBOX_URL = "https://sandbox.namesilo.com/api"

    def __init__(self, credentials, transport=None, settings=None):
        super().__init__(credentials, transport=transport, settings=settings)
        self.base_url = self._cred("base") or (self.SANDBOX_URL if self.sandbox else self.BASE_URL)
        logger.info(f"NameSilo adapter initialized - Base URL: {self.base_url}")

    def get_provider_name(self) -> str:
        return "NameSilo"

    def _call(self, op: str, params: Optional[Mapping[str, Any]] = None) -> HttpResponse:
        query = {"version": "1", "type": "json", "key": self._cred("api_key")}
        query.update(params or {})
        return self.transport.get(f"{self.base_url}/{op}", params=query)

    def _provider_error(self, parsed: Any) -> Optional[str]:
        reply = parsed.get("reply") if isinstance(parsed, dict) else None
        if not isinstance(reply, dict):
            return "NameSilo response has no reply section"
        code = str(reply.get("code", ""))
        if code not in SUCCESS_CODES:
            return f"NameSilo error {code}: {reply.get('detail', 'unknown error')}"
        return None

    @staticmethod
    def _domains(section: Any) -> List[str]:
        # Shapes seen: "a.com", ["a.com", ...], {"domain": ...}, [{"domain": "a.com", ...}, ...]
        if isinstance(section, dict):
            section = section.get("domain", [])
        names = []
        for item in as_list(section):
            if isinstance(item, dict):
                item = item.get("domain")
            if item:
                names.append(str(item).lower())
        return names

    def check_availability(self, domains: List[str]) -> AvailabilityResult:
        """
        Check registration availability for a batch of domains.

        Args:
            domains: Domain names

        Returns:
            AvailabilityResult partitioning the input
        """
        logger.info(f"Checking availability for {len(domains)} domain(s)")

        response = self._call("checkRegisterAvailability", {"domains": ",".join(domains)})
        result = self._result(response, cls=AvailabilityResult)
        if not result.ok:
            return result

        reply = result.raw.get("reply", {})
        result.available = self._domains(reply.get("available"))
        result.unavailable = self._domains(reply.get("unavailable"))
        result.invalid = self._domains(reply.get("invalid"))
        self._backfill(result, domains)

        logger.info(
            f"Available: {len(result.available)} | Unavailable: {len(result.unavailable)} "
            f"| Invalid: {len(result.invalid)}"
        )
        return result

    def register_domain(self, domain, options=None) -> OperationResult:
        opts = RegisterOptions.coerce(options)
        logger.info(f"Registering domain: {domain} ({opts.years} year(s))")

        params: Dict[str, Any] = {
            "domain": domain,
            "years": opts.years,
            "private": "1" if (opts.privacy if opts.privacy is not None else True) else "0",
            "auto_renew": "1" if opts.auto_renew else "0",
        }
        if opts.coupon:
            params["coupon"] = opts.coupon

        contacts = opts.resolved_contacts()
        if contacts is not None:
            for key, short in REGISTRANT_PARAMS.items():
                if contacts.registrant.get(key):
                    params[f"rr_{short}"] = contacts.registrant[key]

        return self._result(self._call("registerDomain", params))

    def renew_domain(self, domain, years=1, options=None) -> OperationResult:
        logger.info(f"Renewing domain: {domain} ({years} year(s))")
        return self._result(self._call("renewDomain", {"domain": domain, "years": years}))

    def transfer_domain(self, domain, options=None) -> OperationResult:
        opts = TransferOptions.coerce(options)
        logger.info(f"Requesting transfer for: {domain}")
        return self._result(self._call("transferDomain", {"domain": domain, "auth": opts.auth_code}))

    def get_domain(self, domain) -> OperationResult:
        logger.info(f"Getting details for domain: {domain}")
        return self._result(self._call("getDomainInfo", {"domain": domain}))

    def get_dns(self, domain) -> DnsListResult:
        logger.info(f"Listing DNS records for: {domain}")

        result = self._result(self._call("dnsListRecords", {"domain": domain}), cls=DnsListResult)
        if not result.ok:
            return result

        rows = as_list(result.raw.get("reply", {}).get("resource_record"))
        return self._records(result, rows, self._to_record)

    @staticmethod
    def _to_record(row: Dict[str, Any]) -> DnsRecord:
        distance = row.get("distance")
        return DnsRecord(
            type=row["type"],
            host=row["host"],
            value=str(row["value"]),
            ttl=int(row.get("ttl") or 3600),
            prio=int(distance) if distance not in (None, "") and row["type"].upper() in PRIORITY_TYPES else None,
            record_id=row.get("record_id")
        )

    def set_dns(self, domain, records: Iterable[RecordInput]) -> OperationResult:
        """
        Replace the zone: delete every existing record by id, then add each new one.
        """
        records = [DnsRecord.coerce(r) for r in records]
        logger.info(f"Replacing DNS for {domain} with {len(records)} record(s)")

        current = self.get_dns(domain)
        if not current.ok:
            return current

        results: List[OperationResult] = []
        for existing in current.records:
            results.append(self._delete_by_id(domain, existing.record_id))
        for record in records:
            results.append(self.add_dns(domain, record))

        combined = self._combine(results)
        if not combined.ok:
            logger.warning(f"DNS replace for {domain} incomplete: {combined.error}")
        return combined

    def add_dns(self, domain, record: RecordInput) -> OperationResult:
        record = DnsRecord.coerce(record)
        logger.info(f"Adding {record.type} record {record.host} -> {record.value} on {domain}")

        params: Dict[str, Any] = {
            "domain": domain,
            "rrtype": record.type,
            "rrhost": record.host,
            "rrvalue": record.value,
            "rrttl": record.ttl,
        }
        if record.prio is not None:
            params["rrdistance"] = record.prio
        return self._result(self._call("dnsAddRecord", params))

    def del_dns(self, domain, selector: SelectorInput) -> OperationResult:
        selector = DnsSelector.coerce(selector)
        if selector.record_id:
            return self._delete_by_id(domain, selector.record_id)
        if selector.is_empty():
            return self._empty_selector(domain)

        # No id: resolve the selector against the live zone
        current = self.get_dns(domain)
        if not current.ok:
            return current
        matches = [r for r in current.records if selector.matches(r)]
        if not matches:
            return OperationResult(
                ok=False,
                raw=current.raw,
                http_status=current.http_status,
                error=f"No DNS record on {domain} matches {selector.model_dump(exclude_none=True)}",
                error_kind=ErrorKind.PROVIDER
            )
        return self._combine([self._delete_by_id(domain, r.record_id) for r in matches])

    def _delete_by_id(self, domain: str, record_id: Optional[str]) -> OperationResult:
        logger.info(f"Deleting DNS record {record_id} on {domain}")
        return self._result(self._call("dnsDeleteRecord", {"domain": domain, "rrid": record_id or ""}))

    def set_nameservers(self, domain, nameservers: List[str]) -> OperationResult:
        logger.info(f"Setting nameservers for {domain}: {', '.join(nameservers)}")
        params: Dict[str, Any] = {"domain": domain}
        for index, ns in enumerate(nameservers, start=1):
            params[f"ns{index}"] = ns
        return self._result(self._call("changeNameServers", params))

    def raw(self, op, params=None) -> OperationResult:
        logger.info(f"Raw NameSilo operation: {op}")
        response = self._call(op, params)
        result = self._result(response)
        result.endpoint = response.url
        return result
