"""
Dynadot API Adapter
GET-only api3.json endpoint with key + command parameters
"""

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional

from registrar_api.api.base_provider import BaseRegistrarAdapter, RecordInput, SelectorInput
from registrar_api.api.http import HttpResponse
from registrar_api.api.models import (
    AvailabilityResult,
    DnsListResult,
    DnsRecord,
    OperationResult,
    RegisterOptions,
    TransferOptions,
    unsupported,
)
from registrar_api.utils.logger import get_logger


logger = get_logger(__name__)


class DynadotAdapter(BaseRegistrarAdapter):
    """
    Dynadot adapter.

    DNS replace is add-only: existing records are left in place because
    the API offers no record delete. del_dns always reports unsupported.
    """

    brand = "dynadot"
    required_credentials = (("api_key",),)

    BASE_URL = "https://api.dynadot.com/api3.json"

    def __init__(self, credentials, transport=None, settings=None):
        super().__init__(credentials, transport=transport, settings=settings)
        self.base_url = self._cred("base") or self.BASE_URL
        logger.info(f"Dynadot adapter initialized - Base URL: {self.base_url}")

    def _call(self, command: str, params: Optional[Mapping[str, Any]] = None) -> HttpResponse:
        query = {"key": self._cred("api_key"), "command": command}
        query.update(params or {})
        return self.transport.get(self.base_url, params=query)

    def check_availability(self, domains: List[str]) -> AvailabilityResult:
        logger.info(f"Checking availability for {len(domains)} domain(s)")

        result = self._result(self._call("search", {"domain": ",".join(domains)}), cls=AvailabilityResult)
        if not result.ok:
            return result

        rows = (result.raw.get("search") or []) if isinstance(result.raw, dict) else []
        for row in rows:
            name = str(row.get("domain", "")).lower() if isinstance(row, dict) else ""
            if not name:
                continue
            status = row.get("status", "")
            if status == "available":
                result.available.append(name)
            elif status == "invalid":
                result.invalid.append(name)
            else:
                result.unavailable.append(name)
        return self._backfill(result, domains)

    def register_domain(self, domain, options=None) -> OperationResult:
        opts = RegisterOptions.coerce(options)
        logger.info(f"Registering domain: {domain} ({opts.years} year(s))")
        return self._result(self._call("register", {
            "domain": domain,
            "duration": opts.years,
            "privacy": "1" if opts.privacy else "0",
        }))

    def renew_domain(self, domain, years=1, options=None) -> OperationResult:
        logger.info(f"Renewing domain: {domain} ({years} year(s))")
        return self._result(self._call("renew", {"domain": domain, "duration": years}))

    def transfer_domain(self, domain, options=None) -> OperationResult:
        opts = TransferOptions.coerce(options)
        logger.info(f"Requesting transfer for: {domain}")
        return self._result(self._call("transfer", {"domain": domain, "epp_code": opts.auth_code}))

    def get_domain(self, domain) -> OperationResult:
        logger.info(f"Getting details for domain: {domain}")
        return self._result(self._call("get_domain_info", {"domain": domain}))

    def get_dns(self, domain) -> DnsListResult:
        logger.info(f"Listing DNS records for: {domain}")

        result = self._result(self._call("get_dns", {"domain": domain}), cls=DnsListResult)
        if not result.ok:
            return result

        rows = result.raw.get("records", []) if isinstance(result.raw, dict) else []
        return self._records(result, rows, self._to_record)

    @staticmethod
    def _to_record(row: Dict[str, Any]) -> DnsRecord:
        prio = row.get("prio")
        return DnsRecord(
            type=row["type"],
            host=row["host"],
            value=str(row["value"]),
            ttl=int(row.get("ttl") or 3600),
            # Blank prio comes back as "" on non-MX rows
            prio=int(prio) if prio not in (None, "") else None
        )

    def set_dns(self, domain, records: Iterable[RecordInput]) -> OperationResult:
        records = [DnsRecord.coerce(r) for r in records]
        logger.info(f"Adding {len(records)} record(s) to {domain} (Dynadot replace is add-only)")
        return self._combine([self.add_dns(domain, r) for r in records])

    def add_dns(self, domain, record: RecordInput) -> OperationResult:
        record = DnsRecord.coerce(record)
        logger.info(f"Adding {record.type} record {record.host} -> {record.value} on {domain}")
        payload = {k: v for k, v in record.to_dict().items() if k != "record_id"}
        return self._result(self._call("set_dns", {"domain": domain, "record": json.dumps([payload])}))

    def del_dns(self, domain, selector: SelectorInput) -> OperationResult:
        logger.warning(f"Dynadot cannot delete DNS records ({domain})")
        return unsupported("Dynadot delete DNS not implemented")

    def set_nameservers(self, domain, nameservers: List[str]) -> OperationResult:
        logger.info(f"Setting nameservers for {domain}: {', '.join(nameservers)}")
        return self._result(self._call("set_ns", {"domain": domain, "ns": ",".join(nameservers)}))

    def raw(self, op, params=None) -> OperationResult:
        logger.info(f"Raw Dynadot command: {op}")
        response = self._call(op, params)
        result = self._result(response)
        result.endpoint = response.url
        return result
