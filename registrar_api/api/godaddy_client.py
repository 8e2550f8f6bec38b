"""
GoDaddy Domain API Adapter
REST/JSON API authenticated with an sso-key header
"""

import time
from urllib.parse import quote
from typing import Any, Dict, Iterable, List

from registrar_api.api.base_provider import PRIORITY_TYPES, BaseRegistrarAdapter, RecordInput, SelectorInput
from registrar_api.api.models import (
    AvailabilityResult,
    DnsListResult,
    DnsRecord,
    DnsSelector,
    OperationResult,
    RegisterOptions,
    TransferOptions,
    unsupported,
)
from registrar_api.utils.logger import get_logger


logger = get_logger(__name__)


class GoDaddyAdapter(BaseRegistrarAdapter):
    """
    GoDaddy API adapter.
    Supports both OTE (test) and Production environments.

    DNS replace is a single PUT and atomic on GoDaddy's side. Deletion
    targets every record of a type + host pair; GoDaddy has no record ids.
    """

    brand = "godaddy"
    required_credentials = (("api_key",), ("api_secret", "api_token"))

    BASE_URL = "https://api.godaddy.com/v1"
    OTE_URL = "https://api.ote-godaddy.com/v1"

    def __init__(self, credentials, transport=None, settings=None):
        super().__init__(credentials, transport=transport, settings=settings)
        self.base_url = (self._cred("base") or (self.OTE_URL if self.sandbox else self.BASE_URL)).rstrip("/")
        self.headers = {
            "Authorization": f"sso-key {self._cred('api_key')}:{self._cred('api_secret', 'api_token')}",
            "Accept": "application/json"
        }

        logger.info(f"GoDaddy adapter initialized - Environment: {self.get_environment()}")
        logger.info(f"Base URL: {self.base_url}")

    def get_provider_name(self) -> str:
        return "GoDaddy"

    def get_environment(self) -> str:
        """Get current environment (OTE or PRODUCTION)"""
        return "OTE" if self.base_url == self.OTE_URL else "PRODUCTION"

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _wire(record: DnsRecord) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "type": record.type,
            "name": record.host,
            "data": record.value,
            "ttl": record.ttl,
        }
        if record.prio is not None:
            body["priority"] = record.prio
        return body

    def check_availability(self, domains: List[str]) -> AvailabilityResult:
        """
        Check availability in one batch call (repeated domain= parameters).

        Args:
            domains: Domain names

        Returns:
            AvailabilityResult partitioning the input
        """
        logger.info(f"Checking availability for {len(domains)} domain(s)")

        response = self.transport.get(
            self._url("/domains/available"),
            params=[("domain", d) for d in domains],
            headers=self.headers
        )
        result = self._result(response, cls=AvailabilityResult)
        if not result.ok:
            return result

        body = result.raw if isinstance(result.raw, dict) else {}
        if "domains" in body:
            items = body.get("domains") or []
        elif "available" in body:
            items = [body]
        else:
            items = []

        for item in items:
            name = str(item.get("domain", "")).lower() if isinstance(item, dict) else ""
            if not name:
                continue
            if item.get("available"):
                result.available.append(name)
            elif item.get("code") == "INVALID":
                result.invalid.append(name)
            else:
                result.unavailable.append(name)

        # Batch calls report rejected names under "errors"
        for error in body.get("errors") or []:
            name = str(error.get("domain", "")).lower() if isinstance(error, dict) else ""
            if not name:
                continue
            if "INVALID" in str(error.get("code", "")).upper():
                result.invalid.append(name)
            else:
                result.unavailable.append(name)

        self._backfill(result, domains)

        logger.info(
            f"Available: {len(result.available)} | Unavailable: {len(result.unavailable)} "
            f"| Invalid: {len(result.invalid)}"
        )
        return result

    def register_domain(self, domain, options=None) -> OperationResult:
        """
        Purchase a domain.

        Args:
            domain: Domain to purchase
            options: RegisterOptions or mapping (years, privacy, auto_renew, contacts, client_ip)

        Returns:
            OperationResult with the purchase response
        """
        opts = RegisterOptions.coerce(options)
        logger.info(f"Attempting to purchase domain: {domain}")

        contacts = opts.resolved_contacts()
        contact_map = contacts.to_dict() if contacts else {
            "registrant": {}, "admin": {}, "tech": {}, "billing": {}
        }

        purchase_data = {
            "domain": domain,
            "period": opts.years,
            "privacy": bool(opts.privacy),
            "renewAuto": opts.auto_renew if opts.auto_renew is not None else True,
            "consent": {
                "agreementKeys": ["DNRA"],
                "agreedAt": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
                "agreedBy": opts.client_ip or "127.0.0.1"
            },
            "contactAdmin": contact_map["admin"],
            "contactBilling": contact_map["billing"],
            "contactRegistrant": contact_map["registrant"],
            "contactTech": contact_map["tech"]
        }

        response = self.transport.post_json(self._url("/domains/purchase"), purchase_data, headers=self.headers)
        return self._result(response)

    def renew_domain(self, domain, years=1, options=None) -> OperationResult:
        logger.info(f"Renewing domain: {domain} ({years} year(s))")
        response = self.transport.post_json(
            self._url(f"/domains/{domain}/renew"), {"period": years}, headers=self.headers
        )
        return self._result(response)

    def transfer_domain(self, domain, options=None) -> OperationResult:
        opts = TransferOptions.coerce(options)
        logger.info(f"Requesting transfer for: {domain}")
        response = self.transport.post_json(
            self._url(f"/domains/{domain}/transfer"), {"authCode": opts.auth_code}, headers=self.headers
        )
        return self._result(response)

    def get_domain(self, domain) -> OperationResult:
        logger.info(f"Getting details for domain: {domain}")
        return self._result(self.transport.get(self._url(f"/domains/{domain}"), headers=self.headers))

    def get_dns(self, domain) -> DnsListResult:
        logger.info(f"Listing DNS records for: {domain}")

        response = self.transport.get(self._url(f"/domains/{domain}/records"), headers=self.headers)
        result = self._result(response, cls=DnsListResult)
        if not result.ok:
            return result

        rows = result.raw if isinstance(result.raw, list) else []
        return self._records(result, rows, self._to_record)

    @staticmethod
    def _to_record(row: Dict[str, Any]) -> DnsRecord:
        priority = row.get("priority")
        return DnsRecord(
            type=row["type"],
            host=row["name"],
            value=str(row["data"]),
            ttl=int(row.get("ttl") or 3600),
            prio=int(priority) if priority not in (None, "") and row["type"].upper() in PRIORITY_TYPES else None
        )

    def set_dns(self, domain, records: Iterable[RecordInput]) -> OperationResult:
        records = [DnsRecord.coerce(r) for r in records]
        logger.info(f"Replacing DNS for {domain} with {len(records)} record(s)")
        response = self.transport.put_json(
            self._url(f"/domains/{domain}/records"),
            [self._wire(r) for r in records],
            headers=self.headers
        )
        return self._result(response)

    def add_dns(self, domain, record: RecordInput) -> OperationResult:
        record = DnsRecord.coerce(record)
        logger.info(f"Adding {record.type} record {record.host} -> {record.value} on {domain}")
        response = self.transport.patch_json(
            self._url(f"/domains/{domain}/records"), [self._wire(record)], headers=self.headers
        )
        return self._result(response)

    def del_dns(self, domain, selector: SelectorInput) -> OperationResult:
        """
        Delete every record of one type + host pair.

        A missing type defaults to A and a missing host to @, but at least one
        of the two must be given. GoDaddy cannot delete by record id alone.
        """
        selector = DnsSelector.coerce(selector)
        if selector.type is None and selector.host is None:
            if selector.record_id:
                return unsupported("GoDaddy cannot delete by record id; pass type and host")
            return self._empty_selector(domain)

        record_type = (selector.type or "A").upper()
        host = selector.host or "@"
        logger.info(f"Deleting {record_type} records for {host} on {domain}")
        response = self.transport.delete(
            self._url(f"/domains/{domain}/records/{record_type}/{quote(host, safe='')}"),
            headers=self.headers
        )
        return self._result(response)

    def set_nameservers(self, domain, nameservers: List[str]) -> OperationResult:
        logger.info(f"Setting nameservers for {domain}: {', '.join(nameservers)}")
        response = self.transport.patch_json(
            self._url(f"/domains/{domain}"), {"nameServers": list(nameservers)}, headers=self.headers
        )
        return self._result(response)

    def raw(self, op, params=None) -> OperationResult:
        logger.info(f"Raw GoDaddy operation: {op}")
        response = self.transport.get(self._url(op), params=dict(params or {}), headers=self.headers)
        result = self._result(response)
        result.endpoint = response.url
        return result
