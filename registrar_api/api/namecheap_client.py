"""
Namecheap API Adapter
GET-only API with four fixed auth query parameters and XML replies
"""

import xml.etree.ElementTree as ET
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from registrar_api.api.base_provider import (
    BaseRegistrarAdapter,
    ParseFailure,
    RecordInput,
    SelectorInput,
)
from registrar_api.api.exceptions import ProviderError
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
from registrar_api.utils.validators import split_domain


logger = get_logger(__name__)

CONTACT_ROLES = {
    "Registrant": "registrant",
    "Tech": "tech",
    "Admin": "admin",
    "AuxBilling": "billing",
}

CONTACT_FIELDS = [
    "FirstName", "LastName", "Address1", "City", "StateProvince", "PostalCode",
    "Country", "Phone", "EmailAddress", "OrganizationName",
]


def strip_ns(tag: str) -> str:
    return tag.split("}", 1)[-1]


def element_to_dict(element: ET.Element) -> Any:
    """
    Convert an element to plain data: attributes under '@attributes',
    text under '#text' (or the bare string for text-only leaves),
    repeated children as lists.
    """
    node: Dict[str, Any] = {}
    if element.attrib:
        node["@attributes"] = dict(element.attrib)

    for child in element:
        key = strip_ns(child.tag)
        value = element_to_dict(child)
        if key in node:
            if not isinstance(node[key], list):
                node[key] = [node[key]]
            node[key].append(value)
        else:
            node[key] = value

    text = (element.text or "").strip()
    if text:
        if not node:
            return text
        node["#text"] = text
    return node


def find_all(root: ET.Element, name: str) -> List[ET.Element]:
    return [el for el in root.iter() if strip_ns(el.tag) == name]


class NamecheapAdapter(BaseRegistrarAdapter):
    """
    Namecheap adapter.

    There is no native add/delete for host records: both read the full host
    list, splice it, and write it back through setHosts.
    """

    brand = "namecheap"
    required_credentials = (("api_key",), ("api_user", "username"))

    BASE_URL = "https://api.namecheap.com/xml.response"
    SANDBOX_URL = "https://api.sandbox.namecheap.com/xml.response"

    def __init__(self, credentials, transport=None, settings=None):
        super().__init__(credentials, transport=transport, settings=settings)
        self.base_url = self._cred("base") or (self.SANDBOX_URL if self.sandbox else self.BASE_URL)
        logger.info(f"Namecheap adapter initialized - Base URL: {self.base_url}")

    def _query(self, command: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        query = {
            "ApiUser": self._cred("api_user", "username"),
            "ApiKey": self._cred("api_key"),
            "UserName": self._cred("username", "api_user"),
            "ClientIp": self._cred("client_ip", default="127.0.0.1"),
            "Command": command,
        }
        query.update(params or {})
        return query

    @staticmethod
    def _check_status(root: ET.Element):
        """
        Raise ProviderError when the reply Status is not OK.

        Raises:
            ProviderError: With every <Error> message joined by '; '
        """
        if root.get("Status") == "OK":
            return
        errors = [(el.text or "").strip() for el in find_all(root, "Error")]
        errors = [e for e in errors if e]
        raise ProviderError(
            f"Namecheap API error: {'; '.join(errors) or 'unknown error'}",
            brand="namecheap",
            response_data=errors
        )

    def _request(
        self,
        command: str,
        params: Optional[Mapping[str, Any]] = None,
        cls=OperationResult,
        **fields
    ) -> Tuple[OperationResult, Optional[ET.Element]]:
        """
        Run one command.

        Returns:
            (result, root element); root is None whenever result.ok is False
        """
        response = self.transport.get(self.base_url, params=self._query(command, params))
        if response.error:
            return self._result(response, cls=cls, **fields), None

        try:
            root = ET.fromstring(response.text)
        except ET.ParseError as e:
            return self._result(response, ParseFailure(response.text, f"invalid XML: {e}"), cls=cls, **fields), None

        parsed = {strip_ns(root.tag): element_to_dict(root)}
        result = self._result(response, parsed, cls=cls, **fields)
        if not result.ok:
            return result, None

        try:
            self._check_status(root)
        except ProviderError as e:
            logger.warning(f"{command} failed: {e.message}")
            return cls(
                ok=False,
                raw=parsed,
                http_status=response.status_code,
                error=e.message,
                error_kind=ErrorKind.PROVIDER,
                **fields
            ), None

        return result, root

    def _sld_tld(self, domain: str) -> Dict[str, str]:
        sld, tld = split_domain(domain)
        return {"SLD": sld, "TLD": tld}

    def check_availability(self, domains: List[str]) -> AvailabilityResult:
        """
        Check availability via namecheap.domains.check.

        Args:
            domains: Domain names

        Returns:
            AvailabilityResult partitioning the input
        """
        logger.info(f"Checking availability for {len(domains)} domain(s)")

        result, root = self._request(
            "namecheap.domains.check", {"DomainList": ",".join(domains)}, cls=AvailabilityResult
        )
        if root is None:
            return result

        for row in find_all(root, "DomainCheckResult"):
            name = row.get("Domain", "").lower()
            if not name:
                continue
            if row.get("Available", "false").lower() == "true":
                result.available.append(name)
            elif row.get("IsValid", "true").lower() == "false" or row.get("ErrorNo", "0") not in ("", "0"):
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
        opts = RegisterOptions.coerce(options)
        logger.info(f"Registering domain: {domain} ({opts.years} year(s))")

        privacy = opts.privacy if opts.privacy is not None else True
        params: Dict[str, Any] = {
            "DomainName": domain,
            "Years": opts.years,
            "AddFreeWhoisguard": "yes" if privacy else "no",
            "WhoisGuard": "ENABLED" if privacy else "DISABLED",
        }

        contacts = opts.resolved_contacts()
        if contacts is not None:
            contact_map = contacts.to_dict()
            for role, key in CONTACT_ROLES.items():
                source = contact_map.get(key) or contacts.registrant
                for field in CONTACT_FIELDS:
                    value = source.get(field) or contacts.registrant.get(field)
                    if value:
                        params[f"{role}{field}"] = value

        result, _ = self._request("namecheap.domains.create", params)
        return result

    def renew_domain(self, domain, years=1, options=None) -> OperationResult:
        logger.info(f"Renewing domain: {domain} ({years} year(s))")
        result, _ = self._request("namecheap.domains.renew", {"DomainName": domain, "Years": years})
        return result

    def transfer_domain(self, domain, options=None) -> OperationResult:
        opts = TransferOptions.coerce(options)
        logger.info(f"Requesting transfer for: {domain}")
        result, _ = self._request(
            "namecheap.domains.transfer.create", {"DomainName": domain, "EPPCode": opts.auth_code}
        )
        return result

    def get_domain(self, domain) -> OperationResult:
        logger.info(f"Getting details for domain: {domain}")
        result, _ = self._request("namecheap.domains.getInfo", {"DomainName": domain})
        return result

    def get_dns(self, domain) -> DnsListResult:
        logger.info(f"Listing DNS records for: {domain}")

        result, root = self._request("namecheap.domains.dns.getHosts", self._sld_tld(domain), cls=DnsListResult)
        if root is None:
            return result

        return self._records(result, find_all(root, "host"), self._to_record)

    @staticmethod
    def _to_record(host: ET.Element) -> DnsRecord:
        record_type = host.get("Type", "")
        mx_pref = host.get("MXPref")
        return DnsRecord(
            type=record_type,
            host=host.get("Name", ""),
            value=host.get("Address", ""),
            ttl=int(host.get("TTL") or 3600),
            # MXPref is sent back as 10 on every row; it only means something on MX
            prio=int(mx_pref) if mx_pref and record_type.upper() == "MX" else None,
            record_id=host.get("HostId")
        )

    def set_dns(self, domain, records: Iterable[RecordInput]) -> OperationResult:
        records = [DnsRecord.coerce(r) for r in records]
        logger.info(f"Replacing DNS for {domain} with {len(records)} record(s)")

        params: Dict[str, Any] = self._sld_tld(domain)
        for index, record in enumerate(records, start=1):
            params[f"HostName{index}"] = record.host
            params[f"RecordType{index}"] = record.type
            params[f"Address{index}"] = record.value
            params[f"TTL{index}"] = record.ttl
            if record.prio is not None:
                params[f"MXPref{index}"] = record.prio

        result, _ = self._request("namecheap.domains.dns.setHosts", params)
        return result

    def add_dns(self, domain, record: RecordInput) -> OperationResult:
        record = DnsRecord.coerce(record)
        logger.info(f"Adding {record.type} record {record.host} -> {record.value} on {domain}")

        current = self.get_dns(domain)
        if not current.ok:
            return current
        return self.set_dns(domain, current.records + [record])

    def del_dns(self, domain, selector: SelectorInput) -> OperationResult:
        selector = DnsSelector.coerce(selector)
        if selector.is_empty():
            return self._empty_selector(domain)
        logger.info(f"Deleting records matching {selector.model_dump(exclude_none=True)} on {domain}")

        current = self.get_dns(domain)
        if not current.ok:
            return current
        remaining = [r for r in current.records if not selector.matches(r)]
        return self.set_dns(domain, remaining)

    def set_nameservers(self, domain, nameservers: List[str]) -> OperationResult:
        logger.info(f"Setting nameservers for {domain}: {', '.join(nameservers)}")
        params = self._sld_tld(domain)
        params["NameServers"] = ",".join(nameservers)
        result, _ = self._request("namecheap.domains.dns.setCustom", params)
        return result

    def raw(self, op, params=None) -> OperationResult:
        """op must be a full Command string, e.g. 'namecheap.users.getBalances'"""
        logger.info(f"Raw Namecheap command: {op}")
        result, _ = self._request(op, params)
        result.endpoint = self.base_url
        return result
