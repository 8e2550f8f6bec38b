"""
Normalized record, option and result types shared by all adapters
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


ContactInfo = Dict[str, Any]


class DnsRecord(BaseModel):
    """Canonical cross-provider DNS record"""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    host: str
    value: str
    ttl: int = 3600
    prio: Optional[int] = Field(default=None, alias="priority")
    record_id: Optional[str] = Field(default=None, alias="id")

    @field_validator("type")
    @classmethod
    def upper_type(cls, v: str) -> str:
        return v.upper()

    @field_validator("record_id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return None if v in (None, "") else str(v)

    @classmethod
    def coerce(cls, record: Union["DnsRecord", Mapping[str, Any]]) -> "DnsRecord":
        """Accept a record or a mapping with canonical keys"""
        if isinstance(record, cls):
            return record
        data = dict(record)
        if data.get("ttl") in (None, ""):
            data.pop("ttl", None)
        if data.get("prio") in ("", None) and data.get("priority") in ("", None):
            data.pop("prio", None)
            data.pop("priority", None)
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """{type, host, value, ttl, prio} plus record_id when known"""
        out = {
            "type": self.type,
            "host": self.host,
            "value": self.value,
            "ttl": self.ttl,
            "prio": self.prio,
        }
        if self.record_id is not None:
            out["record_id"] = self.record_id
        return out


class DnsSelector(BaseModel):
    """Minimal field set identifying records to delete"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    record_id: Optional[str] = Field(default=None, alias="id")
    type: Optional[str] = None
    host: Optional[str] = None
    value: Optional[str] = None

    @field_validator("record_id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return None if v in (None, "") else str(v)

    @classmethod
    def coerce(cls, selector: Union["DnsSelector", DnsRecord, Mapping[str, Any]]) -> "DnsSelector":
        if isinstance(selector, cls):
            return selector
        if isinstance(selector, DnsRecord):
            return cls(
                record_id=selector.record_id,
                type=selector.type,
                host=selector.host,
                value=selector.value
            )
        return cls.model_validate(dict(selector))

    def is_empty(self) -> bool:
        return not any((self.record_id, self.type, self.host, self.value))

    def matches(self, record: DnsRecord) -> bool:
        if self.record_id is not None and self.record_id != record.record_id:
            return False
        if self.type is not None and self.type.upper() != record.type:
            return False
        if self.host is not None and self.host != record.host:
            return False
        if self.value is not None and self.value != record.value:
            return False
        return True


class Contacts(BaseModel):
    """
    Contact set for a registration.
    Admin, tech and billing reuse the registrant unless overridden.
    """

    registrant: ContactInfo
    admin: Optional[ContactInfo] = None
    tech: Optional[ContactInfo] = None
    billing: Optional[ContactInfo] = None

    @model_validator(mode="after")
    def default_to_registrant(self) -> "Contacts":
        for role in ("admin", "tech", "billing"):
            if not getattr(self, role):
                setattr(self, role, dict(self.registrant))
        return self

    def to_dict(self) -> Dict[str, ContactInfo]:
        return {
            "registrant": self.registrant,
            "admin": self.admin,
            "tech": self.tech,
            "billing": self.billing,
        }


class RegisterOptions(BaseModel):
    """
    Options for register_domain.
    privacy/auto_renew are None when unset so each provider can apply its own default.
    Unknown brand-specific keys are kept and ignored by adapters that don't use them.
    """

    model_config = ConfigDict(extra="allow")

    years: int = Field(default=1, ge=1)
    privacy: Optional[bool] = None
    auto_renew: Optional[bool] = None
    contacts: Optional[Contacts] = None
    registrant: Optional[ContactInfo] = None
    coupon: Optional[str] = None
    client_ip: Optional[str] = None

    @classmethod
    def coerce(cls, options: Union["RegisterOptions", Mapping[str, Any], None]) -> "RegisterOptions":
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options or {}))

    def resolved_contacts(self) -> Optional[Contacts]:
        """Contacts, falling back to the bare registrant mapping"""
        if self.contacts is not None:
            return self.contacts
        if self.registrant:
            return Contacts(registrant=self.registrant)
        return None


class TransferOptions(BaseModel):
    model_config = ConfigDict(extra="allow")

    auth_code: str = ""

    @classmethod
    def coerce(cls, options: Union["TransferOptions", Mapping[str, Any], None]) -> "TransferOptions":
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options or {}))


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    HTTP = "http"
    PROVIDER = "provider"
    PARSE = "parse"
    UNSUPPORTED = "unsupported"


class OperationResult(BaseModel):
    """Envelope returned by every adapter operation"""

    ok: bool
    raw: Any = None
    http_status: int = 0
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    endpoint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class AvailabilityResult(OperationResult):
    available: List[str] = Field(default_factory=list)
    unavailable: List[str] = Field(default_factory=list)
    invalid: List[str] = Field(default_factory=list)

    def partition(self) -> Dict[str, List[str]]:
        return {
            "available": list(self.available),
            "unavailable": list(self.unavailable),
            "invalid": list(self.invalid),
        }


class DnsListResult(OperationResult):
    records: List[DnsRecord] = Field(default_factory=list)


def unsupported(message: str, cls=OperationResult, **fields) -> OperationResult:
    """Fixed failure for operations a provider does not offer; no HTTP call is made"""
    return cls(ok=False, error=message, error_kind=ErrorKind.UNSUPPORTED, **fields)
