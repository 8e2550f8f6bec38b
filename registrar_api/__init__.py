"""
Unified client for domain registrar and DNS provider APIs

Usage:
    from registrar_api import get_registrar

    api = get_registrar("namesilo", {"api_key": "XXXX"})
    result = api.check_availability(["example.com", "mybrand.io"])
    result.available, result.unavailable, result.invalid
"""

from registrar_api.api import (
    AvailabilityResult,
    BaseRegistrarAdapter,
    Contacts,
    DnsListResult,
    DnsRecord,
    DnsSelector,
    ErrorKind,
    MissingCredentialsError,
    OperationResult,
    RegisterOptions,
    TransferOptions,
    UnknownBrandError,
    available_brands,
    get_registrar,
)
from registrar_api.services import DomainService, DomainServiceError

__version__ = "0.1.0"

__all__ = [
    "AvailabilityResult",
    "BaseRegistrarAdapter",
    "Contacts",
    "DnsListResult",
    "DnsRecord",
    "DnsSelector",
    "DomainService",
    "DomainServiceError",
    "ErrorKind",
    "MissingCredentialsError",
    "OperationResult",
    "RegisterOptions",
    "TransferOptions",
    "UnknownBrandError",
    "available_brands",
    "get_registrar",
]
