"""
API Layer - Registrar / DNS Provider Adapters
Supports multiple providers behind one normalized interface
"""

# Base Adapter
from registrar_api.api.base_provider import BaseRegistrarAdapter

# Transport
from registrar_api.api.http import HttpResponse, HttpTransport

# Normalized types
from registrar_api.api.models import (
    AvailabilityResult,
    Contacts,
    DnsListResult,
    DnsRecord,
    DnsSelector,
    ErrorKind,
    OperationResult,
    RegisterOptions,
    TransferOptions,
)

# Adapter Implementations
from registrar_api.api.namesilo_client import NameSiloAdapter
from registrar_api.api.godaddy_client import GoDaddyAdapter
from registrar_api.api.namecheap_client import NamecheapAdapter
from registrar_api.api.dynadot_client import DynadotAdapter
from registrar_api.api.cloudflare_client import CloudflareAdapter

# Adapter Factory
from registrar_api.api.provider_factory import (
    available_brands,
    get_registrar,
    resolve_brand,
)

# Exceptions
from registrar_api.api.exceptions import (
    MissingCredentialsError,
    ProviderError,
    RegistrarError,
    UnknownBrandError,
)

__all__ = [
    # Base
    "BaseRegistrarAdapter",

    # Transport
    "HttpResponse",
    "HttpTransport",

    # Types
    "AvailabilityResult",
    "Contacts",
    "DnsListResult",
    "DnsRecord",
    "DnsSelector",
    "ErrorKind",
    "OperationResult",
    "RegisterOptions",
    "TransferOptions",

    # Adapters
    "NameSiloAdapter",
    "GoDaddyAdapter",
    "NamecheapAdapter",
    "DynadotAdapter",
    "CloudflareAdapter",

    # Factory
    "available_brands",
    "get_registrar",
    "resolve_brand",

    # Exceptions
    "MissingCredentialsError",
    "ProviderError",
    "RegistrarError",
    "UnknownBrandError",
]
