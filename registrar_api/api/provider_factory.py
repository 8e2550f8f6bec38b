"""
Registrar Adapter Factory
Resolves a brand string to an adapter instance through an explicit registry
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Type

from registrar_api.api.base_provider import BaseRegistrarAdapter
from registrar_api.api.cloudflare_client import CloudflareAdapter
from registrar_api.api.dynadot_client import DynadotAdapter
from registrar_api.api.exceptions import UnknownBrandError
from registrar_api.api.godaddy_client import GoDaddyAdapter
from registrar_api.api.http import HttpTransport
from registrar_api.api.namecheap_client import NamecheapAdapter
from registrar_api.api.namesilo_client import NameSiloAdapter
from registrar_api.utils.config import Settings, get_settings
from registrar_api.utils.logger import get_logger


logger = get_logger(__name__)

REGISTRY: Dict[str, Type[BaseRegistrarAdapter]] = {
    "NameSilo": NameSiloAdapter,
    "GoDaddy": GoDaddyAdapter,
    "Namecheap": NamecheapAdapter,
    "Dynadot": DynadotAdapter,
    "Cloudflare": CloudflareAdapter,
}

ALIASES: Dict[str, str] = {
    "cf": "Cloudflare",
    "go-daddy": "GoDaddy",
    "gd": "GoDaddy",
    "name-silo": "NameSilo",
    "nc": "Namecheap",
    "name-cheap": "Namecheap",
}

_SEPARATORS = re.compile(r"[^a-z0-9]+")


def brand_candidates(brand: str) -> List[str]:
    """
    Canonical identifiers to try for a brand string, in order.

    'go-daddy' hits the alias table; 'Go Daddy' and 'go_daddy' are split on
    punctuation, title-cased and concatenated into 'GoDaddy'.
    """
    lowered = (brand or "").strip().lower()
    collapsed = _SEPARATORS.sub("", lowered)

    candidates: List[str] = []
    for key in (lowered, collapsed):
        if key in ALIASES:
            candidates.append(ALIASES[key])

    parts = [p for p in _SEPARATORS.split(lowered) if p]
    if parts:
        candidates.append("".join(p.title() for p in parts))

    # Preserve order, drop repeats
    return list(dict.fromkeys(candidates))


def resolve_brand(brand: str) -> str:
    """
    Resolve a brand string to its canonical registry id.

    Raises:
        UnknownBrandError: Listing every identifier tried
    """
    tried = brand_candidates(brand)
    by_lower = {name.lower(): name for name in REGISTRY}
    for candidate in tried:
        if candidate in REGISTRY:
            return candidate
        if candidate.lower() in by_lower:
            return by_lower[candidate.lower()]
    raise UnknownBrandError(brand, tried)


def available_brands() -> List[str]:
    return list(REGISTRY)


def get_registrar(
    brand: Optional[str] = None,
    credentials: Optional[Mapping[str, Any]] = None,
    transport: Optional[HttpTransport] = None,
    settings: Optional[Settings] = None
) -> BaseRegistrarAdapter:
    """
    Factory function to create registrar adapter instances.

    Args:
        brand: Brand string ('namesilo', 'GoDaddy', 'cf', ...).
               If None, reads default_brand from settings.
        credentials: Credential mapping. If None, built from settings.
        transport: Optional shared HttpTransport
        settings: Optional Settings instance. Uses default if None.

    Returns:
        Adapter instance

    Raises:
        UnknownBrandError: If the brand does not resolve
        MissingCredentialsError: If a required credential is absent

    Example:
        api = get_registrar("namesilo", {"api_key": "XXXX"})
        api.check_availability(["example.com", "mybrand.io"])
    """
    if settings is None:
        settings = get_settings()

    if brand is None:
        brand = settings.default_brand

    canonical = resolve_brand(brand)

    if credentials is None:
        credentials = settings.credentials_for(canonical)

    logger.info(f"Creating registrar adapter: {canonical}")

    return REGISTRY[canonical](credentials, transport=transport, settings=settings)
