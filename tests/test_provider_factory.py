"""
Tests for brand resolution and adapter construction
"""

import pytest

from registrar_api.api.cloudflare_client import CloudflareAdapter
from registrar_api.api.dynadot_client import DynadotAdapter
from registrar_api.api.exceptions import MissingCredentialsError, UnknownBrandError
from registrar_api.api.godaddy_client import GoDaddyAdapter
from registrar_api.api.namecheap_client import NamecheapAdapter
from registrar_api.api.namesilo_client import NameSiloAdapter
from registrar_api.api.provider_factory import (
    available_brands,
    brand_candidates,
    get_registrar,
    resolve_brand,
)
from registrar_api.utils.config import Settings


class TestResolveBrand:

    @pytest.mark.parametrize("brand", ["GoDaddy", "godaddy", "GODADDY", "go-daddy", "go_daddy", "Go Daddy", "gd"])
    def test_godaddy_spellings(self, brand):
        assert resolve_brand(brand) == "GoDaddy"

    @pytest.mark.parametrize("brand, expected", [
        ("namesilo", "NameSilo"),
        ("name-silo", "NameSilo"),
        ("Name Silo", "NameSilo"),
        ("namecheap", "Namecheap"),
        ("nc", "Namecheap"),
        ("dynadot", "Dynadot"),
        ("CF", "Cloudflare"),
        ("  cloudflare ", "Cloudflare"),
    ])
    def test_other_brands(self, brand, expected):
        assert resolve_brand(brand) == expected

    def test_unknown_brand_lists_attempts(self):
        with pytest.raises(UnknownBrandError) as exc_info:
            resolve_brand("foo-bar")

        assert exc_info.value.tried == ["FooBar"]
        assert "foo-bar" in str(exc_info.value)
        assert "FooBar" in str(exc_info.value)

    def test_empty_brand(self):
        with pytest.raises(UnknownBrandError) as exc_info:
            resolve_brand("")
        assert exc_info.value.tried == []

    def test_candidates_order(self):
        assert brand_candidates("go-daddy") == ["GoDaddy"]
        assert brand_candidates("cf") == ["Cloudflare", "Cf"]

    def test_available_brands(self):
        assert available_brands() == ["NameSilo", "GoDaddy", "Namecheap", "Dynadot", "Cloudflare"]


class TestGetRegistrar:

    @pytest.mark.parametrize("brand, credentials, cls", [
        ("namesilo", {"api_key": "k"}, NameSiloAdapter),
        ("go-daddy", {"api_key": "k", "api_secret": "s"}, GoDaddyAdapter),
        ("Namecheap", {"api_user": "u", "api_key": "k"}, NamecheapAdapter),
        ("DYNADOT", {"api_key": "k"}, DynadotAdapter),
        ("cf", {"api_token": "t"}, CloudflareAdapter),
    ])
    def test_builds_adapter(self, brand, credentials, cls, transport, settings):
        adapter = get_registrar(brand, credentials, transport=transport, settings=settings)

        assert isinstance(adapter, cls)
        assert adapter.transport is transport
        assert dict(adapter.credentials) == credentials

    def test_missing_credentials(self, transport, settings):
        with pytest.raises(MissingCredentialsError) as exc_info:
            get_registrar("godaddy", {"api_key": "k"}, transport=transport, settings=settings)
        assert exc_info.value.brand == "GoDaddy"

    def test_unknown_brand(self, transport, settings):
        with pytest.raises(UnknownBrandError):
            get_registrar("route53", {"api_key": "k"}, transport=transport, settings=settings)

    def test_credentials_from_settings(self, transport):
        settings = Settings(
            _env_file=None,
            default_brand="gd",
            godaddy_api_key="key",
            godaddy_api_secret="secret",
            godaddy_env="OTE",
        )

        adapter = get_registrar(transport=transport, settings=settings)

        assert isinstance(adapter, GoDaddyAdapter)
        assert adapter.get_environment() == "OTE"
        assert adapter.headers["Authorization"] == "sso-key key:secret"

    def test_credentials_are_read_only(self, transport, settings):
        adapter = get_registrar("namesilo", {"api_key": "k"}, transport=transport, settings=settings)

        with pytest.raises(TypeError):
            adapter.credentials["api_key"] = "other"
