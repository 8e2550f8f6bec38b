"""
Custom exceptions for registrar adapters
"""

from typing import Iterable, Optional


class RegistrarError(Exception):
    """Base exception for all registrar errors"""

    def __init__(
        self,
        message: str,
        brand: Optional[str] = None,
        status_code: int = None,
        response_data=None
    ):
        self.message = message
        self.brand = brand
        self.status_code = status_code
        self.response_data = response_data if response_data is not None else {}
        super().__init__(self.message)

    def __str__(self):
        if self.status_code:
            return f"{self.__class__.__name__} (HTTP {self.status_code}): {self.message}"
        return f"{self.__class__.__name__}: {self.message}"


class UnknownBrandError(RegistrarError):
    """Raised when a brand string does not resolve to any adapter"""

    def __init__(self, brand: str, tried: Iterable[str]):
        self.tried = list(tried)
        super().__init__(
            f"Unknown registrar brand: {brand!r} (tried: {', '.join(self.tried) or 'nothing'})",
            brand=brand
        )


class MissingCredentialsError(RegistrarError):
    """Raised when an adapter is constructed without a required credential"""

    def __init__(self, brand: str, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(
            f"{brand} requires credential(s): {', '.join(self.missing)}",
            brand=brand
        )


class ProviderError(RegistrarError):
    """
    Raised inside an adapter when a provider call fails.
    Adapters catch it and return the attached result; it never reaches callers.
    """

    def __init__(self, message: str, brand: Optional[str] = None, result=None, **kwargs):
        self.result = result
        super().__init__(message, brand=brand, **kwargs)
