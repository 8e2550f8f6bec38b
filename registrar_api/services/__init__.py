"""
Business logic and service layer
"""

from registrar_api.services.domain_service import DomainService, DomainServiceError

__all__ = [
    "DomainService",
    "DomainServiceError",
]
