"""
Input validation utilities for domain and host names
"""

import re
from typing import Tuple


class ValidationError(Exception):
    """Custom exception for validation errors"""
    pass


class DomainValidator:
    """Validator for domain names"""

    # RFC-compliant domain regex
    DOMAIN_REGEX = re.compile(
        r'^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$'
    )

    @classmethod
    def clean(cls, domain: str) -> str:
        """
        Normalize a domain name without validating it.

        Args:
            domain: Raw domain input

        Returns:
            Lowercased domain with scheme, trailing slash and trailing dot removed
        """
        domain = (domain or "").strip().lower()
        domain = re.sub(r'^https?://', '', domain)
        return domain.rstrip('/').rstrip('.')

    @classmethod
    def validate(cls, domain: str) -> str:
        """
        Validate a domain name.

        Args:
            domain: Domain name to validate

        Returns:
            Cleaned domain name (lowercase, stripped)

        Raises:
            ValidationError: If domain is invalid
        """
        if not domain or not domain.strip():
            raise ValidationError("Domain name cannot be empty")

        domain = cls.clean(domain)

        # Check length
        if len(domain) > 253:  # RFC 1035
            raise ValidationError("Domain name too long (max 253 characters)")

        if not cls.DOMAIN_REGEX.match(domain):
            raise ValidationError(
                f"Invalid domain format: {domain}. "
                "Domain must contain only letters, numbers, hyphens and dots."
            )

        return domain

    @classmethod
    def is_valid(cls, domain: str) -> bool:
        try:
            cls.validate(domain)
        except ValidationError:
            return False
        return True

    @classmethod
    def split(cls, domain: str) -> Tuple[str, str]:
        """
        Split a domain at the first dot into (SLD, TLD).

        Args:
            domain: Domain name (e.g., 'example.co.uk')

        Returns:
            Tuple like ('example', 'co.uk'); TLD is '' when there is no dot
        """
        sld, _, tld = domain.partition('.')
        return sld, tld


def validate_domain(domain: str) -> str:
    """Convenience function for domain validation"""
    return DomainValidator.validate(domain)


def split_domain(domain: str) -> Tuple[str, str]:
    """Convenience function for SLD/TLD splitting"""
    return DomainValidator.split(domain)
