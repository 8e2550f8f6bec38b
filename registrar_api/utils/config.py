"""
Configuration management using Pydantic Settings
Loads and validates environment variables (prefix REGISTRAR_) and an optional .env file
"""

from typing import Dict, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Library settings loaded from environment variables.
    Credentials here are only a fallback: callers normally pass them explicitly.
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Provider selection
    default_brand: str = Field(
        default="namesilo",
        description="Brand used when get_registrar() is called without one"
    )

    # Transport
    http_read_timeout: int = Field(
        default=20,
        gt=0,
        description="Timeout in seconds for GET/DELETE calls"
    )
    http_write_timeout: int = Field(
        default=30,
        gt=0,
        description="Timeout in seconds for POST/PUT/PATCH calls"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file name, written under logs/"
    )

    # NameSilo
    namesilo_api_key: str = Field(default="", description="NameSilo API key")
    namesilo_sandbox: bool = Field(default=False, description="Use the NameSilo sandbox")

    # GoDaddy
    godaddy_api_key: str = Field(default="", description="GoDaddy API Key")
    godaddy_api_secret: str = Field(default="", description="GoDaddy API Secret")
    godaddy_env: Literal["OTE", "PRODUCTION"] = Field(
        default="PRODUCTION",
        description="GoDaddy environment: OTE (test) or PRODUCTION"
    )

    # Namecheap
    namecheap_api_user: str = Field(default="", description="Namecheap ApiUser")
    namecheap_api_key: str = Field(default="", description="Namecheap ApiKey")
    namecheap_username: str = Field(default="", description="Namecheap UserName")
    namecheap_client_ip: str = Field(default="", description="Whitelisted client IP")
    namecheap_sandbox: bool = Field(default=False, description="Use the Namecheap sandbox")

    # Dynadot
    dynadot_api_key: str = Field(default="", description="Dynadot API key")

    # Cloudflare
    cloudflare_api_token: str = Field(default="", description="Cloudflare API token")
    cloudflare_account_id: str = Field(default="", description="Cloudflare account ID")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    def credentials_for(self, brand: str) -> Dict[str, str]:
        """
        Build the credential mapping for a canonical brand id from settings.

        Args:
            brand: Canonical brand id (e.g. 'GoDaddy', 'Cloudflare')

        Returns:
            Credential dict with empty values dropped
        """
        key = brand.lower()

        if key == "namesilo":
            creds = {
                "api_key": self.namesilo_api_key,
                "sandbox": "1" if self.namesilo_sandbox else "",
            }
        elif key == "godaddy":
            creds = {
                "api_key": self.godaddy_api_key,
                "api_secret": self.godaddy_api_secret,
                "sandbox": "1" if self.godaddy_env == "OTE" else "",
            }
        elif key == "namecheap":
            creds = {
                "api_user": self.namecheap_api_user,
                "api_key": self.namecheap_api_key,
                "username": self.namecheap_username,
                "client_ip": self.namecheap_client_ip,
                "sandbox": "1" if self.namecheap_sandbox else "",
            }
        elif key == "dynadot":
            creds = {"api_key": self.dynadot_api_key}
        elif key == "cloudflare":
            creds = {
                "api_token": self.cloudflare_api_token,
                "account_id": self.cloudflare_account_id,
            }
        else:
            creds = {}

        return {k: v for k, v in creds.items() if v}


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the settings singleton instance.
    Reads the environment (and .env when present) on first call.

    Returns:
        Settings instance

    Raises:
        ValidationError: If an environment variable holds an invalid value
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reset_settings():
    """
    Reset the settings singleton (useful for testing)
    """
    global _settings
    _settings = None
