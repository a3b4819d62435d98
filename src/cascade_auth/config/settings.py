"""Configuration Settings for cascade-auth

Manages environment variables and provider configuration.

Complex values are read from the environment as JSON, for example:
    AUTH_DRIVERS='{"local": "myapp.auth:LocalOverrides", "ldap": "myapp.auth:Directory"}'
    AUTH_CAPABILITIES='{"add": ["local"], "resetpassword": []}'
"""

from functools import lru_cache
from typing import Any, Dict, List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Service info
    service_name: str = "cascade-auth"
    service_version: str = "1.0.0"
    environment: str = "development"

    # Backends: id -> "module.path:ClassName", in fallback order
    auth_drivers: Dict[str, str] = {}
    # Keyword arguments passed to each backend constructor, by id
    auth_driver_options: Dict[str, Dict[str, Any]] = {}
    # Capability -> backend ids, replaces the computed routing for that capability
    auth_capabilities: Dict[str, List[str]] = {}

    # Generated passwords (reset via update)
    password_letters: int = 6
    password_digits: int = 2

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # json or text

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance

    Returns:
        Settings instance
    """
    return Settings()
