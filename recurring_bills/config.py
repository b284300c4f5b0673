"""Settings read from the environment (and a local ``.env`` file)."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .client import DEFAULT_PREFIX, DEFAULT_TIMEOUT
from .errors import ConfigError
from .formatting import DEFAULT_CURRENCY_CODE, get_currency


@dataclass
class Settings:
    api_url: Optional[str] = None
    api_prefix: str = DEFAULT_PREFIX
    api_timeout: float = DEFAULT_TIMEOUT
    default_currency: str = DEFAULT_CURRENCY_CODE
    preferences_file: str = os.path.join("data", "preferences.json")
    log_level: str = "INFO"
    port: int = 5001
    debug: bool = False

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigError: If a numeric setting or the currency is invalid.
        """
        if dotenv:
            load_dotenv()

        default_currency = os.getenv("DEFAULT_CURRENCY", DEFAULT_CURRENCY_CODE)
        try:
            get_currency(default_currency)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        return cls(
            api_url=os.getenv("BILLS_API_URL") or None,
            api_prefix=os.getenv("BILLS_API_PREFIX", DEFAULT_PREFIX),
            api_timeout=_number("BILLS_API_TIMEOUT", DEFAULT_TIMEOUT, float),
            default_currency=default_currency.upper(),
            preferences_file=os.getenv(
                "PREFERENCES_FILE", os.path.join("data", "preferences.json")
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=_number("PORT", 5001, int),
            debug=os.getenv("DEBUG", "False").lower() == "true",
        )


def _number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value
