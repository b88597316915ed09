"""Configuration management."""
import logging
import os
from dataclasses import dataclass

from country_pricing.locator import IP_API_COM_URL as DEFAULT_IP_API_COM_URL
from country_pricing.locator import IPAPI_CO_URL as DEFAULT_IPAPI_CO_URL


@dataclass(frozen=True)
class Config:
    CACHE_HOURS: float = 24.0
    API_TIMEOUT: float = 3.0
    IPAPI_CO_URL: str = DEFAULT_IPAPI_CO_URL
    IP_API_COM_URL: str = DEFAULT_IP_API_COM_URL
    REDIS_URL: str = ""
    KEY_PREFIX: str = "country_pricing:"
    READY_SELECTOR: str = "h3"
    READY_TIMEOUT: float = 5.0
    INIT_DELAY: float = 0.5
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            CACHE_HOURS=float(os.environ.get("PRICING_CACHE_HOURS", "24")),
            API_TIMEOUT=float(os.environ.get("PRICING_API_TIMEOUT", "3.0")),
            IPAPI_CO_URL=os.environ.get("PRICING_IPAPI_CO_URL", DEFAULT_IPAPI_CO_URL),
            IP_API_COM_URL=os.environ.get("PRICING_IP_API_COM_URL", DEFAULT_IP_API_COM_URL),
            REDIS_URL=os.environ.get("REDIS_URL", ""),
            KEY_PREFIX=os.environ.get("PRICING_KEY_PREFIX", "country_pricing:"),
            READY_SELECTOR=os.environ.get("PRICING_READY_SELECTOR", "h3"),
            READY_TIMEOUT=float(os.environ.get("PRICING_READY_TIMEOUT", "5.0")),
            INIT_DELAY=float(os.environ.get("PRICING_INIT_DELAY", "0.5")),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
        )

    @property
    def cache_seconds(self) -> float:
        return self.CACHE_HOURS * 3600

    def validate(self):
        if self.CACHE_HOURS <= 0:
            raise ValueError("PRICING_CACHE_HOURS must be positive")
        if self.API_TIMEOUT <= 0:
            raise ValueError("PRICING_API_TIMEOUT must be positive")
        if self.READY_TIMEOUT < 0 or self.INIT_DELAY < 0:
            raise ValueError("PRICING_READY_TIMEOUT and PRICING_INIT_DELAY cannot be negative")
        if not self.IPAPI_CO_URL and not self.IP_API_COM_URL:
            raise ValueError("At least one geolocation provider URL is required")


def configure_logging(level: str = "INFO"):
    """Route package logs through a single handler with the [CountryPricing] prefix."""
    logger = logging.getLogger("country_pricing")
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[CountryPricing] %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
