"""Country-based price localization for a rendered marketing page."""
from country_pricing.catalog import PriceCatalog, build_catalog
from country_pricing.config import Config, configure_logging
from country_pricing.controls import CountryPricing
from country_pricing.orchestrator import PricingState, PricingSystem, create_pricing_system

__all__ = [
    "Config",
    "CountryPricing",
    "PriceCatalog",
    "PricingState",
    "PricingSystem",
    "build_catalog",
    "configure_logging",
    "create_pricing_system",
]
