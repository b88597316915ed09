"""Static price tables per region."""
from typing import Iterable, Optional

from country_pricing.models import PriceEntry, PriceMarker, PriceTable

DEFAULT_REGION = "DEFAULT"

PLANS = ("branding", "brand_video", "video")


def _table(region: str, currency: str, symbol: str, **plans) -> PriceTable:
    return PriceTable(
        region=region,
        currency=currency,
        entries={
            plan: PriceEntry(main, monthly, savings, currency, symbol)
            for plan, (main, monthly, savings) in plans.items()
        },
    )


DEFAULT_PRICING = _table(
    DEFAULT_REGION, "USD", "$",
    branding=(897, 448, 448),
    brand_video=(1279, 448, 648),
    video=(997, 498, 498),
)

AUSTRALIA_PRICING = _table(
    "AU", "AUD", "A$",
    branding=(1500, 750, 750),
    brand_video=(3500, 1750, 1750),
    video=(2500, 1250, 1250),
)

BANGLADESH_PRICING = _table(
    "BD", "BDT", "৳",
    branding=(5000, 2500, 2500),
    brand_video=(10000, 5000, 5000),
    video=(PriceMarker.ENTERPRISE, PriceMarker.CONTACT, PriceMarker.CUSTOM),
)


class PriceCatalog:
    """Region identifier → PriceTable. Unknown regions get the default table."""

    def __init__(self, default: PriceTable, tables: Iterable[PriceTable] = ()):
        self.default = default
        self._tables: dict[str, PriceTable] = {}
        for table in tables:
            missing = [p for p in default.entries if p not in table.entries]
            if missing:
                raise ValueError(f"Region {table.region} is missing plans: {', '.join(missing)}")
            self._tables[table.region.upper()] = table

    def region_for(self, country_code: Optional[str]) -> str:
        code = (country_code or "").strip().upper()
        return code if code in self._tables else self.default.region

    def lookup(self, region: Optional[str]) -> PriceTable:
        return self._tables.get((region or "").strip().upper(), self.default)

    def is_default(self, region: Optional[str]) -> bool:
        return self.lookup(region) is self.default


def build_catalog() -> PriceCatalog:
    return PriceCatalog(DEFAULT_PRICING, [AUSTRALIA_PRICING, BANGLADESH_PRICING])
