"""Data types shared by the cache, locator, catalog and patcher."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class PriceMarker(str, Enum):
    """Stand-in for a price field that has no literal number."""
    ENTERPRISE = "Enterprise"
    CONTACT = "Contact us"
    CUSTOM = "Custom"


Amount = Union[int, float, PriceMarker]


@dataclass(frozen=True)
class CountryRecord:
    country_code: str
    country_name: str = field(default="", compare=False)
    source: str = field(default="manual", compare=False)

    def __post_init__(self):
        object.__setattr__(self, "country_code", (self.country_code or "").strip().upper())

    def to_dict(self) -> dict:
        return {
            "countryCode": self.country_code,
            "countryName": self.country_name,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CountryRecord":
        code = data.get("countryCode")
        if not isinstance(code, str) or not code.strip():
            raise ValueError("country record has no countryCode")
        return cls(code, data.get("countryName") or "", data.get("source") or "unknown")


@dataclass(frozen=True)
class CachedCountry:
    record: CountryRecord
    captured_at: int  # epoch milliseconds


@dataclass(frozen=True)
class PriceEntry:
    main_price: Amount
    monthly_price: Amount
    savings: Amount
    currency: str
    symbol: str


@dataclass(frozen=True)
class PriceTable:
    region: str
    currency: str
    entries: dict[str, PriceEntry] = field(default_factory=dict)

    @property
    def plans(self) -> list[str]:
        return list(self.entries)

    def __getitem__(self, plan: str) -> PriceEntry:
        return self.entries[plan]


@dataclass(frozen=True)
class AppliedPricingState:
    region: str
    currency: str


def format_amount(value: Amount) -> str:
    """Render a numeric price without a trailing '.0'."""
    if isinstance(value, PriceMarker):
        return value.value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
