"""Shared fixtures: a pricing page, a controllable clock and a scripted locator."""
import pytest

from country_pricing.cache import CacheStore
from country_pricing.locator import AllProvidersFailedError, ProviderError
from country_pricing.storage import KeyValueStore

PRICING_PAGE = """<html><body>
<div class="plans">
  <div class="plan">
    <h3>Branding <span style="color: rgb(182, 185, 59)">USD 897</span> or USD 448/month</h3>
    <p>SAVE USD 448/mo for 2 months!</p>
  </div>
  <div class="plan">
    <h3>Brand+video <span style="color: rgb(182, 185, 59)">USD 1279</span> or USD 448/month</h3>
    <p>SAVE USD 648/mo for 2 months!</p>
  </div>
  <div class="plan">
    <h3>Premium video <span style="color: rgb(182, 185, 59)">USD 997</span> or USD 498/month</h3>
    <p>SAVE USD 498/mo for 2 months!</p>
  </div>
</div>
</body></html>"""

NOW = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, hours: float):
        self.now += hours * 3600


class ScriptedLocator:
    """Returns a fixed record, or fails like a locator whose providers all failed."""

    def __init__(self, record=None, error=None):
        self.record = record
        self.error = error
        self.calls = 0

    async def detect(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.record is None:
            raise AllProvidersFailedError([ProviderError("ipapi.co", "HTTP 500")])
        return self.record


@pytest.fixture
def page_html():
    return PRICING_PAGE


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return KeyValueStore()


@pytest.fixture
def cache(store, clock):
    return CacheStore(store, clock=clock)
