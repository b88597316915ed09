"""Country detection with sequential provider fallback."""
import asyncio
import logging
from typing import Optional, Sequence

import httpx

from country_pricing.models import CountryRecord

log = logging.getLogger(__name__)

IPAPI_CO_URL = "https://ipapi.co/json/"
IP_API_COM_URL = "http://ip-api.com/json/"


class ProviderError(Exception):
    """A single provider could not produce a country."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class TransientNetworkError(ProviderError):
    """Timeout or transport failure."""


class ProviderRejectedError(ProviderError):
    """Well-formed response in which the provider refused the lookup."""


class AllProvidersFailedError(Exception):
    def __init__(self, failures: list[ProviderError]):
        super().__init__("All location APIs failed")
        self.failures = failures


class GeoProvider:
    """One geolocation endpoint. Subclasses map its payload to a CountryRecord."""

    name = "provider"
    code_field = "country_code"
    name_field = "country_name"

    def __init__(self, url: str):
        self.url = url

    def failure_reason(self, data: dict) -> Optional[str]:
        return None

    def parse(self, data) -> CountryRecord:
        if not isinstance(data, dict):
            raise ProviderRejectedError(self.name, "response is not a JSON object")
        reason = self.failure_reason(data)
        if reason:
            raise ProviderRejectedError(self.name, reason)
        code = data.get(self.code_field)
        if not isinstance(code, str) or not code.strip():
            raise ProviderRejectedError(self.name, f"missing {self.code_field}")
        return CountryRecord(code, data.get(self.name_field) or "", self.name)

    async def fetch(self, client: httpx.AsyncClient) -> CountryRecord:
        try:
            resp = await client.get(self.url)
        except httpx.HTTPError as e:
            raise TransientNetworkError(self.name, str(e) or type(e).__name__) from e
        if not resp.is_success:
            raise ProviderRejectedError(self.name, f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderRejectedError(self.name, "invalid JSON") from e
        return self.parse(data)


class IpApiCoProvider(GeoProvider):
    name = "ipapi.co"
    code_field = "country_code"
    name_field = "country_name"

    def __init__(self, url: str = IPAPI_CO_URL):
        super().__init__(url)

    def failure_reason(self, data: dict) -> Optional[str]:
        if data.get("error"):
            return data.get("reason") or "API Error"
        return None


class IpApiComProvider(GeoProvider):
    name = "ip-api.com"
    code_field = "countryCode"
    name_field = "country"

    def __init__(self, url: str = IP_API_COM_URL):
        super().__init__(url)

    def failure_reason(self, data: dict) -> Optional[str]:
        if data.get("status") == "fail":
            return data.get("message") or "API Error"
        return None


def default_providers(config=None) -> list[GeoProvider]:
    if config is None:
        return [IpApiCoProvider(), IpApiComProvider()]
    providers: list[GeoProvider] = []
    if config.IPAPI_CO_URL:
        providers.append(IpApiCoProvider(config.IPAPI_CO_URL))
    if config.IP_API_COM_URL:
        providers.append(IpApiComProvider(config.IP_API_COM_URL))
    return providers


class Locator:
    """Ask each provider in turn; the first success wins.

    Providers are never raced and a failed provider is not retried within the
    same call. Each call gets its own timeout.
    """

    def __init__(
        self,
        providers: Optional[Sequence[GeoProvider]] = None,
        timeout: float = 3.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.providers = list(providers) if providers is not None else default_providers()
        self.timeout = timeout
        self.client = client

    async def _call(self, provider: GeoProvider, client: httpx.AsyncClient) -> CountryRecord:
        try:
            return await asyncio.wait_for(provider.fetch(client), self.timeout)
        except asyncio.TimeoutError as e:
            raise TransientNetworkError(provider.name, f"timed out after {self.timeout}s") from e

    async def detect(self) -> CountryRecord:
        if self.client is not None:
            return await self._detect_with(self.client)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._detect_with(client)

    async def _detect_with(self, client: httpx.AsyncClient) -> CountryRecord:
        failures: list[ProviderError] = []
        for provider in self.providers:
            try:
                record = await self._call(provider, client)
            except ProviderError as e:
                log.error("API call failed: %s", e)
                failures.append(e)
                continue
            log.info("Country detected from %s: %s (%s)", record.source, record.country_code, record.country_name)
            return record
        raise AllProvidersFailedError(failures)
