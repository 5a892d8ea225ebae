"""OpenFoodFacts product API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class ProductLookupClient(Protocol):
    """Interface for barcode-to-product lookups."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Return the raw product payload for a barcode."""


@dataclass
class HttpxOpenFoodFactsClient(ProductLookupClient):
    """HTTPX-backed OpenFoodFacts client."""

    base_url: str
    http_client: httpx.AsyncClient
    user_agent: str = "calorie-tracker/0.1"

    @classmethod
    def create(cls, base_url: str) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient())

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode; unknown products have status 0."""
        url = f"{self.base_url}/api/v0/product/{barcode}.json"
        response = await self.http_client.get(
            url,
            headers={"User-Agent": self.user_agent},
            timeout=15,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return {"status": 0}
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
