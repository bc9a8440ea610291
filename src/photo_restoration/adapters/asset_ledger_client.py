"""Client for the external collectible ledger."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class AssetLedgerClient(Protocol):
    """Interface for minting and looking up collectibles."""

    async def mint(self, owner: str, metadata_ref: str, photo_id: int) -> str:
        """Mint a collectible for a photo and return its asset id."""

    async def asset_of(self, photo_id: int) -> str | None:
        """Return the asset minted for a photo, if any."""


@dataclass
class HttpxAssetLedgerClient:
    """Collectible ledger client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    api_key: str | None = None

    @classmethod
    def create(
        cls, base_url: str, api_key: str | None = None
    ) -> "HttpxAssetLedgerClient":
        """Create a ledger client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            api_key=api_key,
        )

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    async def mint(self, owner: str, metadata_ref: str, photo_id: int) -> str:
        """Mint via ``POST /assets``."""
        response = await self.http_client.post(
            f"{self.base_url}/assets",
            json={"owner": owner, "metadata_ref": metadata_ref, "photo_id": photo_id},
            headers=self._headers(),
            timeout=30,
        )
        response.raise_for_status()
        asset_id = response.json().get("asset_id")
        if not asset_id:
            raise RuntimeError("Asset ledger returned no asset id")
        return str(asset_id)

    async def asset_of(self, photo_id: int) -> str | None:
        """Look up via ``GET /photos/{photo_id}/asset``."""
        response = await self.http_client.get(
            f"{self.base_url}/photos/{photo_id}/asset",
            headers=self._headers(),
            timeout=10,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        asset_id = response.json().get("asset_id")
        return str(asset_id) if asset_id else None

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
