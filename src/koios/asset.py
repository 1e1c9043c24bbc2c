"""Asset endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from koios.networking.client import Client
from koios.networking.errors import InvalidArgumentError
from koios.networking.types import Result, many, one
from koios.values import amount, plain


@dataclass(frozen=True)
class AssetListItem:
    policy_id: str
    names_hex: list[str] = field(default_factory=list)
    names_ascii: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AssetListItem:
        names = data.get("asset_names") or {}
        return cls(
            policy_id=data["policy_id"],
            names_hex=list(names.get("hex") or []),
            names_ascii=list(names.get("ascii") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy_id": self.policy_id,
            "asset_names": {"hex": self.names_hex, "ascii": self.names_ascii},
        }


@dataclass(frozen=True)
class AssetHolder:
    """Payment address holding a token, with its balance."""

    payment_address: str
    quantity: Decimal | None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AssetHolder:
        return cls(
            payment_address=data["payment_address"],
            quantity=amount(data.get("quantity")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "payment_address": self.payment_address,
            "quantity": plain(self.quantity),
        }


@dataclass(frozen=True)
class TokenRegistryMetadata:
    """Metadata registered on the Cardano Token Registry."""

    decimals: int = 0
    description: str = ""
    logo: str = ""
    name: str = ""
    ticker: str = ""
    url: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TokenRegistryMetadata:
        return cls(
            decimals=int(data.get("decimals") or 0),
            description=data.get("description") or "",
            logo=data.get("logo") or "",
            name=data.get("name") or "",
            ticker=data.get("ticker") or "",
            url=data.get("url") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "decimals": self.decimals,
            "description": self.description,
            "logo": self.logo,
            "name": self.name,
            "ticker": self.ticker,
            "url": self.url,
        }


@dataclass(frozen=True)
class AssetInfo:
    policy_id: str
    asset_name: str
    asset_name_ascii: str = ""
    fingerprint: str = ""
    total_supply: Decimal | None = None
    creation_time: str = ""
    minting_tx_metadata: Any = None
    token_registry_metadata: TokenRegistryMetadata | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AssetInfo:
        registry = data.get("token_registry_metadata")
        return cls(
            policy_id=data["policy_id"],
            asset_name=data.get("asset_name") or "",
            asset_name_ascii=data.get("asset_name_ascii") or "",
            fingerprint=data.get("fingerprint") or "",
            total_supply=amount(data.get("total_supply")),
            creation_time=str(data.get("creation_time") or ""),
            minting_tx_metadata=data.get("minting_tx_metadata"),
            token_registry_metadata=(
                TokenRegistryMetadata.from_json(registry) if registry else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy_id": self.policy_id,
            "asset_name": self.asset_name,
            "asset_name_ascii": self.asset_name_ascii,
            "fingerprint": self.fingerprint,
            "total_supply": plain(self.total_supply),
            "creation_time": self.creation_time,
            "minting_tx_metadata": self.minting_tx_metadata,
            "token_registry_metadata": (
                self.token_registry_metadata.to_dict()
                if self.token_registry_metadata
                else None
            ),
        }


@dataclass(frozen=True)
class AssetSummary:
    policy_id: str
    asset_name: str
    staked_wallets: int = 0
    total_transactions: int = 0
    unstaked_addresses: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AssetSummary:
        return cls(
            policy_id=data["policy_id"],
            asset_name=data.get("asset_name") or "",
            staked_wallets=int(data.get("staked_wallets") or 0),
            total_transactions=int(data.get("total_transactions") or 0),
            unstaked_addresses=int(data.get("unstaked_addresses") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy_id": self.policy_id,
            "asset_name": self.asset_name,
            "staked_wallets": self.staked_wallets,
            "total_transactions": self.total_transactions,
            "unstaked_addresses": self.unstaked_addresses,
        }


@dataclass(frozen=True)
class AssetTxs:
    """Transaction hashes for an asset, latest first."""

    policy_id: str
    asset_name: str
    tx_hashes: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AssetTxs:
        return cls(
            policy_id=data["policy_id"],
            asset_name=data.get("asset_name") or "",
            tx_hashes=list(data.get("tx_hashes") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy_id": self.policy_id,
            "asset_name": self.asset_name,
            "tx_hashes": self.tx_hashes,
        }


def _asset_query(policy_id: str, asset_name: str) -> dict[str, str]:
    if not policy_id:
        raise InvalidArgumentError("missing policy id")
    return {"_asset_policy": policy_id, "_asset_name": asset_name}


def get_asset_list(
    client: Client, *, timeout: float | None = None
) -> Result[list[AssetListItem]]:
    """List all native assets (paginated by the service)."""
    return client.fetch(
        "GET",
        "/asset_list",
        decode=many(AssetListItem.from_json),
        timeout=timeout,
    )


def get_asset_address_list(
    client: Client,
    policy_id: str,
    asset_name: str,
    *,
    timeout: float | None = None,
) -> Result[list[AssetHolder]]:
    """List all addresses holding the given asset."""
    try:
        query = _asset_query(policy_id, asset_name)
    except InvalidArgumentError as exc:
        return Result().fail(None, exc)
    return client.fetch(
        "GET",
        "/asset_address_list",
        query,
        decode=many(AssetHolder.from_json),
        timeout=timeout,
    )


def get_asset_info(
    client: Client,
    policy_id: str,
    asset_name: str,
    *,
    timeout: float | None = None,
) -> Result[AssetInfo]:
    """Information about an asset, including first minting and registry data."""
    try:
        query = _asset_query(policy_id, asset_name)
    except InvalidArgumentError as exc:
        return Result().fail(None, exc)
    return client.fetch(
        "GET",
        "/asset_info",
        query,
        decode=one(AssetInfo.from_json),
        timeout=timeout,
    )


def get_asset_summary(
    client: Client,
    policy_id: str,
    asset_name: str,
    *,
    timeout: float | None = None,
) -> Result[AssetSummary]:
    try:
        query = _asset_query(policy_id, asset_name)
    except InvalidArgumentError as exc:
        return Result().fail(None, exc)
    return client.fetch(
        "GET",
        "/asset_summary",
        query,
        decode=one(AssetSummary.from_json),
        timeout=timeout,
    )


def get_asset_txs(
    client: Client,
    policy_id: str,
    asset_name: str,
    *,
    timeout: float | None = None,
) -> Result[AssetTxs]:
    """All transaction hashes involving an asset, newest first."""
    try:
        query = _asset_query(policy_id, asset_name)
    except InvalidArgumentError as exc:
        return Result().fail(None, exc)
    return client.fetch(
        "GET",
        "/asset_txs",
        query,
        decode=one(AssetTxs.from_json),
        timeout=timeout,
    )
