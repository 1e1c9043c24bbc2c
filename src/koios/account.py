"""Account endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from koios.networking.client import Client
from koios.networking.errors import InvalidArgumentError
from koios.networking.types import Result, many, one
from koios.values import amount, plain


@dataclass(frozen=True)
class AccountListItem:
    stake_address: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AccountListItem:
        return cls(stake_address=data["id"])

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.stake_address}


@dataclass(frozen=True)
class AccountInfo:
    """Balances and delegation of a payment or stake address."""

    status: str = ""
    delegated_pool: str = ""
    total_balance: Decimal | None = None
    utxo: Decimal | None = None
    rewards: Decimal | None = None
    withdrawals: Decimal | None = None
    rewards_available: Decimal | None = None
    reserves: Decimal | None = None
    treasury: Decimal | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> AccountInfo:
        return cls(
            status=data.get("status") or "",
            delegated_pool=data.get("delegated_pool") or "",
            total_balance=amount(data.get("total_balance")),
            utxo=amount(data.get("utxo")),
            rewards=amount(data.get("rewards")),
            withdrawals=amount(data.get("withdrawals")),
            rewards_available=amount(data.get("rewards_available")),
            reserves=amount(data.get("reserves")),
            treasury=amount(data.get("treasury")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {key: plain(value) for key, value in vars(self).items()}


def get_account_list(
    client: Client, *, timeout: float | None = None
) -> Result[list[AccountListItem]]:
    """All registered stake addresses."""
    return client.fetch(
        "GET",
        "/account_list",
        decode=many(AccountListItem.from_json),
        timeout=timeout,
    )


def get_account_info(
    client: Client, address: str, *, timeout: float | None = None
) -> Result[AccountInfo]:
    if not address:
        return Result().fail(None, InvalidArgumentError("missing address"))
    return client.fetch(
        "GET",
        "/account_info",
        {"_address": address},
        decode=one(AccountInfo.from_json),
        timeout=timeout,
    )
