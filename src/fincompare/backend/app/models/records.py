"""Typed listing records mapped from remote table rows.

Each model validates a row by its remote column names and serialises it with
the camelCase names the UI consumes. Validation is strict: values are passed
through exactly as the store returned them (integers stay integers, nulls stay
null) and a value of the wrong type fails the row instead of being coerced.
Renames are declared per field so a column that disappears or changes name
upstream fails validation instead of silently producing an empty attribute.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, TypeVar, Union

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RecordT = TypeVar("RecordT", bound="ListingRecord")

# Numeric columns keep whichever JSON number type the store sent.
Number = Union[int, float]


class ListingRecord(BaseModel):
    """Base class for immutable listing rows."""

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="ignore",
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    entity: ClassVar[str] = "record"

    id: Union[int, str]
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls: type[RecordT], row: Mapping[str, Any]) -> RecordT:
        """Build a record from a single remote row."""

        return cls.model_validate(dict(row))

    @classmethod
    def from_rows(cls: type[RecordT], rows: Iterable[Mapping[str, Any]]) -> tuple[RecordT, ...]:
        """Map every row, preserving the remote ordering."""

        return tuple(cls.from_row(row) for row in rows)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready camelCase representation."""

        return self.model_dump(mode="json", by_alias=True)


class FixedDeposit(ListingRecord):
    entity: ClassVar[str] = "fixed deposit"

    bank: str
    product_name: str
    interest_rate: Number
    tenure: str | None = None
    min_deposit: Number | None = None
    islamic: bool | None = Field(default=None, validation_alias="is_islamic")
    features: list[str] | None = None
    terms: str | None = None
    affiliate_url: str | None = None


class MoneyMarketFund(ListingRecord):
    entity: ClassVar[str] = "money market fund"

    provider: str
    name: str = Field(validation_alias="fund_name")
    yield_: Number = Field(validation_alias="current_yield", serialization_alias="yield")
    fee: Number | None = Field(default=None, validation_alias="management_fee")
    min_investment: Number | None = None
    liquidity: str | None = None
    shariah: bool | None = Field(default=None, validation_alias="is_shariah")
    risk_level: str | None = None
    fund_size: str | None = None


class StockBroker(ListingRecord):
    entity: ClassVar[str] = "stock broker"

    name: str = Field(validation_alias="broker_name")
    commission_rate: Number
    min_deposit: Number | None = None
    beginner_friendly: bool | None = Field(
        default=None,
        validation_alias="is_beginner_friendly",
        serialization_alias="beginnerFriendly",
    )
    licensed: bool | None = Field(default=None, validation_alias="is_licensed")
    features: list[str] | None = None
    commission_structure: str | None = None
    platform_fee: Number | None = None
    affiliate_url: str | None = None


class CryptoBroker(ListingRecord):
    entity: ClassVar[str] = "crypto broker"

    name: str = Field(validation_alias="broker_name")
    trading_fee: Number
    min_deposit: Number | None = None
    beginner_friendly: bool | None = Field(
        default=None,
        validation_alias="is_beginner_friendly",
        serialization_alias="beginnerFriendly",
    )
    licensed: bool | None = Field(default=None, validation_alias="is_licensed")
    features: list[str] | None = None
    supported_coins: int | None = None
    withdrawal_fee: str | None = None
    affiliate_url: str | None = None


__all__ = [
    "CryptoBroker",
    "FixedDeposit",
    "ListingRecord",
    "MoneyMarketFund",
    "Number",
    "RecordT",
    "StockBroker",
]
