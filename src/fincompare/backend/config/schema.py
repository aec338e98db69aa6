"""Pydantic models describing the tax year configuration schema."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBracket(ImmutableModel):
    """A single progressive band; ``rate`` is expressed in percent."""

    lower_bound: float = Field(alias="lower")
    upper_bound: float | None = Field(default=None, alias="upper")
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.rate < 0:
            raise ConfigurationError("Tax rates must be non-negative")
        if self.lower_bound < 0:
            raise ConfigurationError("Lower bounds must be non-negative values")
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ConfigurationError("Upper bounds must exceed the lower bound")
        return self

    def contains(self, amount: float) -> bool:
        """Return ``True`` when ``amount`` falls inside ``[lower, upper]``."""

        if amount < self.lower_bound:
            return False
        return self.upper_bound is None or amount <= self.upper_bound


def ensure_contiguous_brackets(brackets: Sequence[TaxBracket]) -> None:
    """Raise ``ConfigurationError`` unless ``brackets`` tile ``[0, inf)`` in order."""

    if not brackets:
        raise ConfigurationError("At least one tax bracket must be defined")
    if brackets[0].lower_bound != 0:
        raise ConfigurationError("The first tax bracket must start at zero")

    previous: TaxBracket | None = None
    for bracket in brackets:
        if previous is not None:
            if previous.upper_bound is None:
                raise ConfigurationError("Only the final tax bracket may be open-ended")
            if bracket.lower_bound != previous.upper_bound:
                raise ConfigurationError(
                    "Tax brackets must be contiguous and in ascending order "
                    f"(expected lower bound {previous.upper_bound}, "
                    f"found {bracket.lower_bound})"
                )
        previous = bracket

    if brackets[-1].upper_bound is not None:
        raise ConfigurationError("Final tax bracket must have an open upper bound")


class ReliefCategoryConfig(ImmutableModel):
    """Capped deduction offered to every taxpayer for the year."""

    id: str
    label: str
    cap: float
    default_amount: float = 0.0
    description: str = ""

    @field_validator("id")
    @classmethod
    def _normalise_id(cls, value: str) -> str:
        normalised = value.strip()
        if not normalised:
            raise ConfigurationError("Relief identifiers must be non-empty")
        return normalised

    @model_validator(mode="after")
    def _validate_amounts(self) -> ReliefCategoryConfig:
        if self.cap < 0:
            raise ConfigurationError(f"Relief '{self.id}' cap must be non-negative")
        if self.default_amount < 0:
            raise ConfigurationError(
                f"Relief '{self.id}' default amount must be non-negative"
            )
        return self


class IncomeTaxConfig(ImmutableModel):
    """Bracket table and relief categories for resident income tax."""

    brackets: Sequence[TaxBracket]
    reliefs: Sequence[ReliefCategoryConfig] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _validate_sections(self) -> IncomeTaxConfig:
        ensure_contiguous_brackets(self.brackets)
        return self

    def relief(self, relief_id: str) -> ReliefCategoryConfig:
        for category in self.reliefs:
            if category.id == relief_id:
                return category
        raise KeyError(relief_id)


class YearConfiguration(ImmutableModel):
    """Structured representation of a tax year configuration."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    income_tax: IncomeTaxConfig

    @model_validator(mode="before")
    @classmethod
    def _prepare(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        if not isinstance(prepared.get("income_tax"), Mapping):
            raise ConfigurationError("Configuration must include an 'income_tax' section")

        return prepared

    @property
    def currency(self) -> str:
        return str(self.meta.get("currency", "RM"))


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available tax year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "ConfigurationError",
    "ImmutableModel",
    "IncomeTaxConfig",
    "ReliefCategoryConfig",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "YearConfiguration",
    "ensure_contiguous_brackets",
]
