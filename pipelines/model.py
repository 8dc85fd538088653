"""Canonical data model for the published series snapshot and index files."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Observation(BaseModel):
    """One dated value of a series."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    date: str = Field(..., description="Observation date as published upstream (YYYY-MM-DD).")
    value: float = Field(..., description="Observed value normalized to float.")

    @field_validator("value")
    @classmethod
    def _finite(cls, value: float) -> float:
        if math.isnan(value) or math.isinf(value):
            raise ValueError("observation value must be finite")
        return value


class SeriesSnapshot(BaseModel):
    """Persisted view of the most recent observations of one series."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    series_id: str = Field(..., alias="seriesId", description="Upstream series code.")
    freq: str | None = Field(
        default=None, description="Requested frequency ('w') or 'native' for no resample."
    )
    updated_at: str = Field(..., alias="updatedAt", description="Timestamp of the fetch.")
    points: int = Field(..., ge=0, description="Number of retained observations.")
    data: tuple[Observation, ...] = Field(
        default=(), description="Observations in ascending date order."
    )

    @model_validator(mode="after")
    def _check_invariants(self) -> "SeriesSnapshot":
        if self.points != len(self.data):
            raise ValueError(
                f"points={self.points} does not match {len(self.data)} observations"
            )
        for previous, current in zip(self.data, self.data[1:]):
            if current.date <= previous.date:
                raise ValueError(
                    f"observations must be strictly ascending by date "
                    f"({previous.date!r} then {current.date!r})"
                )
        return self

    @classmethod
    def from_observations(
        cls,
        series_id: str,
        data: list[Observation] | tuple[Observation, ...],
        *,
        updated_at: str,
        freq: str | None = None,
    ) -> "SeriesSnapshot":
        return cls(
            series_id=series_id,
            freq=freq,
            updated_at=updated_at,
            points=len(data),
            data=tuple(data),
        )

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class IndexDocument(BaseModel):
    """Catalog of published series and the time of the last refresh."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    updated_at: str = Field(..., alias="updatedAt")
    series: tuple[str, ...] = Field(default=())

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


__all__ = ["Observation", "SeriesSnapshot", "IndexDocument"]
