import datetime as dt
from typing import List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class VaccinationRecord(BaseModel):
    """Raw row read from the vaccinations-by-manufacturer table."""

    model_config = ConfigDict(frozen=True)

    location: str
    date: str
    vaccine: str
    total_vaccinations: Optional[float] = None
    row_index: Optional[int] = None


class NormalizedRecord(BaseModel):
    """Typed record with the count expressed in millions."""

    model_config = ConfigDict(frozen=True)

    location: str
    date: dt.date
    vaccine: str
    total_vaccinations: Optional[float] = None


class SeriesKey(NamedTuple):
    date: dt.date
    vaccine: str


class CountryTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: str
    total: float


class SeriesPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    vaccine: str
    total: float


class ColumnSummary(BaseModel):
    """One entry of the data dictionary."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    description: str
    n_missing: int
    n_distinct: int
    minimum: Optional[str] = None
    maximum: Optional[str] = None


class LoadResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: List[VaccinationRecord]
    skipped_rows: int = 0


class NormalizationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: List[NormalizedRecord]
    duplicate_keys: int = 0
    dropped_rows: int = 0
    invalid_dates: int = 0
    missing_counts: int = 0


class ReportResult(BaseModel):
    """Snapshot of one successful pipeline run."""

    model_config = ConfigDict(frozen=True)

    source: str
    started_at: dt.datetime
    finished_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
    records_loaded: int
    records_normalized: int
    skipped_rows: int = 0
    dropped_rows: int = 0
    invalid_dates: int = 0
    duplicate_keys: int = 0
    missing_counts: int = 0
    worldwide_total: float
    countries: List[CountryTotal]
    series: List[SeriesPoint]
    codebook: List[ColumnSummary]
