"""Data dictionary for the normalized vaccination table."""

from typing import Any, Callable, List, Optional, Sequence, Tuple

from .models import ColumnSummary, NormalizedRecord

# name, type label, description, accessor
COLUMNS: Tuple[Tuple[str, str, str, Callable[[NormalizedRecord], Any]], ...] = (
    (
        "location",
        "text",
        "Country or region reporting the vaccinations",
        lambda rec: rec.location,
    ),
    (
        "date",
        "date",
        "Reporting date (YYYY-MM-DD)",
        lambda rec: rec.date,
    ),
    (
        "vaccine",
        "text",
        "Vaccine manufacturer label, possibly naming several manufacturers",
        lambda rec: rec.vaccine,
    ),
    (
        "total_vaccinations",
        "number",
        "Cumulative doses administered to date, in millions",
        lambda rec: rec.total_vaccinations,
    ),
)

ORDERED_TYPES = {"date", "number"}


def _bound(values: List[Any], pick: Callable) -> Optional[str]:
    if not values:
        return None
    value = pick(values)
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def describe_column(
    name: str,
    type_: str,
    description: str,
    values: Sequence[Any],
) -> ColumnSummary:
    present = [value for value in values if value is not None]
    ordered = type_ in ORDERED_TYPES
    return ColumnSummary(
        name=name,
        type=type_,
        description=description,
        n_missing=len(values) - len(present),
        n_distinct=len(set(present)),
        minimum=_bound(present, min) if ordered else None,
        maximum=_bound(present, max) if ordered else None,
    )


def describe_records(records: Sequence[NormalizedRecord]) -> List[ColumnSummary]:
    return [
        describe_column(name, type_, description, [get(rec) for rec in records])
        for name, type_, description, get in COLUMNS
    ]
