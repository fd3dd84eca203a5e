import math
from typing import Dict, Iterable, List

from .models import CountryTotal, NormalizedRecord, SeriesKey, SeriesPoint


def worldwide_total(records: Iterable[NormalizedRecord]) -> float:
    """Sum of every count, absent counts taken as zero."""
    return math.fsum(rec.total_vaccinations or 0.0 for rec in records)


def totals_by_country(records: Iterable[NormalizedRecord]) -> List[CountryTotal]:
    """Per-location sums, largest first; equal totals keep encounter order."""
    groups: Dict[str, List[float]] = {}
    for rec in records:
        groups.setdefault(rec.location, []).append(rec.total_vaccinations or 0.0)
    totals = [
        CountryTotal(location=location, total=math.fsum(values))
        for location, values in groups.items()
    ]
    return sorted(totals, key=lambda item: item.total, reverse=True)


def series_by_date_manufacturer(
    records: Iterable[NormalizedRecord],
) -> Dict[SeriesKey, float]:
    """Per (date, vaccine) sums over measured counts only.

    Keys iterate by ascending date, then by the order in which each vaccine
    was first seen among the measured records.
    """
    groups: Dict[SeriesKey, List[float]] = {}
    first_seen: Dict[str, int] = {}
    for rec in records:
        if rec.total_vaccinations is None:
            continue
        first_seen.setdefault(rec.vaccine, len(first_seen))
        key = SeriesKey(rec.date, rec.vaccine)
        groups.setdefault(key, []).append(rec.total_vaccinations)

    ordered = sorted(groups, key=lambda key: (key.date, first_seen[key.vaccine]))
    return {key: math.fsum(groups[key]) for key in ordered}


def series_points(series: Dict[SeriesKey, float]) -> List[SeriesPoint]:
    return [
        SeriesPoint(date=key.date, vaccine=key.vaccine, total=total)
        for key, total in series.items()
    ]
