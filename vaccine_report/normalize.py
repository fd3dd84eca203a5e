import datetime as dt
import logging
import re
from typing import List, Optional, Sequence, Set, Tuple

from .errors import InvalidDate
from .models import NormalizationResult, NormalizedRecord, VaccinationRecord

logger = logging.getLogger(__name__)

ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_date(raw: str, row_index: Optional[int] = None) -> dt.date:
    """Parse a strict ``YYYY-MM-DD`` date, raising InvalidDate otherwise."""
    if not ISO_DATE.fullmatch(raw):
        raise InvalidDate(row_index, raw)
    try:
        return dt.date.fromisoformat(raw)
    except ValueError as exc:
        raise InvalidDate(row_index, raw) from exc


def scale_count(count: Optional[float], scale: float) -> Optional[float]:
    if count is None:
        return None
    return count / scale


def normalize_records(
    records: Sequence[VaccinationRecord],
    scale: float = 1_000_000,
    lenient: bool = False,
) -> NormalizationResult:
    """Convert raw rows into typed records counted in millions.

    Rows without a location, date or vaccine are dropped. Duplicate
    (location, date, vaccine) keys are counted and reported but kept, so a
    non-zero ``duplicate_keys`` means downstream sums include both rows.
    Absent counts stay ``None``.
    """
    normalized: List[NormalizedRecord] = []
    seen: Set[Tuple[str, dt.date, str]] = set()
    duplicates = 0
    dropped = 0
    invalid = 0
    missing = 0

    for record in records:
        if not (record.location and record.date and record.vaccine):
            dropped += 1
            continue
        try:
            date = parse_date(record.date, record.row_index)
        except InvalidDate as exc:
            if not lenient:
                raise
            invalid += 1
            logger.debug(f"Skipping {exc}")
            continue

        key = (record.location, date, record.vaccine)
        if key in seen:
            duplicates += 1
        seen.add(key)

        count = scale_count(record.total_vaccinations, scale)
        if count is None:
            missing += 1
        normalized.append(
            NormalizedRecord(
                location=record.location,
                date=date,
                vaccine=record.vaccine,
                total_vaccinations=count,
            )
        )

    if dropped:
        logger.warning(f"Dropped {dropped} rows with missing location, date or vaccine")
    if invalid:
        logger.warning(f"Skipped {invalid} rows with invalid dates")
    if duplicates:
        logger.warning(
            f"Found {duplicates} duplicate (location, date, vaccine) keys; "
            "their counts are summed as separate records"
        )
    logger.info(f"Normalized {len(normalized)} records ({missing} without a count)")

    return NormalizationResult(
        records=normalized,
        duplicate_keys=duplicates,
        dropped_rows=dropped,
        invalid_dates=invalid,
        missing_counts=missing,
    )
