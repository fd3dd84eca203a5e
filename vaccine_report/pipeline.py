import logging
import threading
from datetime import datetime
from typing import Optional, Sequence

from .aggregate import (
    series_by_date_manufacturer,
    series_points,
    totals_by_country,
    worldwide_total,
)
from .codebook import describe_records
from .errors import PipelineError
from .models import ReportResult
from .normalize import normalize_records
from .sources import load_records

logger = logging.getLogger(__name__)


class ReportPipeline:
    """Load, normalize and aggregate a vaccinations-by-manufacturer table."""

    def __init__(
        self,
        source_path: str,
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
        scale: float = 1_000_000,
        lenient: bool = False,
        missing_markers: Sequence[str] = ("", "NA", "NaN"),
    ):
        self.source_path = source_path
        self.delimiter = delimiter
        self.encoding = encoding
        self.scale = scale
        self.lenient = lenient
        self.missing_markers = tuple(missing_markers)
        self.last_result: Optional[ReportResult] = None
        self.last_error: Optional[str] = None
        self._lock = threading.Lock()

    def run(self, source_path: Optional[str] = None) -> ReportResult:
        """Build a new snapshot; runs from several threads are serialized."""
        path = source_path or self.source_path
        with self._lock:
            started_at = datetime.utcnow()
            logger.info(f"Starting report run for {path}")
            try:
                result = self._build(path, started_at)
            except PipelineError as exc:
                self.last_error = str(exc)
                logger.error(f"Report run for {path} failed: {exc}")
                raise

            self.last_result = result
            self.last_error = None
        logger.info(
            f"Report run finished: {result.records_normalized} records, "
            f"{len(result.countries)} countries, {len(result.series)} series points"
        )
        return result

    def _build(self, path: str, started_at: datetime) -> ReportResult:
        loaded = load_records(
            path,
            delimiter=self.delimiter,
            encoding=self.encoding,
            lenient=self.lenient,
            missing_markers=self.missing_markers,
        )
        normalized = normalize_records(
            loaded.records, scale=self.scale, lenient=self.lenient
        )
        records = normalized.records
        series = series_by_date_manufacturer(records)

        return ReportResult(
            source=path,
            started_at=started_at,
            finished_at=datetime.utcnow(),
            records_loaded=len(loaded.records),
            records_normalized=len(records),
            skipped_rows=loaded.skipped_rows,
            dropped_rows=normalized.dropped_rows,
            invalid_dates=normalized.invalid_dates,
            duplicate_keys=normalized.duplicate_keys,
            missing_counts=normalized.missing_counts,
            worldwide_total=worldwide_total(records),
            countries=totals_by_country(records),
            series=series_points(series),
            codebook=describe_records(records),
        )
