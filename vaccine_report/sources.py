import csv
import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from .errors import MalformedRow, SourceUnavailable
from .models import LoadResult, VaccinationRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("location", "date", "vaccine", "total_vaccinations")

# plain non-negative decimals only: no sign, exponent, underscores or inf/nan
COUNT = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")


def _parse_count(value: str, missing_markers: Iterable[str]) -> Optional[float]:
    text = value.strip()
    if text in missing_markers:
        return None
    if not COUNT.fullmatch(text):
        raise ValueError(f"not a plain decimal count {text!r}")
    return float(text)


class CsvSource:
    """Delimited vaccinations-by-manufacturer table on disk."""

    def __init__(
        self,
        path: str,
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
        missing_markers: Sequence[str] = ("", "NA", "NaN"),
    ):
        self.path = path
        self.delimiter = delimiter
        self.encoding = encoding
        self.missing_markers = frozenset(missing_markers)

    def _columns(self, header: List[str]) -> Dict[str, int]:
        names = [name.strip() for name in header]
        missing = [col for col in REQUIRED_COLUMNS if col not in names]
        if missing:
            raise MalformedRow(0, header, f"header is missing columns {missing}")
        return {col: names.index(col) for col in REQUIRED_COLUMNS}

    def _parse_row(
        self, row_index: int, row: List[str], width: int, columns: Dict[str, int]
    ) -> VaccinationRecord:
        if len(row) != width:
            raise MalformedRow(row_index, row, f"expected {width} fields, got {len(row)}")
        raw_count = row[columns["total_vaccinations"]]
        try:
            count = _parse_count(raw_count, self.missing_markers)
        except ValueError as exc:
            raise MalformedRow(
                row_index, row, f"invalid total_vaccinations {raw_count!r}"
            ) from exc
        return VaccinationRecord(
            location=row[columns["location"]].strip(),
            date=row[columns["date"]].strip(),
            vaccine=row[columns["vaccine"]].strip(),
            total_vaccinations=count,
            row_index=row_index,
        )

    def fetch(self, lenient: bool = False) -> LoadResult:
        """Read every data row; ``row_index`` counts data rows, blank lines excluded."""
        records: List[VaccinationRecord] = []
        skipped = 0
        row_index = 0
        try:
            with open(self.path, newline="", encoding=self.encoding) as handle:
                reader = csv.reader(handle, delimiter=self.delimiter)
                try:
                    header = next(reader, None)
                except csv.Error as exc:
                    raise MalformedRow(0, [], str(exc)) from exc
                if header is None:
                    logger.info(f"Source {self.path} is empty")
                    return LoadResult(records=[])
                columns = self._columns(header)
                while True:
                    try:
                        row = next(reader, None)
                        if row is None:
                            break
                        if not row:
                            continue
                        row_index += 1
                        records.append(
                            self._parse_row(row_index, row, len(header), columns)
                        )
                    except csv.Error as exc:
                        row_index += 1
                        error = MalformedRow(row_index, [], str(exc))
                        if not lenient:
                            raise error from exc
                        skipped += 1
                        logger.debug(f"Skipping {error}")
                    except MalformedRow as exc:
                        if not lenient:
                            raise
                        skipped += 1
                        logger.debug(f"Skipping {exc}")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailable(self.path, str(exc)) from exc

        if skipped:
            logger.warning(f"Skipped {skipped} malformed rows in {self.path}")
        logger.info(f"Loaded {len(records)} records from {self.path}")
        return LoadResult(records=records, skipped_rows=skipped)


def load_records(
    path: str,
    delimiter: str = ",",
    encoding: str = "utf-8-sig",
    lenient: bool = False,
    missing_markers: Sequence[str] = ("", "NA", "NaN"),
) -> LoadResult:
    source = CsvSource(
        path, delimiter=delimiter, encoding=encoding, missing_markers=missing_markers
    )
    return source.fetch(lenient=lenient)
