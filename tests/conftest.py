from pathlib import Path

import pytest

HEADER = "location,date,vaccine,total_vaccinations"


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write CSV lines (header included by default) and return the path."""

    def _write(*rows: str, header: str = HEADER, name: str = "vaccinations.csv") -> str:
        path = tmp_path / name
        lines = [header, *rows] if header is not None else list(rows)
        path.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
        return str(path)

    return _write
