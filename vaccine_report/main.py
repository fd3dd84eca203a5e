from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from .config import configure_logging, settings
from .errors import InvalidDate, MalformedRow, SourceUnavailable
from .models import ReportResult
from .pipeline import ReportPipeline

configure_logging(settings.log_level)

pipeline = ReportPipeline(
    settings.data_path,
    delimiter=settings.delimiter,
    encoding=settings.encoding,
    scale=settings.scale,
    lenient=settings.lenient,
    missing_markers=settings.missing_markers,
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_on_startup:
        await run_in_threadpool(pipeline.run)
    yield


app = FastAPI(
    title="Vaccination Report",
    version="0.1.0",
    description="Worldwide, per-country and per-manufacturer COVID-19 vaccination totals.",
    lifespan=lifespan,
)


def _require_result() -> ReportResult:
    if pipeline.last_result is None:
        raise HTTPException(status_code=404, detail="No successful report run yet")
    return pipeline.last_result


def _resolve_source(source: Optional[str]) -> Optional[str]:
    """Map a requested source onto a file inside the configured data directory."""
    if source is None:
        return None
    data_dir = Path(settings.data_dir).resolve()
    path = (data_dir / source).resolve()
    if not path.is_relative_to(data_dir):
        raise HTTPException(
            status_code=400, detail="Source must be inside the data directory"
        )
    return str(path)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/report/run")
async def report_run(source: Optional[str] = None) -> dict:
    path = _resolve_source(source)
    try:
        result = await run_in_threadpool(pipeline.run, path)
    except SourceUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except MalformedRow as exc:
        detail = {"error": "MalformedRow", "row_index": exc.row_index, "reason": exc.reason}
        # header rows are never echoed back
        if exc.row_index:
            detail["raw"] = exc.raw
        raise HTTPException(status_code=422, detail=detail) from exc
    except InvalidDate as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": "InvalidDate", "row_index": exc.row_index, "raw": exc.raw},
        ) from exc
    return {"status": "completed", "result": result}


@app.get("/report/status")
async def report_status() -> dict:
    return {"last_run": pipeline.last_result, "last_error": pipeline.last_error}


@app.get("/report/worldwide")
async def report_worldwide() -> dict:
    result = _require_result()
    return {"worldwide_total": result.worldwide_total, "unit": "millions"}


@app.get("/report/countries")
async def report_countries(limit: Optional[int] = Query(default=None, ge=1)) -> dict:
    result = _require_result()
    countries = result.countries if limit is None else result.countries[:limit]
    return {"countries": countries}


@app.get("/report/series")
async def report_series(vaccine: Optional[str] = None) -> dict:
    result = _require_result()
    series = result.series
    if vaccine is not None:
        series = [point for point in series if point.vaccine == vaccine]
    return {"series": series}


@app.get("/report/codebook")
async def report_codebook() -> dict:
    return {"columns": _require_result().codebook}
