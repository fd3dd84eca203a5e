import logging
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


class Settings(BaseSettings):
    """Runtime configuration for the vaccination report service."""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    data_path: str = "data/vaccinations-by-manufacturer.csv"
    data_dir: str = "data"  # sources requested over HTTP must live here
    delimiter: str = ","
    encoding: str = "utf-8-sig"
    scale: float = 1_000_000  # raw doses -> millions
    lenient: bool = False
    missing_markers: List[str] = ["", "NA", "NaN"]
    log_level: str = "INFO"
    run_on_startup: bool = False


settings = Settings()


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
