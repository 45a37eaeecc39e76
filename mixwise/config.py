from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("MIXWISE_DATABASE_URL", "sqlite:///./mixwise.db")
    catalog_path: Path = Path(
        os.getenv("MIXWISE_CATALOG", str(PROJECT_ROOT / "data" / "catalog.json"))
    )
    substitution_threshold: float = float(os.getenv("MIXWISE_SUBSTITUTION_THRESHOLD", "0.7"))
    log_level: str = os.getenv("MIXWISE_LOG_LEVEL", "INFO")


DEFAULT_SETTINGS = Settings()
