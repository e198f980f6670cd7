# src/config/settings.py

"""Central configuration for the package tracker."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the package tracker."""

    # --- Run cycle ---
    POLL_INTERVAL: float = float(
        os.getenv("PACKAGE_TRACKER_POLL_INTERVAL", "1.0")
    )                                   # Seconds between polling triggers
    WATCH_TIMEOUT: float = float(
        os.getenv("PACKAGE_TRACKER_WATCH_TIMEOUT", "30.0")
    )                                   # Seconds a watch waits for listings

    # --- Storage ---
    STORAGE_KEY: str = "packageData"    # Name of the persisted blob
    STORE_BACKEND: str = os.getenv(
        "PACKAGE_TRACKER_STORE", "json"
    )                                   # "json" or "sqlite"
    AVAILABLE_BACKENDS: list[str] = ["json", "sqlite"]

    # --- Annotation ---
    CLASS_NEW: str = "package-new"
    CLASS_OFFER_CHANGED: str = "package-offer-changed"
    CLASS_PRICE_CHANGED: str = "package-price-changed"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    STATE_DIR: Path = Path(
        os.getenv("PACKAGE_TRACKER_STATE_DIR", str(BASE_DIR / "state"))
    )
    STORE_JSON_PATH: Path = STATE_DIR / "storage.json"
    STORE_DB_PATH: Path = STATE_DIR / "storage.db"
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = BASE_DIR / "logs"
