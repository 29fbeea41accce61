# rxprint/core/config.py
import os
from typing import List
from pathlib import Path

from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class Settings(BaseModel):
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Prescription Print & Export")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api")

    BACKEND_CORS_ORIGINS: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ))

    # ---------- Storage ----------
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "./media")
    EXPORT_DIR: str = os.getenv("EXPORT_DIR", "./media/exports")
    # durable client storage (settings blob + document handoff copy)
    STORE_DATABASE_URI: str = os.getenv(
        "STORE_DATABASE_URI",
        f"sqlite:///{Path(os.getenv('STORAGE_DIR', './media')) / 'rxprint.db'}",
    )

    TIMEZONE: str = os.getenv("TIMEZONE", "Asia/Kabul")

    # ---------- Document branding ----------
    BRAND_WATERMARK: str = os.getenv("BRAND_WATERMARK", "tabibn.com")
    VERIFY_HINT: str = os.getenv("VERIFY_HINT", "Verify at tabibn.com/verify")

    # ---------- Print / preview ----------
    PRINT_FALLBACK_DELAY_MS: int = int(
        os.getenv("PRINT_FALLBACK_DELAY_MS", "500"))
    AUTO_PRINT_DELAY_MS: int = int(os.getenv("AUTO_PRINT_DELAY_MS", "800"))
    PREVIEW_CONTAINER_PX: float = float(
        os.getenv("PREVIEW_CONTAINER_PX", "550"))
    PREVIEW_MAX_SCALE: float = float(os.getenv("PREVIEW_MAX_SCALE", "0.6"))

    # live page sessions kept in memory; least recently used evicted first
    SESSION_STORE_MAX: int = int(os.getenv("SESSION_STORE_MAX", "1024"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()

Path(settings.STORAGE_DIR).resolve().mkdir(parents=True, exist_ok=True)
