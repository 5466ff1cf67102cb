import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

PLACEHOLDER_COVER = "https://images.unsplash.com/photo-1544947950-fa07a98d237f?w=300&h=400&fit=crop"


@dataclass
class Settings:
    # Server
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "3000"))

    # Storage
    books_file: str = os.getenv("BOOKS_FILE", str(BASE_DIR / "books.json"))
    static_dir: str = os.getenv("STATIC_DIR", str(BASE_DIR / "public"))

    # Catalog defaults
    placeholder_cover: str = os.getenv("PLACEHOLDER_COVER", PLACEHOLDER_COVER)
    reservation_days: int = int(os.getenv("RESERVATION_DAYS", "14"))

    # Application
    app_name: str = os.getenv("APP_NAME", "Library Catalog")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the server and the CLI."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
