from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

LOGGER_NAME = "csv-json-converter"


def _parse_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _parse_str(value: str | None, default: str) -> str:
    if value is None or not value.strip():
        return default
    return value


@dataclass
class Settings:
    header_prefix_bytes: int = 16 * 1024
    table_preview_rows: int = 10
    json_preview_rows: int = 50
    title_pattern: str = "{title}"
    default_section: str = "main"
    export_dir: Path = Path(tempfile.gettempdir())
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build settings from CSV2JSON_* environment variables."""
    defaults = Settings()
    return Settings(
        header_prefix_bytes=max(1, _parse_int(os.getenv("CSV2JSON_HEADER_PREFIX_BYTES"), defaults.header_prefix_bytes)),
        table_preview_rows=max(1, _parse_int(os.getenv("CSV2JSON_TABLE_PREVIEW_ROWS"), defaults.table_preview_rows)),
        json_preview_rows=max(1, _parse_int(os.getenv("CSV2JSON_JSON_PREVIEW_ROWS"), defaults.json_preview_rows)),
        title_pattern=_parse_str(os.getenv("CSV2JSON_TITLE_PATTERN"), defaults.title_pattern),
        default_section=_parse_str(os.getenv("CSV2JSON_DEFAULT_SECTION"), defaults.default_section).strip(),
        export_dir=Path(_parse_str(os.getenv("CSV2JSON_EXPORT_DIR"), str(defaults.export_dir))),
        log_level=_parse_str(os.getenv("CSV2JSON_LOG_LEVEL"), defaults.log_level).upper(),
    )


settings = load_settings()
