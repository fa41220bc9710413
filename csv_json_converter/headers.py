from __future__ import annotations

import logging
from typing import List

from .config import LOGGER_NAME
from .lines import parse_csv_line

logger = logging.getLogger(LOGGER_NAME)


def normalize_newlines(text: str) -> str:
    return (text or '').replace('\r\n', '\n')


def non_blank_lines(text: str) -> List[str]:
    """Lines with non-whitespace content, in file order."""
    return [line for line in normalize_newlines(text).split('\n') if line.strip()]


def resolve_headers(line: str) -> List[str]:
    """Parse a header line into lower-cased keys.

    Blank headers become `column_<n>` (1-based position).
    """
    headers = [h if h else f"column_{i + 1}" for i, h in enumerate(parse_csv_line(line))]
    return [str(h).lower() for h in headers]


def extract_headers(text: str) -> List[str]:
    """Header list from the first non-blank line, or [] when there is none."""
    for line in normalize_newlines(text).split('\n'):
        if line.strip():
            headers = resolve_headers(line)
            logger.debug("Detected %d headers: %s", len(headers), headers)
            return headers
    return []
