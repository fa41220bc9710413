from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import LOGGER_NAME, settings
from .errors import EmptyInputError, UnexpectedParseError
from .headers import extract_headers, non_blank_lines, resolve_headers
from .lines import parse_csv_line
from .sections import SectionRegistry
from .titles import Clock, TitleDeduplicator, build_title

logger = logging.getLogger(LOGGER_NAME)

BASE_FIELDS = ('title', 'content')

Record = Dict[str, Any]


def fit_row(values: Sequence[str], width: int) -> List[str]:
    """Pad with empty strings or truncate so the row is exactly `width` wide."""
    fitted = list(values[:width])
    fitted.extend([''] * (width - len(fitted)))
    return fitted


def build_row(headers: Sequence[str], values: Sequence[str]) -> Dict[str, str]:
    return dict(zip(headers, fit_row(values, len(headers))))


def build_sectioned_data(row: Dict[str, str], headers: Sequence[str], registry: SectionRegistry) -> Dict[str, Dict[str, str]]:
    data: Dict[str, Dict[str, str]] = {s.name: {} for s in registry.sections}
    for header in headers:
        if header in BASE_FIELDS:
            continue
        # Sections sharing a name share one sub-object.
        section = registry.section_for(header)
        data.setdefault(section.name, {})[header] = row.get(header, '')
    return data


def build_record(
    headers: Sequence[str],
    values: Sequence[str],
    registry: SectionRegistry,
    pattern: str,
    index: int,
    titles: Optional[TitleDeduplicator] = None,
    clock: Clock = datetime.now,
) -> Record:
    row = build_row(headers, values)
    title = build_title(pattern, row, headers, index, clock)
    if titles is not None:
        title = titles.claim(title)
    return {
        'title': title,
        'content': row.get('content', ''),
        'data': build_sectioned_data(row, headers, registry),
    }


def convert_text(
    text: str,
    registry: SectionRegistry,
    pattern: str,
    clock: Clock = datetime.now,
) -> Tuple[List[str], List[Record]]:
    """Parse a whole CSV document into (headers, records).

    Rows are processed in file order; titles are de-duplicated across the batch.
    """
    lines = non_blank_lines(text)
    if not lines:
        raise EmptyInputError("CSV file is empty or malformed.")

    registry.ensure_fallback()
    headers = resolve_headers(lines[0])
    titles = TitleDeduplicator()
    records = [
        build_record(headers, parse_csv_line(line), registry, pattern, i, titles, clock)
        for i, line in enumerate(lines[1:], start=1)
    ]
    return headers, records


@dataclass
class ConversionSession:
    """All mutable state for one conversion session.

    Passed explicitly into the conversion and export functions. Callers must
    not edit sections while a conversion is running.
    """

    registry: SectionRegistry = field(default_factory=SectionRegistry)
    title_pattern: str = field(default_factory=lambda: settings.title_pattern)
    headers: List[str] = field(default_factory=list)
    records: List[Record] = field(default_factory=list)
    file_name: str = ''
    file_path: Any = None

    def load_file(self, file_name: str, file_path: Any, header_text: str) -> List[str]:
        """Replace the current file; column assignments start over."""
        self.file_name = file_name
        self.file_path = file_path
        self.headers = extract_headers(header_text)
        self.records = []
        self.registry.clear_assignments()
        self.registry.ensure_fallback()
        return self.headers

    def reset(self) -> None:
        self.registry.reset()
        self.title_pattern = settings.title_pattern
        self.headers = []
        self.records = []
        self.file_name = ''
        self.file_path = None


def convert_session(session: ConversionSession, text: str, clock: Clock = datetime.now) -> List[Record]:
    """Run one conversion pass and store the result on the session.

    On failure the session's previous headers and records are left untouched.
    """
    try:
        headers, records = convert_text(text, session.registry, session.title_pattern, clock)
    except EmptyInputError:
        raise
    except Exception as exc:
        logger.exception("CSV processing error")
        raise UnexpectedParseError("Error processing CSV file.") from exc

    session.headers = headers
    session.records = records
    logger.info("Converted %d rows from %s", len(records), session.file_name or "<memory>")
    return records
