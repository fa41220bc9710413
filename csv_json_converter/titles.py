from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Sequence

Clock = Callable[[], datetime]

TOKEN_RE = re.compile(r'\{([^}]+)\}')

TOKEN_HELP = [
    ("{title}", "Row title column"),
    ("{index}", "1-based row number"),
    ("{timestamp}", "Current time, YYYYMMDDHHmmss"),
    ("{column:Header}", "Value of a column (case-insensitive)"),
    ("{column_Header}", "Same, spaces in the header written as underscores"),
    ("{Header}", "Bare column name"),
]


class TokenKind(Enum):
    LITERAL = "literal"
    TITLE = "title"
    INDEX = "index"
    TIMESTAMP = "timestamp"
    COLUMN = "column"
    COLUMN_UNDERSCORE = "column_underscore"
    HEADER = "header"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str = ''


def classify_token(raw: str) -> Token:
    """Classify the text between braces."""
    t = str(raw).strip()
    lowered = t.lower()
    if t == 'title':
        return Token(TokenKind.TITLE)
    if t == 'index':
        return Token(TokenKind.INDEX)
    if t == 'timestamp':
        return Token(TokenKind.TIMESTAMP)
    if lowered.startswith('column:'):
        return Token(TokenKind.COLUMN, t[len('column:'):].strip())
    if lowered.startswith('column_'):
        return Token(TokenKind.COLUMN_UNDERSCORE, t[len('column_'):].strip())
    return Token(TokenKind.HEADER, t)


def parse_pattern(pattern: str) -> List[Token]:
    """Split a pattern into literal text and `{token}` segments."""
    segments: List[Token] = []
    pos = 0
    for match in TOKEN_RE.finditer(pattern):
        if match.start() > pos:
            segments.append(Token(TokenKind.LITERAL, pattern[pos:match.start()]))
        segments.append(classify_token(match.group(1)))
        pos = match.end()
    if pos < len(pattern):
        segments.append(Token(TokenKind.LITERAL, pattern[pos:]))
    return segments


def format_timestamp(moment: Optional[datetime] = None) -> str:
    return (moment or datetime.now()).strftime('%Y%m%d%H%M%S')


def _normalize_underscored(name: str) -> str:
    return re.sub(r'\s+', '_', str(name).lower())


def _lookup(row: Mapping[str, str], header: Optional[str]) -> str:
    if header is None:
        return ''
    value = row.get(header)
    return '' if value is None else str(value)


def resolve_token(
    token: Token,
    row: Mapping[str, str],
    headers: Sequence[str],
    index: int,
    clock: Clock = datetime.now,
) -> str:
    kind = token.kind
    if kind is TokenKind.LITERAL:
        return token.value
    if kind is TokenKind.TITLE:
        return _lookup(row, 'title')
    if kind is TokenKind.INDEX:
        return str(index)
    if kind is TokenKind.TIMESTAMP:
        return format_timestamp(clock())
    if not token.value:
        return ''
    if kind is TokenKind.COLUMN_UNDERSCORE:
        query = _normalize_underscored(token.value)
        match = next((h for h in headers if _normalize_underscored(h) == query), None)
        return _lookup(row, match)
    # COLUMN and HEADER both match the header name case-insensitively.
    target = token.value.lower()
    match = next((h for h in headers if str(h).lower() == target), None)
    return _lookup(row, match)


def build_title(
    pattern: Optional[str],
    row: Mapping[str, str],
    headers: Sequence[str],
    index: int,
    clock: Clock = datetime.now,
) -> str:
    """Evaluate a title pattern against one row.

    A blank pattern falls back to the row's `title`; a pattern without tokens
    is returned as-is. Every substituted value is trimmed.
    """
    if not pattern or not str(pattern).strip():
        return _lookup(row, 'title')
    pattern = str(pattern)
    segments = parse_pattern(pattern)
    if all(s.kind is TokenKind.LITERAL for s in segments):
        return pattern

    # A repeated token resolves once per call, so `{timestamp}` agrees with itself.
    resolved: Dict[Token, str] = {}
    parts: List[str] = []
    for segment in segments:
        if segment.kind is TokenKind.LITERAL:
            parts.append(segment.value)
            continue
        if segment not in resolved:
            resolved[segment] = resolve_token(segment, row, headers, index, clock).strip()
        parts.append(resolved[segment])
    return ''.join(parts)


class TitleDeduplicator:
    """Makes titles unique in arrival order.

    The first occurrence is kept; later ones get `-1`, `-2`, ...
    """

    def __init__(self):
        self.counts: Dict[str, int] = {}

    def claim(self, title: Optional[str]) -> str:
        base = title or ''
        count = self.counts.get(base, 0) + 1
        self.counts[base] = count
        if count > 1:
            return f"{base}-{count - 1}"
        return base


def sample_titles(
    pattern: str,
    rows: Sequence[Mapping[str, str]],
    headers: Sequence[str],
    count: int = 3,
    clock: Clock = datetime.now,
) -> List[str]:
    """Titles for the first few rows, or placeholder rows when there is no data."""
    if not rows or not headers:
        return [build_title(pattern, {'title': 'Sample'}, headers or [], i + 1, clock) for i in range(count)]
    return [build_title(pattern, row, headers, i + 1, clock) for i, row in enumerate(rows[:count])]


def append_token(pattern: Optional[str], token: str) -> str:
    return f"{pattern or ''}{token}"
