from __future__ import annotations

import csv
import io
import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from .config import LOGGER_NAME
from .errors import ExportPreconditionError
from .io_utils import CSV_MIME_TYPE
from .records import Record
from .sections import SectionRegistry
from .titles import Clock, build_title

logger = logging.getLogger(LOGGER_NAME)

CSV_EXPORT_HEADERS = [
    "content",
    "title",
    "route_url",
    "published_at",
    "data",
    "status",
    "sites",
    "locale",
    "taxonomy_terms",
    "created_at",
]

JSON_MIME_TYPE = "application/json"

UtcClock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ExportArtifact:
    file_name: str
    mime_type: str
    content: str


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC timestamp in the `2024-01-31T12:00:00.000Z` interchange form."""
    moment = (moment or utc_now()).astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"


def export_file_name(extension: str, moment: Optional[datetime] = None) -> str:
    stamp = re.sub(r'[:.-]', '', iso_timestamp(moment))
    return f"exported-data-{stamp}.{extension}"


def slugify(value: Any) -> str:
    text = '' if value is None else str(value)
    text = re.sub(r'[^\w\s-]', '', text.lower(), flags=re.ASCII)
    return re.sub(r'\s+', '-', text.strip())


def reconstruct_row(record: Record) -> Dict[str, str]:
    """Flatten a sectioned record back into a header -> value row."""
    flat: Dict[str, str] = {}
    for section in (record.get('data') or {}).values():
        flat.update(section or {})
    if record.get('title') is not None:
        flat['title'] = record['title']
    if record.get('content') is not None:
        flat['content'] = record['content']
    return flat


def check_export_preconditions(records: Sequence[Record], registry: Optional[SectionRegistry]) -> None:
    if registry is None or not registry.sections:
        raise ExportPreconditionError(
            "No sections defined.",
            body="Cannot export because no sections are defined. Please add at least one section before exporting.",
        )
    if not records:
        raise ExportPreconditionError(
            "No data to download.",
            body="Cannot export because there are no converted records. Convert a CSV file first.",
        )


def export_json(
    records: Sequence[Record],
    registry: Optional[SectionRegistry],
    now: UtcClock = utc_now,
) -> ExportArtifact:
    check_export_preconditions(records, registry)
    content = json.dumps(list(records), indent=2, ensure_ascii=False)
    return ExportArtifact(export_file_name('json', now()), JSON_MIME_TYPE, content)


def route_url(record: Record, pattern: str, headers: Sequence[str], index: int, clock: Clock = datetime.now) -> str:
    routed = build_title(pattern, reconstruct_row(record), headers, index, clock)
    base = routed if routed and routed.strip() else record.get('title', '')
    return f"/{record.get('content', '')}/{slugify(base)}"


def export_csv(
    records: Sequence[Record],
    registry: Optional[SectionRegistry],
    pattern: str,
    headers: Sequence[str],
    now: UtcClock = utc_now,
    clock: Clock = datetime.now,
) -> ExportArtifact:
    """Serialize records into the fixed CSV envelope.

    Each record's timestamps are taken separately.
    """
    check_export_preconditions(records, registry)

    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerow(CSV_EXPORT_HEADERS)
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for idx, record in enumerate(records, start=1):
        published_at = iso_timestamp(now())
        created_at = iso_timestamp(now())
        row = [
            record.get('content', ''),
            record.get('title', ''),
            route_url(record, pattern, headers, idx, clock),
            published_at,
            json.dumps(record.get('data', {}), ensure_ascii=False, separators=(',', ':')),
            "1",
            "",
            "en",
            "",
            created_at,
        ]
        writer.writerow(row)

    return ExportArtifact(export_file_name('csv', now()), CSV_MIME_TYPE, buf.getvalue().rstrip("\n"))


def write_artifact(artifact: ExportArtifact, directory: Optional[os.PathLike] = None) -> str:
    directory = Path(directory) if directory is not None else Path.cwd()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / artifact.file_name
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(artifact.content)
    logger.info("Exported %s (%s)", path, artifact.mime_type)
    return str(path)
