from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

import pandas as pd

from .records import Record


def flatten_record_for_preview(record: Record) -> Dict[str, Any]:
    """Base fields, the JSON-encoded `data`, then every section column by header."""
    row: Dict[str, Any] = {
        'title': record.get('title', ''),
        'content': record.get('content', ''),
        'data': json.dumps(record.get('data', {}), ensure_ascii=False),
    }
    for section in (record.get('data') or {}).values():
        for col, val in (section or {}).items():
            row[col] = val
    return row


def flatten_records_for_preview(records: Sequence[Record], limit: int = 10) -> pd.DataFrame:
    rows = [flatten_record_for_preview(r) for r in list(records)[:max(1, int(limit))]]

    # Union of keys, first-seen order.
    columns: List[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)

    return pd.DataFrame(rows, columns=columns).fillna('')


def records_for_json_preview(records: Sequence[Record], limit: int = 50) -> List[Record]:
    return list(records)[:max(1, int(limit))]
