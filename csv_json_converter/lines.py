from __future__ import annotations

from typing import List


def parse_csv_line(line: str) -> List[str]:
    """Split one physical CSV line on unquoted commas.

    - `"` toggles quoting; `""` inside quotes emits a literal quote.
    - Fields are trimmed after splitting.
    - Newlines inside quoted fields are not supported; a line is one text line.
    """
    if line is None:
        return ['']
    if not isinstance(line, str):
        line = str(line)

    fields: List[str] = []
    buf: List[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        ch = line[i]
        if ch == '"' and in_quotes and i + 1 < len(line) and line[i + 1] == '"':
            buf.append('"')
            i += 2
            continue
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == ',' and not in_quotes:
            fields.append(''.join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1

    fields.append(''.join(buf))
    return [f.strip() for f in fields]
