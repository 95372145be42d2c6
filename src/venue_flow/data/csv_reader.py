"""Lenient CSV row reader for the venue/station/flow source files.

The source files are produced by hand-edited spreadsheets, so this reader
never raises: short rows are padded, blank rows are skipped and quote
characters only ever toggle "inside a quoted field" mode.
"""

from __future__ import annotations

from collections.abc import Iterator


def _split_header(line: str) -> list[str]:
    return [h.strip().replace('"', "") for h in line.split(",")]


def split_fields(line: str) -> list[str]:
    """Split one data line into trimmed field values.

    A comma between a pair of double quotes is kept as part of the value.
    Quote characters themselves are dropped; ``""`` is *not* an escaped quote.

    Examples
    --------
    >>> split_fields('"a,b",c')
    ['a,b', 'c']
    """
    values: list[str] = []
    current: list[str] = []
    in_quotes = False

    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    values.append("".join(current).strip())
    return values


def parse_rows(text: str) -> Iterator[dict[str, str]]:
    """Yield one ``{header: value}`` mapping per non-blank data row of *text*.

    The first line is the header. Missing trailing values become ``""`` and
    surplus values are ignored. All values stay strings.
    """
    lines = text.split("\n")
    if not lines or not lines[0].strip():
        return
    headers = _split_header(lines[0])

    for line in lines[1:]:
        values = split_fields(line)
        row = {
            header: (values[i] if i < len(values) else "")
            for i, header in enumerate(headers)
        }
        if any(v.strip() for v in row.values()):
            yield row
