"""Quote-aware CSV tokenizer for the public sheet export."""
from typing import Iterable, List


def parse_csv(text: str) -> List[List[str]]:
    """
    Split CSV text into rows of string fields.

    - ``,`` separates fields; a ``"`` outside quotes enters quoted mode
    - inside quotes ``""`` is a literal quote and newlines/commas are kept
    - ``\\n`` or ``\\r\\n`` outside quotes ends a row; a lone ``\\r`` is dropped
    - rows made only of blank fields are skipped
    - an unterminated quote is closed at end of input
    """
    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    in_quotes = False
    i, n = 0, len(text)

    def _end_row():
        row.append("".join(field))
        if any(f.strip() for f in row):
            rows.append(list(row))
        row.clear()
        field.clear()

    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""
        if in_quotes:
            if ch == '"':
                if nxt == '"':
                    field.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == ",":
            row.append("".join(field))
            field.clear()
        elif ch == "\n" or (ch == "\r" and nxt == "\n"):
            _end_row()
            if ch == "\r":
                i += 1
        elif ch != "\r":
            field.append(ch)
        i += 1

    # trailing row without a final newline
    if field or row:
        _end_row()
    return rows


def _quote(value: str) -> str:
    if any(c in value for c in '",\r\n'):
        return '"' + value.replace('"', '""') + '"'
    return value


def to_csv(rows: Iterable[Iterable[str]]) -> str:
    """Inverse of parse_csv for well-formed rows."""
    return "\n".join(",".join(_quote(str(v)) for v in r) for r in rows)
