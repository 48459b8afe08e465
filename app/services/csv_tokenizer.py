"""
Quoted-CSV tokenizer for song imports

app/services/csv_tokenizer.py

"""
from typing import Dict, List, Tuple
import logging

from app.core.errors import RequestError

logger = logging.getLogger(__name__)

QUOTE = '"'
DELIMITER = ','


def tokenize_csv(text: str) -> List[List[str]]:
    """
    Split delimited text into rows of trimmed string fields.

    - `""` inside a quoted field is one literal quote
    - commas and line breaks inside quotes are kept
    - `\\r\\n` counts as a single row terminator
    - rows made only of empty fields are dropped
    - an unterminated quoted field is flushed as-is at end of input
    """
    rows: List[List[str]] = []
    row: List[str] = []
    value: List[str] = []
    in_quotes = False

    def end_row():
        row.append(''.join(value).strip())
        if any(field != '' for field in row):
            rows.append(list(row))
        row.clear()
        value.clear()

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ''

        if char == QUOTE:
            if in_quotes and next_char == QUOTE:
                value.append(QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            row.append(''.join(value).strip())
            value.clear()
        elif char in '\r\n' and not in_quotes:
            if char == '\r' and next_char == '\n':
                i += 1
            end_row()
        else:
            value.append(char)
        i += 1

    if value or row:
        end_row()

    return rows


def read_csv_table(text: str) -> Tuple[Dict[str, int], List[List[str]]]:
    """Tokenize and split off the header row as a lower-cased name -> column map"""
    rows = tokenize_csv(text.lstrip('\ufeff'))
    if len(rows) < 2:
        raise RequestError("CSV file is empty or missing headers")

    header_map: Dict[str, int] = {}
    for column, name in enumerate(rows[0]):
        header_map[name.strip().lower()] = column

    logger.info(f"CSV parsed: {len(rows) - 1} data row(s), headers={list(header_map)}")
    return header_map, rows[1:]
