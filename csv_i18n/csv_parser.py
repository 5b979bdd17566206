import csv
import io
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from csv_i18n.diagnostics import Diagnostic, error, warning

# 'Ã' followed by a byte in 0x80-0xFF: UTF-8 text that was once decoded as latin-1/cp1252.
MOJIBAKE_PATTERN = re.compile(r'Ã[\x80-\xff]')
BYTE_ORDER_MARK = '\ufeff'


@dataclass
class CsvRowError:
    """A structural problem found on one physical line of a CSV file."""
    line: int
    code: str
    message: str


@dataclass
class ParsedCsv:
    fields: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)
    errors: List[CsvRowError] = field(default_factory=list)


def decode_csv_bytes(raw: bytes, file_path: str) -> Tuple[str, List[str]]:
    """
    Decode the raw bytes of a CSV file as UTF-8 and look for encoding damage.

    Args:
        raw: The file content.
        file_path: Used in the returned messages only.

    Returns:
        Tuple[str, List[str]]: The decoded text and a list of warning messages.

    Raises:
        UnicodeDecodeError: If the content is not valid UTF-8.
    """
    content = raw.decode('utf-8')
    warnings = []
    if MOJIBAKE_PATTERN.search(content):
        warnings.append(f"Potential mojibake detected in '{file_path}'. Found patterns like 'Ã¼', 'Ã¤', etc.")
    if '\uFFFD' in content:
        warnings.append(
            f"File '{file_path}' contains the Unicode replacement character (\uFFFD), "
            f"indicating a previous encoding/decoding error."
        )
    return content, warnings


def _read_header(record: List[str], line: int, errors: List[CsvRowError]) -> Tuple[List[str], List[Optional[str]]]:
    """Map each column position to a trimmed header name, or None for ignored columns."""
    fields: List[str] = []
    columns: List[Optional[str]] = []
    for position, raw_name in enumerate(record, 1):
        name = raw_name.strip()
        if not name:
            columns.append(None)
        elif name in fields:
            errors.append(CsvRowError(
                line, 'DuplicateHeader',
                f"Duplicate header \"{name}\" in column {position}; the column is ignored."
            ))
            columns.append(None)
        else:
            columns.append(name)
            fields.append(name)
    return fields, columns


def parse_csv_text(content: str) -> ParsedCsv:
    """
    Parse the text of one CSV file that starts with a header row.

    Every cell is kept as the literal string found in the file. Lines whose
    cells are all empty are skipped. Structural problems (field count
    mismatches, quoting errors) are recorded in ``errors`` and never stop the
    rest of the file from being read: short rows keep the cells they have,
    long rows drop the surplus cells, and a line the csv module rejects is
    left out.

    Args:
        content (str): The decoded file content.

    Returns:
        ParsedCsv: Header fields, data rows keyed by header field, and row errors.
            ``fields`` is empty when no header could be determined.
    """
    if content.startswith(BYTE_ORDER_MARK):
        content = content[len(BYTE_ORDER_MARK):]

    parsed = ParsedCsv()
    columns: Optional[List[Optional[str]]] = None
    reader = csv.reader(io.StringIO(content, newline=''))

    while True:
        try:
            record = next(reader)
        except StopIteration:
            break
        except csv.Error as csv_exc:
            parsed.errors.append(CsvRowError(reader.line_num, 'ParseError', str(csv_exc)))
            continue

        if not any(record):
            continue

        if columns is None:
            parsed.fields, columns = _read_header(record, reader.line_num, parsed.errors)
            if not parsed.fields:
                return parsed
            continue

        row = {name: cell for name, cell in zip(columns, record) if name is not None}
        if len(record) < len(columns):
            parsed.errors.append(CsvRowError(
                reader.line_num, 'TooFewFields',
                f"Too few fields: expected {len(columns)} fields but parsed {len(record)}"
            ))
        elif len(record) > len(columns):
            parsed.errors.append(CsvRowError(
                reader.line_num, 'TooManyFields',
                f"Too many fields: expected {len(columns)} fields but parsed {len(record)}"
            ))
        parsed.rows.append(row)

    return parsed


def load_csv_file(csv_path: str) -> Tuple[Optional[ParsedCsv], List[Diagnostic]]:
    """
    Read, decode and parse one CSV file.

    Returns:
        Tuple[Optional[ParsedCsv], List[Diagnostic]]: The parsed file, or None when
            the file has to be skipped (unreadable, not UTF-8, no header), plus the
            diagnostics collected on the way.
    """
    try:
        with open(csv_path, 'rb') as csv_file:
            raw = csv_file.read()
    except OSError as read_exc:
        return None, [error(f"Error reading file {csv_path}: {read_exc}. Skipping.", csv_path)]

    try:
        content, encoding_warnings = decode_csv_bytes(raw, csv_path)
    except UnicodeDecodeError as decode_exc:
        return None, [error(f"File '{csv_path}' is not a valid UTF-8 file ({decode_exc}). Skipping.", csv_path)]

    parsed = parse_csv_text(content)
    diagnostics = [warning(message, csv_path) for message in encoding_warnings]
    diagnostics.extend(
        warning(f"Warning parsing {csv_path}: [{row_error.code}] {row_error.message} (Row {row_error.line})",
                csv_path, row_error.line)
        for row_error in parsed.errors
    )
    if not parsed.fields:
        diagnostics.append(error(f"Could not parse header fields from {csv_path}. Skipping.", csv_path))
        return None, diagnostics
    return parsed, diagnostics
