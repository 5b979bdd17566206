import os
import re
from typing import List, Optional

KEY_COLUMN = 'key'
CSV_SUFFIX_PATTERN = re.compile(r'\.csv$', re.IGNORECASE)


def base_namespace(relative_path: str) -> str:
    """
    Turn a CSV path relative to the input root into a dotted key prefix.

    Args:
        relative_path (str): e.g. "auth/login.csv" or "auth\\login.csv".

    Returns:
        str: e.g. "auth.login"; empty for a file directly in the input root
            whose name is only the extension.
    """
    normalized = relative_path.replace('\\', '/')
    if os.sep != '/':
        normalized = normalized.replace(os.sep, '/')
    return '.'.join(CSV_SUFFIX_PATTERN.sub('', normalized).split('/'))


def qualify_key(base: str, key: str) -> str:
    """Join a base namespace and a row key; an empty base leaves the key as is."""
    return f"{base}.{key}" if base else key


def find_key_column(fields: List[str]) -> Optional[str]:
    """Return the header field that names the key column (any letter case), if any."""
    for name in fields:
        if name.lower() == KEY_COLUMN:
            return name
    return None


def language_columns(fields: List[str]) -> List[str]:
    """Every header field other than the key column, in header order."""
    return [name for name in fields if name.lower() != KEY_COLUMN]
