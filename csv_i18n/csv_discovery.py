import logging
import os
from typing import Iterator, List

logger = logging.getLogger(__name__)

CSV_EXTENSION = '.csv'


def is_csv_path(path: str) -> bool:
    """Return True when the path has a `.csv` extension, in any letter case."""
    return os.path.splitext(path)[1].lower() == CSV_EXTENSION


def iter_csv_files(input_root: str) -> Iterator[str]:
    """
    Lazily yield every CSV file below a directory.

    The walk is depth first and entries are visited in name order, so the
    sequence is stable between runs; it is also the order in which later
    files override earlier ones. A subdirectory that cannot be listed is
    logged and skipped without affecting its siblings.

    Args:
        input_root (str): The directory to search.

    Yields:
        str: Absolute paths of the CSV files found.
    """
    directory = os.path.abspath(input_root)
    try:
        with os.scandir(directory) as scanner:
            entries = sorted(scanner, key=lambda entry: entry.name)
    except OSError as dir_exc:
        logger.warning(f"Error reading directory {directory}: {dir_exc}")
        return

    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                yield from iter_csv_files(entry.path)
            elif entry.is_file(follow_symlinks=False) and is_csv_path(entry.name):
                yield entry.path
        except OSError as entry_exc:
            logger.warning(f"Error inspecting {entry.path}: {entry_exc}")


def find_csv_files(input_root: str) -> List[str]:
    """Collect `iter_csv_files` into a list."""
    return list(iter_csv_files(input_root))
