"""Merge parsed CSV files into one key/language translation table."""
import os
from typing import Dict, Iterable, List, Set, Tuple

from csv_i18n.csv_parser import ParsedCsv, load_csv_file
from csv_i18n.diagnostics import Diagnostic, warning
from csv_i18n.translation_keys import base_namespace, find_key_column, language_columns, qualify_key

# Data rows are counted from 1 and the header occupies line 1.
HEADER_ROW_OFFSET = 1


class TranslationTable:
    """
    Translations of one run, built file by file.

    ``translations`` maps language -> fully qualified key -> value and only ever
    holds non-empty values. ``keys`` is the registry of every key defined by a
    row, whether or not any language translated it.
    """

    def __init__(self):
        self.translations: Dict[str, Dict[str, str]] = {}
        self.keys: Set[str] = set()

    @property
    def languages(self) -> List[str]:
        """Languages in the order their columns were first seen."""
        return list(self.translations)

    def untranslated_keys(self, language: str) -> Set[str]:
        """Registered keys that have no value for ``language``."""
        return self.keys - set(self.translations.get(language, {}))

    def add_csv(self, csv_path: str, relative_path: str, parsed: ParsedCsv) -> List[Diagnostic]:
        """
        Merge the rows of one parsed CSV file.

        A later value for an existing (language, key) pair replaces the earlier one
        and yields a warning when the two differ.

        Args:
            csv_path: Path of the file, used in diagnostics.
            relative_path: Path of the file relative to the input root.
            parsed: The parsed file.

        Returns:
            List[Diagnostic]: Warnings for skipped rows and overwritten values.
        """
        diagnostics: List[Diagnostic] = []
        languages = language_columns(parsed.fields)
        for language in languages:
            self.translations.setdefault(language, {})

        base_key = base_namespace(relative_path)
        if not base_key and parsed.rows:
            diagnostics.append(warning(
                f"Warning: CSV file found directly in input directory: {csv_path}. "
                f"Keys will not have a file path prefix.",
                csv_path
            ))

        key_column = find_key_column(parsed.fields)
        for row_index, row in enumerate(parsed.rows):
            row_number = row_index + 1 + HEADER_ROW_OFFSET
            key = row.get(key_column) if key_column is not None else None
            if not isinstance(key, str) or not key.strip():
                diagnostics.append(warning(
                    f"Skipping row {row_number} in {csv_path} due to empty or invalid key.",
                    csv_path, row_number
                ))
                continue

            full_key = qualify_key(base_key, key)
            for language in languages:
                value = row.get(language)
                if value is None or value == '':
                    continue
                existing = self.translations[language].get(full_key)
                if existing is not None and existing != value:
                    diagnostics.append(warning(
                        f"Warning: Duplicate key \"{full_key}\" detected for language \"{language}\" "
                        f"in {csv_path} (Row {row_number}). "
                        f"Overwriting previous value \"{existing}\" with \"{value}\".",
                        csv_path, row_number
                    ))
                self.translations[language][full_key] = value
            self.keys.add(full_key)

        return diagnostics


def build_translation_table(input_root: str, csv_files: Iterable[str]) -> Tuple[TranslationTable, List[Diagnostic]]:
    """
    Read every CSV file in order and fold it into a fresh TranslationTable.

    Files that cannot be read or have no header are skipped; their diagnostics
    are still returned.

    Args:
        input_root (str): The directory the key namespaces are relative to.
        csv_files (Iterable[str]): CSV paths in processing order.

    Returns:
        Tuple[TranslationTable, List[Diagnostic]]: The table and all diagnostics, in order.
    """
    table = TranslationTable()
    diagnostics: List[Diagnostic] = []
    for csv_path in csv_files:
        parsed, file_diagnostics = load_csv_file(csv_path)
        diagnostics.extend(file_diagnostics)
        if parsed is None:
            continue
        relative_path = os.path.relpath(csv_path, input_root)
        diagnostics.extend(table.add_csv(csv_path, relative_path, parsed))
    return table, diagnostics
