"""Write a TranslationTable to per-language output files."""
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from csv_i18n.diagnostics import Diagnostic, error, warning
from csv_i18n.key_tree import build_key_tree, flatten_key_tree
from csv_i18n.translation_table import TranslationTable

logger = logging.getLogger(__name__)

TYPESCRIPT_FORMAT = 'typescript'
I18NEXT_FORMAT = 'i18next'
OUTPUT_FORMATS = (TYPESCRIPT_FORMAT, I18NEXT_FORMAT)

KEY_MODULE_NAME = 'key'
GENERATED_HEADER = "// Auto-generated by csv-i18n tool. Do not edit manually.\n"


@dataclass
class EmitResult:
    written_files: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def sort_by_key(mapping: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: mapping[key] for key in sorted(mapping)}


def key_registry(keys: Iterable[str]) -> Dict[str, str]:
    """Map every key to itself, sorted, for static references to keys."""
    return {key: key for key in sorted(keys)}


def _to_json(data: Mapping[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def render_typescript_module(data: Mapping[str, Any]) -> str:
    return f"{GENERATED_HEADER}export default {_to_json(data)};\n"


def render_json_document(data: Mapping[str, Any]) -> str:
    return f"{_to_json(data)}\n"


def write_output_file(file_path: str, content: str) -> Optional[Diagnostic]:
    """
    Write one generated file.

    Returns:
        Optional[Diagnostic]: None on success, otherwise an error diagnostic.
    """
    try:
        with open(file_path, 'w', encoding='utf-8', newline='\n') as output_file:
            output_file.write(content)
    except OSError as write_exc:
        return error(f"Error writing file {file_path}: {write_exc}", file_path)
    logger.info(f"- Successfully generated {file_path}")
    return None


def _emit(result: EmitResult, file_path: str, content: str) -> None:
    diagnostic = write_output_file(file_path, content)
    if diagnostic is None:
        result.written_files.append(file_path)
    else:
        result.diagnostics.append(diagnostic)


def is_plain_file_stem(name: str) -> bool:
    """True when ``name`` can be used as a file name inside the output directory."""
    return name not in ('.', '..') and not any(separator in name for separator in ('/', '\\', os.sep))


def _languages_to_write(table: TranslationTable, result: EmitResult) -> Iterable[str]:
    """Languages that get a file; the others are reported in ``result`` and skipped."""
    for language in table.languages:
        if not table.translations[language]:
            result.diagnostics.append(warning(f"No translations found for language \"{language}\". Skipping."))
        elif not is_plain_file_stem(language):
            result.diagnostics.append(warning(
                f"Language column \"{language}\" cannot be used as a file name. Skipping."
            ))
        else:
            yield language


def generate_typescript_files(table: TranslationTable, output_dir: str) -> EmitResult:
    """
    Write `key.ts` plus one flat `<lang>.ts` module per language.

    Each module default-exports an object sorted by key. `key.ts` maps every
    registered key to itself and is skipped when no key was found.
    """
    result = EmitResult()
    logger.info(f"Generating TypeScript files for languages: {', '.join(table.languages)}")

    if table.keys:
        key_file_path = os.path.join(output_dir, f"{KEY_MODULE_NAME}.ts")
        _emit(result, key_file_path, render_typescript_module(key_registry(table.keys)))
    else:
        result.diagnostics.append(warning(f"No keys found, skipping {KEY_MODULE_NAME}.ts generation."))

    for language in _languages_to_write(table, result):
        flat_translations = table.translations[language]
        output_file_path = os.path.join(output_dir, f"{language}.ts")
        _emit(result, output_file_path, render_typescript_module(sort_by_key(flat_translations)))

    return result


def generate_i18next_files(table: TranslationTable, output_dir: str) -> EmitResult:
    """Write one nested `<lang>.json` document per language."""
    result = EmitResult()
    logger.info(f"Generating JSON files for languages: {', '.join(table.languages)}")

    for language in _languages_to_write(table, result):
        flat_translations = table.translations[language]
        nested, tree_diagnostics = build_key_tree(sort_by_key(flat_translations))
        result.diagnostics.extend(tree_diagnostics)
        dropped = len(flat_translations) - len(flatten_key_tree(nested))
        if dropped:
            result.diagnostics.append(warning(
                f"{dropped} key(s) for language \"{language}\" were dropped because of nested key conflicts."
            ))
        output_file_path = os.path.join(output_dir, f"{language}.json")
        _emit(result, output_file_path, render_json_document(nested))

    return result


def generate_output_files(table: TranslationTable, output_dir: str, output_format: str) -> EmitResult:
    """
    Write the table in the requested format.

    Args:
        table: The aggregated translations.
        output_dir: An existing directory.
        output_format: 'typescript' (flat modules plus key registry) or 'i18next' (nested JSON).

    Raises:
        ValueError: If the format is unknown.
    """
    if output_format == TYPESCRIPT_FORMAT:
        return generate_typescript_files(table, output_dir)
    if output_format == I18NEXT_FORMAT:
        return generate_i18next_files(table, output_dir)
    raise ValueError(f"Invalid format \"{output_format}\". Must be one of: {', '.join(OUTPUT_FORMATS)}.")
