"""
Convert a directory tree of CSV translation tables into per-language files.

Every run starts from scratch: the CSV files are discovered, parsed and merged
into one TranslationTable, and the table is written in the configured format.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List

from tqdm import tqdm

from csv_i18n.app_config import AppConfig
from csv_i18n.csv_discovery import find_csv_files
from csv_i18n.diagnostics import Diagnostic, report_diagnostics
from csv_i18n.emitters import TYPESCRIPT_FORMAT, generate_output_files
from csv_i18n.translation_table import TranslationTable, build_translation_table

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    csv_files: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    key_count: int = 0
    written_files: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def validate_paths(input_dir: str, output_dir: str):
    """
    Validate that the input directory is readable and that the output directory exists.

    Args:
        input_dir (str): Path to the directory holding the CSV files.
        output_dir (str): Path to the directory for generated files; created if missing.

    Raises:
        FileNotFoundError: If the input directory does not exist.
        NotADirectoryError: If the input path is not a directory.
        PermissionError: If the input directory cannot be read.
        OSError: If the output directory cannot be created.
    """
    if not os.path.exists(input_dir):
        logger.error(f"Error: Input directory \"{input_dir}\" not found or not accessible.")
        raise FileNotFoundError(f"Input directory '{input_dir}' does not exist.")
    if not os.path.isdir(input_dir):
        logger.error(f"Error: Input path \"{input_dir}\" is not a directory.")
        raise NotADirectoryError(f"Input path '{input_dir}' is not a directory.")
    if not os.access(input_dir, os.R_OK | os.X_OK):
        logger.error(f"Error: Input directory \"{input_dir}\" is not accessible (read permission needed).")
        raise PermissionError(f"Input directory '{input_dir}' is not accessible.")

    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as mkdir_exc:
        logger.error(f"Error creating output directory {output_dir}: {mkdir_exc}")
        raise
    logger.info(f"Ensured output directory exists: {output_dir}")


def log_key_coverage(table: TranslationTable):
    """Log how many registered keys each language translates."""
    total = len(table.keys)
    for language in table.languages:
        missing_keys = table.untranslated_keys(language)
        logger.info(f"{language}: {total - len(missing_keys)}/{total} keys translated.")
        if missing_keys:
            logger.debug(f"{language}: missing {', '.join(sorted(missing_keys))}")


def convert(config: AppConfig) -> ConversionResult:
    """
    Run one full conversion.

    Args:
        config (AppConfig): Paths, output format and progress settings.

    Returns:
        ConversionResult: What was read and written, and every diagnostic reported.

    Raises:
        OSError: If the input directory is unusable or the output directory cannot be created.
    """
    logger.info(f"Input directory: {config.input_dir}")
    logger.info(f"Output directory: {config.output_dir}")
    logger.info(f"Output format: {config.output_format}")

    validate_paths(config.input_dir, config.output_dir)
    result = ConversionResult()

    result.csv_files = find_csv_files(config.input_dir)
    if not result.csv_files:
        logger.warning(f"No CSV files found in {config.input_dir}. No files generated.")
        return result

    logger.info("Found CSV files:")
    for csv_file in result.csv_files:
        logger.info(f"- {csv_file}")

    progress = tqdm(result.csv_files, desc="Processing CSV files", unit="file",
                    disable=not config.show_progress)
    table, diagnostics = build_translation_table(config.input_dir, progress)
    report_diagnostics(diagnostics, logger)
    result.diagnostics.extend(diagnostics)
    result.languages = table.languages
    result.key_count = len(table.keys)

    if not table.languages:
        logger.warning("No language data found in CSV files. No files generated.")
        return result

    log_key_coverage(table)

    emitted = generate_output_files(table, config.output_dir, config.output_format)
    report_diagnostics(emitted.diagnostics, logger)
    result.diagnostics.extend(emitted.diagnostics)
    result.written_files = emitted.written_files

    file_kind = 'TypeScript' if config.output_format == TYPESCRIPT_FORMAT else 'JSON'
    logger.info(f"{file_kind} file generation complete ({len(result.written_files)} file(s) written).")
    return result


def run_single_conversion(config: AppConfig) -> int:
    """
    Run one conversion and turn the outcome into a process exit code.

    Returns:
        int: 0 on success, 1 when the run had to be aborted.
    """
    logger.info("Starting conversion...")
    try:
        convert(config)
    except OSError as fatal_exc:
        logger.error(f"Error during conversion: {fatal_exc}")
        return 1
    logger.info("Conversion finished successfully.")
    return 0
