import argparse
import logging
import sys
from typing import List, Optional

from csv_i18n import __version__
from csv_i18n.app_config import load_app_config
from csv_i18n.convert_csv_files import run_single_conversion
from csv_i18n.emitters import OUTPUT_FORMATS
from csv_i18n.watcher import watch_input_directory

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='csv-i18n',
        description="Convert a directory tree of CSV translation tables into per-language files."
    )
    parser.add_argument('-i', '--input', dest='input_dir',
                        help="Input directory containing CSV files")
    parser.add_argument('-o', '--output', dest='output_dir',
                        help="Output directory for generated files")
    parser.add_argument('-f', '--format', dest='output_format', choices=OUTPUT_FORMATS,
                        help="Output format type (default: typescript)")
    parser.add_argument('-w', '--watch', action='store_true', default=None,
                        help="Watch input directory for changes")
    parser.add_argument('--no-watch', dest='watch', action='store_false', default=None,
                        help="Run once even if the configuration enables watch mode")
    parser.add_argument('--config', dest='config_file',
                        help="YAML configuration file (default: ./csv_i18n.yaml)")
    parser.add_argument('--log-level', dest='log_level',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help="Logging level")
    parser.add_argument('--no-progress', dest='show_progress', action='store_false', default=None,
                        help="Do not show a progress bar")
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the `csv-i18n` command.

    Returns:
        int: The process exit code.
    """
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(argv)

    try:
        config = load_app_config(vars(args))
    except (ValueError, OSError) as config_exc:
        print(f"Error: {config_exc}", file=sys.stderr)
        return 1

    exit_code = run_single_conversion(config)
    if not config.watch:
        return exit_code
    if exit_code != 0:
        logger.error("Initial conversion failed. Watch mode will not start.")
        return exit_code
    return watch_input_directory(config.input_dir, argv)
