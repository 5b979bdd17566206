"""Application configuration module for the CSV translation converter."""
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jsonschema
import yaml
from dotenv import load_dotenv

from csv_i18n.emitters import OUTPUT_FORMATS, TYPESCRIPT_FORMAT
from csv_i18n.logging_config import setup_logger

DEFAULT_CONFIG_FILE_NAME = 'csv_i18n.yaml'
CONFIG_FILE_ENV_VAR = 'CSV_I18N_CONFIG_FILE'

# Environment variables that override values from the YAML file.
ENV_OVERRIDES = {
    'input_dir': 'CSV_I18N_INPUT_DIR',
    'output_dir': 'CSV_I18N_OUTPUT_DIR',
    'output_format': 'CSV_I18N_FORMAT',
    'log_level': 'CSV_I18N_LOG_LEVEL',
}

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "input_dir": {"type": "string"},
        "output_dir": {"type": "string"},
        "output_format": {"type": "string", "enum": list(OUTPUT_FORMATS)},
        "watch": {"type": "boolean"},
        "show_progress": {"type": "boolean"},
        "logging": {
            "type": "object",
            "properties": {
                "log_level": {"type": "string"},
                "log_file_path": {"type": ["string", "null"]},
                "log_to_console": {"type": "boolean"}
            },
            "additionalProperties": False
        }
    },
    "additionalProperties": False
}


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    # Core paths
    project_root: str
    input_dir: str
    output_dir: str

    # Output settings
    output_format: str
    watch: bool
    show_progress: bool

    # Logging
    log_level: str
    log_file_path: Optional[str]
    log_to_console: bool


def _compute_project_root() -> str:
    """The working directory is where .env and the YAML config are looked up."""
    return os.path.abspath(os.getcwd())


def _load_dotenv_files(project_root: str) -> Optional[str]:
    """Load the .env file from the project root, if there is one."""
    dotenv_path = os.path.join(project_root, '.env')
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path)
        return dotenv_path
    return None


def _load_yaml_config(project_root: str, config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and validate the YAML configuration file.

    The file is taken from the ``config_file`` argument, then from CSV_I18N_CONFIG_FILE,
    then from csv_i18n.yaml in the project root. A missing default file is normal; a
    missing file that was asked for explicitly is reported. Any problem with the
    file falls back to the defaults.
    """
    explicit = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
    config_file = explicit or os.path.join(project_root, DEFAULT_CONFIG_FILE_NAME)

    if not os.path.isabs(config_file):
        config_file = os.path.abspath(config_file)

    config = {}
    try:
        if not os.path.exists(config_file):
            if explicit:
                print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
                      file=sys.stderr)
            return config

        if not os.access(config_file, os.R_OK):
            print(f"Error: Configuration file '{config_file}' exists but is not readable. Check file permissions.",
                  file=sys.stderr)
            return config

        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)

        if loaded_config is None:
            print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
                  file=sys.stderr)
        elif isinstance(loaded_config, dict):
            jsonschema.validate(instance=loaded_config, schema=CONFIG_SCHEMA)
            config = loaded_config
        else:
            print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
                  file=sys.stderr)

    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        print("Please check your YAML syntax. Using default configuration.", file=sys.stderr)
    except jsonschema.ValidationError as e:
        print(f"Error: Configuration file '{config_file}' is invalid: {e.message}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)
    except OSError as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return config


def _resolve(name: str, overrides: Dict[str, Any], config: Dict[str, Any], default: Any) -> Any:
    """Command line value, then environment variable, then YAML value, then default."""
    if overrides.get(name) is not None:
        return overrides[name]
    env_var = ENV_OVERRIDES.get(name)
    if env_var and os.environ.get(env_var):
        return os.environ[env_var]
    if config.get(name) is not None:
        return config[name]
    return default


def _setup_logger_from_config(config: Dict[str, Any], overrides: Dict[str, Any]) -> logging.Logger:
    """Set up logger based on configuration."""
    log_config = config.get('logging', {})
    log_level_str = str(_resolve('log_level', overrides, log_config, 'INFO')).upper()
    log_file_path = log_config.get('log_file_path')
    log_to_console = log_config.get('log_to_console', True)
    return setup_logger(log_level_str, log_file_path, log_to_console)


def load_app_config(overrides: Optional[Dict[str, Any]] = None) -> AppConfig:
    """
    Load application configuration from the command line, the environment and a YAML file.

    Args:
        overrides: Values given on the command line; None entries are ignored.
            Recognized keys: input_dir, output_dir, output_format, watch,
            show_progress, log_level, config_file.

    Returns:
        AppConfig: The loaded application configuration.

    Raises:
        ValueError: If the input or output directory is missing or the format is unknown.
        OSError: If the configured log file cannot be opened.
    """
    overrides = dict(overrides or {})
    project_root = _compute_project_root()

    dotenv_path = _load_dotenv_files(project_root)
    config = _load_yaml_config(project_root, overrides.get('config_file'))

    logger = _setup_logger_from_config(config, overrides)
    if dotenv_path:
        logger.debug("Loaded environment variables from: %s", dotenv_path)

    input_dir = _resolve('input_dir', overrides, config, None)
    output_dir = _resolve('output_dir', overrides, config, None)
    if not input_dir:
        raise ValueError("Input directory is not configured. Use --input or set input_dir.")
    if not output_dir:
        raise ValueError("Output directory is not configured. Use --output or set output_dir.")

    output_format = _resolve('output_format', overrides, config, TYPESCRIPT_FORMAT)
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"Invalid format \"{output_format}\". Must be one of: {', '.join(OUTPUT_FORMATS)}."
        )

    log_config = config.get('logging', {})
    return AppConfig(
        project_root=project_root,
        input_dir=os.path.abspath(input_dir),
        output_dir=os.path.abspath(output_dir),
        output_format=output_format,
        watch=bool(_resolve('watch', overrides, config, False)),
        show_progress=bool(_resolve('show_progress', overrides, config, True)),
        log_level=logging.getLevelName(logger.level),
        log_file_path=log_config.get('log_file_path'),
        log_to_console=log_config.get('log_to_console', True)
    )
