import json
import logging
import os
import textwrap

import pytest

from csv_i18n.app_config import AppConfig
from csv_i18n.emitters import GENERATED_HEADER
from csv_i18n.logging_config import LOGGER_NAME


class CsvTree:
    """A temporary input directory that tests fill with CSV files."""

    def __init__(self, root):
        self.root = str(root)

    def write(self, relative_path: str, content: str) -> str:
        path = os.path.join(self.root, *relative_path.split('/'))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(textwrap.dedent(content).lstrip())
        return path

    def write_bytes(self, relative_path: str, content: bytes) -> str:
        path = os.path.join(self.root, *relative_path.split('/'))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(content)
        return path


def load_typescript_module(path: str):
    """Read back the object literal of a generated `export default {...};` module."""
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()
    assert content.startswith(GENERATED_HEADER + "export default ")
    assert content.endswith(";\n")
    return json.loads(content[len(GENERATED_HEADER + "export default "):-2])


def load_json_document(path: str):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


@pytest.fixture
def csv_tree(tmp_path):
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    return CsvTree(input_dir)


@pytest.fixture
def output_dir(tmp_path):
    return str(tmp_path / "output")


@pytest.fixture
def make_config(tmp_path, csv_tree, output_dir):
    """Build an AppConfig for the temporary input and output directories."""
    def _make(output_format='typescript', **changes):
        values = dict(
            project_root=str(tmp_path),
            input_dir=csv_tree.root,
            output_dir=output_dir,
            output_format=output_format,
            watch=False,
            show_progress=False,
            log_level='INFO',
            log_file_path=None,
            log_to_console=False
        )
        values.update(changes)
        return AppConfig(**values)
    return _make


@pytest.fixture(autouse=True)
def restore_package_logger():
    """setup_logger reconfigures the package logger; put it back after every test."""
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in logger.handlers:
        if handler not in saved[0]:
            handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep configuration from the developer's shell out of the tests."""
    for name in ('CSV_I18N_CONFIG_FILE', 'CSV_I18N_INPUT_DIR', 'CSV_I18N_OUTPUT_DIR',
                 'CSV_I18N_FORMAT', 'CSV_I18N_LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def read_typescript_module():
    return load_typescript_module


@pytest.fixture
def read_json_document():
    return load_json_document
