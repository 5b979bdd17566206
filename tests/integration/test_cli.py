import os
from unittest.mock import patch

import pytest

from csv_i18n.cli import build_parser, main


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_parser_defaults_leave_config_values_alone():
    args = build_parser().parse_args(['-i', 'in', '-o', 'out'])
    assert vars(args) == {
        'input_dir': 'in',
        'output_dir': 'out',
        'output_format': None,
        'watch': None,
        'config_file': None,
        'log_level': None,
        'show_progress': None,
    }


def test_main_converts_once(workdir, csv_tree, output_dir, read_json_document):
    csv_tree.write('common.csv', "key,en\ngreeting,Hello\n")

    exit_code = main(['-i', csv_tree.root, '-o', output_dir, '-f', 'i18next', '--no-progress'])

    assert exit_code == 0
    assert read_json_document(os.path.join(output_dir, 'en.json')) == {'common': {'greeting': 'Hello'}}


def test_main_fails_for_missing_input(workdir, output_dir):
    assert main(['-i', str(workdir / 'missing'), '-o', output_dir, '--no-progress']) == 1


def test_main_requires_input_and_output(workdir, capsys):
    assert main(['--no-progress']) == 1
    assert 'Input directory is not configured' in capsys.readouterr().err


def test_main_rejects_unknown_format(workdir):
    with pytest.raises(SystemExit) as exit_info:
        main(['-i', 'in', '-o', 'out', '-f', 'xml'])
    assert exit_info.value.code == 2


def test_watch_mode_starts_after_initial_conversion(workdir, csv_tree, output_dir):
    csv_tree.write('common.csv', "key,en\ngreeting,Hello\n")
    argv = ['-i', csv_tree.root, '-o', output_dir, '--watch', '--no-progress']

    with patch('csv_i18n.cli.watch_input_directory', return_value=0) as mock_watch:
        exit_code = main(argv)

    assert exit_code == 0
    assert os.path.exists(os.path.join(output_dir, 'en.ts'))
    mock_watch.assert_called_once_with(csv_tree.root, argv)


def test_watch_mode_does_not_start_when_initial_conversion_fails(workdir, output_dir):
    with patch('csv_i18n.cli.watch_input_directory') as mock_watch:
        exit_code = main(['-i', str(workdir / 'missing'), '-o', output_dir, '-w', '--no-progress'])

    assert exit_code == 1
    mock_watch.assert_not_called()


def test_no_watch_overrides_config_file(workdir, csv_tree, output_dir):
    (workdir / 'csv_i18n.yaml').write_text("watch: true\n")
    csv_tree.write('common.csv', "key,en\ngreeting,Hello\n")

    with patch('csv_i18n.cli.watch_input_directory') as mock_watch:
        exit_code = main(['-i', csv_tree.root, '-o', output_dir, '--no-watch', '--no-progress'])

    assert exit_code == 0
    mock_watch.assert_not_called()


def test_unusable_log_file_is_reported_without_traceback(workdir, csv_tree, output_dir, capsys):
    (workdir / 'blocker').write_text("a file, not a directory")
    (workdir / 'csv_i18n.yaml').write_text("logging:\n  log_file_path: blocker/logs/csv_i18n.log\n")

    assert main(['-i', csv_tree.root, '-o', output_dir, '--no-progress']) == 1
    assert "Error: " in capsys.readouterr().err
