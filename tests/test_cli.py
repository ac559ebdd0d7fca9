"""Command line entry point: arguments, exit codes, report and log files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import main as cli
from conftest import write_file


T = 1_600_000_000


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep the user's own settings file out of the tests."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("APPDATA", str(config_home))
    yield
    cli.shutdown_logging()


def test_successful_run_prints_report(trees, capsys):
    source, target = trees
    write_file(source / "a.txt", "a")

    assert cli.main([str(source), str(target)]) == 0

    out = capsys.readouterr().out
    assert f"SOURCE PATH: {source}" in out
    assert f"TARGET PATH: {target}" in out
    assert "Deletion allowed: No" in out
    assert "Follow symbolic links: Yes" in out
    assert "Time window for update: 0" in out
    assert "Elapsed time  : 0:00:0" in out
    assert "Compared files: 1" in out
    assert "New files     : 1" in out
    assert "END!" in out
    assert (target / "a.txt").exists()


def test_flags_reach_the_engine(trees, capsys):
    source, target = trees
    write_file(source / "a.txt", "new", mtime=T + 3)
    write_file(target / "a.txt", "old", mtime=T)
    write_file(target / "old.txt", "old")

    assert cli.main(["-d", "-s", "-w", "5", str(source), str(target)]) == 0

    out = capsys.readouterr().out
    assert "Deletion allowed: Yes" in out
    assert "Follow symbolic links: No" in out
    assert "Time window for update: 5" in out
    assert not (target / "old.txt").exists()
    assert (target / "a.txt").read_text(encoding="utf-8") == "old"


def test_verbose_prints_directory_header(trees, capsys):
    source, target = trees

    assert cli.main(["-v", str(source), str(target)]) == 0

    out = capsys.readouterr().out
    assert f"= SYNCHRONIZING: {source}" in out
    assert f"============ TO: {target}" in out


def test_missing_source_path_fails(tmp_path, capsys):
    target = tmp_path / "target"
    target.mkdir()

    assert cli.main([str(tmp_path / "missing"), str(target)]) == 1

    out = capsys.readouterr().out
    assert "CRITICAL ERROR: Cannot access source path" in out
    assert "END!" not in out


def test_missing_target_path_fails(tmp_path, capsys):
    source = tmp_path / "source"
    source.mkdir()

    assert cli.main([str(source), str(tmp_path / "missing")]) == 1
    assert "Cannot access target path" in capsys.readouterr().out


def test_policy_conflict_fails_without_report(trees, capsys):
    source, target = trees
    write_file(source / "sub" / "f.txt")
    write_file(target / "sub", "file")

    assert cli.main([str(source), str(target)]) == 1

    out = capsys.readouterr().out
    assert "Synchronization aborted" in out
    assert "Compared files" not in out


@pytest.mark.parametrize("window", ["0", "-3", "abc"])
def test_invalid_time_window_rejected(trees, capsys, window):
    source, target = trees

    assert cli.main(["-w", window, str(source), str(target)]) == 1
    assert "--help" in capsys.readouterr().err


def test_missing_arguments_rejected(capsys):
    assert cli.main([]) == 1
    assert "synchpath: error:" in capsys.readouterr().err


def test_version_exits_cleanly(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])
    assert exc_info.value.code == 0
    assert cli.APP_VERSION in capsys.readouterr().out


# =============================================================================
# Log files
# =============================================================================

def test_log_file_is_written_and_truncated(trees, tmp_path):
    source, target = trees
    log_file = tmp_path / "sync.log"
    write_file(source / "a.txt", "a")

    assert cli.main(["-l", str(log_file), str(source), str(target)]) == 0
    assert cli.main(["-l", str(log_file), str(source), str(target)]) == 0

    text = log_file.read_text(encoding="utf-8")
    assert text.count(f"Logfile for: synchpath {cli.APP_VERSION}") == 1
    assert "END!" in text
    assert text.rstrip().endswith(cli.LOG_RULE)


def test_log_file_is_appended(trees, tmp_path):
    source, target = trees
    log_file = tmp_path / "sync.log"

    assert cli.main(["-L", str(log_file), str(source), str(target)]) == 0
    assert cli.main(["-L", str(log_file), str(source), str(target)]) == 0

    text = log_file.read_text(encoding="utf-8")
    assert text.count("Logfile for: synchpath") == 2
    assert text.count("END!") == 2


def test_log_file_records_failures(tmp_path):
    log_file = tmp_path / "sync.log"

    assert cli.main(["-l", str(log_file), str(tmp_path / "a"), str(tmp_path / "b")]) == 1
    assert "CRITICAL ERROR" in log_file.read_text(encoding="utf-8")


def test_unopenable_log_file_fails(trees, tmp_path, capsys):
    source, target = trees

    assert cli.main(["-l", str(tmp_path / "no" / "dir" / "x.log"), str(source), str(target)]) == 1
    assert "Couldn't open file" in capsys.readouterr().err


def test_write_and_append_options_are_exclusive(trees, tmp_path):
    source, target = trees

    assert cli.main(["-l", "a.log", "-L", "b.log", str(source), str(target)]) == 1


# =============================================================================
# Settings and pause
# =============================================================================

def test_settings_file_provides_defaults(trees, tmp_path, capsys):
    source, target = trees
    write_file(target / "old.txt")
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"sync": {"allow_delete": True, "time_window": 4}}), encoding="utf-8")

    assert cli.main(["-c", str(config), str(source), str(target)]) == 0

    out = capsys.readouterr().out
    assert "Time window for update: 4" in out
    assert not (target / "old.txt").exists()


def test_command_line_window_overrides_settings(trees, tmp_path):
    source, target = trees
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"sync": {"time_window": 4}}), encoding="utf-8")

    args = cli.parse_arguments(["-c", str(config), "-w", "9", str(source), str(target)])
    options = cli.build_options(args, cli.SettingsManager(Path(config)))

    assert options.time_window == 9


def test_settings_flags_apply_without_command_line_flags(trees, tmp_path):
    source, target = trees
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({
        "sync": {"allow_delete": True, "verbose": True, "skip_symlinks": True, "time_window": 2},
    }), encoding="utf-8")

    args = cli.parse_arguments(["-c", str(config), str(source), str(target)])
    options = cli.build_options(args, cli.SettingsManager(Path(config)))

    assert options == cli.SyncOptions(allow_delete=True, verbose=True, time_window=2, skip_symlinks=True)


def test_invalid_settings_file_fails(trees, tmp_path, capsys):
    source, target = trees
    config = tmp_path / "settings.json"
    config.write_text("{broken", encoding="utf-8")

    assert cli.main(["--config", str(config), str(source), str(target)]) == 1
    assert "[ERROR]" in capsys.readouterr().err


@pytest.mark.parametrize("make_source", [True, False])
def test_pause_waits_on_every_exit(tmp_path, monkeypatch, make_source):
    source = tmp_path / "source"
    target = tmp_path / "target"
    target.mkdir()
    if make_source:
        source.mkdir()
    prompts = []
    monkeypatch.setattr("builtins.input", lambda prompt="": prompts.append(prompt) or "")

    exit_code = cli.main(["-p", str(source), str(target)])

    assert exit_code == (0 if make_source else 1)
    assert prompts == ["Press Enter to exit..."]


def test_pause_tolerates_closed_stdin(trees, monkeypatch):
    source, target = trees

    def closed(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", closed)

    assert cli.main(["-p", str(source), str(target)]) == 0
