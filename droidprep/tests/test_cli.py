import json
import logging
import subprocess
import sys

import pytest

from droidprep import cli


def run_cmd(args, cwd=None):
    python = sys.executable
    result = subprocess.run([python, "-m", "droidprep", *args], capture_output=True, text=True, cwd=cwd)
    return result.returncode, result.stdout, result.stderr


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_help_exits_zero():
    code, out, err = run_cmd(["--help"])
    assert code == 0
    assert "Prepare an Android platform project" in out


def test_logging_flags_after_subcommand():
    parser = cli.build_parser()
    args = parser.parse_args(["prepare", "--log-level", "DEBUG", "--log-format", "json", "--log-mode", "verbose"])
    assert args.command == "prepare"
    assert args.log_level == "DEBUG"
    assert args.log_format == "json"
    assert args.log_mode == "verbose"
    assert args.project == "."
    assert args.jvmargs is None


def test_clean_flags():
    args = cli.build_parser().parse_args(["clean", "--project", "app", "--no-prepare", "--platform-dir", "native"])
    assert args.no_prepare is True
    assert args.project == "app"
    assert args.platform_dir == "native"


def test_no_command_prints_help(tmp_path, capsys):
    assert cli.main(["--log-file", str(tmp_path / "cli.log")]) == 2
    assert "usage: droidprep" in capsys.readouterr().out


def test_prepare_json_report(sample_project, tmp_path, capsys):
    code = cli.main([
        "prepare", "--project", str(sample_project.root), "--json",
        "--jvmargs=-Xmx4g", "--log-file", str(tmp_path / "cli.log"),
    ])
    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["package_name"] == "com.example.hello"
    assert report["version_code"] == 20304
    assert any(d["severity"] == "verbose" for d in report["diagnostics"])
    assert "org.gradle.jvmargs=-Xmx4g" in sample_project.locations.gradle_properties.read_text()


def test_prepare_error_exits_one(sample_project, tmp_path):
    (sample_project.root / "www").rename(sample_project.root / "www-gone")
    code = cli.main(["prepare", "--project", str(sample_project.root), "--log-file", str(tmp_path / "cli.log")])
    assert code == 1


def test_clean_subcommand(sample_project, tmp_path):
    log_file = str(tmp_path / "cli.log")
    assert cli.main(["prepare", "--project", str(sample_project.root), "--log-file", log_file]) == 0
    assert cli.main(["clean", "--project", str(sample_project.root), "--log-file", log_file]) == 0
    assert not (sample_project.locations.www / "index.html").exists()
