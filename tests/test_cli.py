# tests/test_cli.py
import sys
from unittest.mock import patch

import pytest

from snapsource import cli
from snapsource.cli import create_arg_parser, build_configuration, main
from snapsource.config import DEFAULT_EXCLUDE_PATTERNS
from snapsource.models import OutputFormat
from snapsource.utils.tokenizer import Tokenizer


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A fake project; the working directory is its root."""
    src_dir = tmp_path / "src"
    src_dir.mkdir()
    (src_dir / "main.py").write_text("def hello():\n  print('hello')", encoding="utf-8")
    (src_dir / "utils.py").write_text("# This is a utility", encoding="utf-8")

    logs_dir = tmp_path / "logs"
    logs_dir.mkdir()
    (logs_dir / "app.log").write_text("ERROR: ...", encoding="utf-8")

    (tmp_path / "README.md").write_text("# My Project", encoding="utf-8")
    (tmp_path / ".gitignore").write_text("src/utils.py\n", encoding="utf-8")

    monkeypatch.chdir(tmp_path)
    return tmp_path


# --- Test 1: argument handling ---

def test_configuration_from_arguments():
    args = create_arg_parser().parse_args([
        "src", "-f", "xml", "--max-depth", "2", "-x", "*.tmp",
        "--compress", "--remove-comments", "--no-tree", "--no-gitignore",
    ])
    config = build_configuration(args)

    assert config.output_format is OutputFormat.XML
    assert config.max_depth == 2
    assert config.exclude_patterns == DEFAULT_EXCLUDE_PATTERNS + ("*.tmp",)
    assert config.compress_code and config.remove_comments
    assert config.include_project_tree is False
    assert config.ignore_gitignore is False


def test_no_default_excludes():
    args = create_arg_parser().parse_args(["x", "--no-default-excludes", "-x", "a/"])
    assert build_configuration(args).exclude_patterns == ("a/",)


def test_tree_flags_are_exclusive(capsys):
    with pytest.raises(SystemExit):
        create_arg_parser().parse_args(["--no-tree", "--tree-only"])


def test_output_targets_are_exclusive(capsys):
    with pytest.raises(SystemExit):
        create_arg_parser().parse_args(["src", "-c", "-o", "out.md"])
    assert "not allowed with argument" in capsys.readouterr().err


# --- Test 2: end-to-end runs ---

def test_end_to_end_run(project, capsys):
    """
    Simulates a full run of the 'snapsource' command:
    - ignored files (.gitignore, default excludes) stay out
    - output is written to the requested file
    """
    test_args = ["snapsource", ".", "--output", "context.txt", "-f", "plaintext"]

    with patch.object(sys, "argv", test_args):
        main()

    content = (project / "context.txt").read_text(encoding="utf-8")

    assert content.startswith("Project Structure:\n\n")
    assert "File: src/main.py" in content
    assert "def hello():" in content
    assert "File: README.md" in content
    assert "# My Project" in content

    assert "File: logs/app.log" not in content
    assert "File: src/utils.py" not in content
    assert "Written to context.txt: plaintext format" in capsys.readouterr().err


def test_output_to_stdout(project, capsys):
    main(["README.md"])
    out = capsys.readouterr().out
    assert "## README.md\n\n```md\n# My Project\n```" in out


def test_tree_only_without_paths_uses_root(project, capsys):
    main(["--tree-only", "-f", "markdown"])
    captured = capsys.readouterr()
    assert captured.out.startswith("# Project Structure\n\n```\n")
    assert "# File Contents" not in captured.out
    assert "Project structure written to stdout: markdown format" in captured.err


def test_clipboard_delivery(project, monkeypatch, capsys):
    copied = []
    monkeypatch.setattr(cli.pyperclip, "copy", copied.append)

    main(["src/main.py", "-c", "-f", "xml"])

    assert len(copied) == 1
    assert '<file path="src/main.py">' in copied[0]
    assert "Copied to clipboard: xml format" in capsys.readouterr().err


def test_token_report_and_warning(project, monkeypatch, capsys):
    monkeypatch.setattr(Tokenizer, "count", staticmethod(lambda text, model="gpt-4": 9000))

    main(["README.md", "--count-tokens", "--model", "gpt-4", "-o", "out.md"])

    err = capsys.readouterr().err
    assert "9000 tokens, $0.2700 est. cost" in err
    assert "WARNING: Token count (9000) exceeds the set limit (8192)." in err


# --- Test 3: exit codes ---

def test_no_paths_is_fatal(project, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_path_outside_root_is_fatal(project, tmp_path_factory, capsys):
    outside = tmp_path_factory.mktemp("elsewhere")
    with pytest.raises(SystemExit) as exc_info:
        main([str(outside)])
    assert exc_info.value.code == 1
    assert "Unable to determine workspace folder" in capsys.readouterr().err


def test_invalid_option_value_is_fatal(project, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["README.md", "--max-depth", "-1"])
    assert exc_info.value.code == 1
    assert "max_depth" in capsys.readouterr().err


def test_keyboard_interrupt_reports_cancel(project, monkeypatch, capsys):
    def interrupted(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "generate", interrupted)
    with pytest.raises(SystemExit) as exc_info:
        main(["README.md"])
    assert exc_info.value.code == 1
    assert "Cancelled." in capsys.readouterr().err
