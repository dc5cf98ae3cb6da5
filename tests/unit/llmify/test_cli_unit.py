from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from llmify import __version__, cli
from llmify.exceptions import RenderError

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_parse_args_parses_filters_and_limits(tmp_path: Path) -> None:
    options = cli.parse_args(
        [
            str(tmp_path),
            "--output",
            "ctx.txt",
            "-e",
            "*.md,docs/",
            "--exclude",
            "*.rst",
            "-i",
            "docs/keep.md",
            "--path",
            "src",
            "--max-depth",
            "3",
            "--no-gitignore",
            "--no-header",
            "--no-exclude-binary",
            "--include-hidden",
            "--max-file-chars",
            "500",
            "-v",
        ],
    )

    assert options.root == tmp_path
    assert options.output == Path("ctx.txt")
    assert options.excludes == ["*.md", "docs/", "*.rst"]
    assert options.includes == ["docs/keep.md"]
    assert options.path == "src"
    assert options.max_depth == 3
    assert options.use_gitignore is False
    assert options.use_llmignore is True
    assert options.header is False
    assert options.exclude_binary is False
    assert options.skip_hidden_dirs is False
    assert options.max_file_chars == 500
    assert options.verbose is True


@pytest.mark.unit
def test_parse_args_defaults(tmp_path: Path) -> None:
    options = cli.parse_args([str(tmp_path)])

    assert options.output == Path("llm.txt")
    assert options.use_gitignore is True
    assert options.exclude_binary is True
    assert options.header is True
    assert options.list_files is False


@pytest.mark.unit
def test_parse_args_cli_beats_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLMIFY_MAX_DEPTH", "7")
    monkeypatch.setenv("LLMIFY_HEADER", "false")

    options = cli.parse_args([str(tmp_path), "--max-depth", "1"])

    assert options.max_depth == 1
    assert options.header is False


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    captured = capsys.readouterr()
    assert __version__ in captured.out


@pytest.mark.unit
def test_main_missing_root_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main([str(tmp_path / "missing")])

    assert exit_code == 1
    assert "Error: Root directory not found" in capsys.readouterr().err


@pytest.mark.unit
def test_main_missing_scope_fails_before_writing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output = tmp_path / "llm.txt"

    exit_code = cli.main([str(tmp_path), "-o", str(output), "--path", "nope"])

    assert exit_code == 1
    assert "Error: Target path not found" in capsys.readouterr().err
    assert not output.exists()
    assert not (tmp_path / ".llmignore").exists()


@pytest.mark.unit
def test_main_invalid_config_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".llmifyrc.yaml").write_text("crawl: [broken\n", encoding="utf-8")

    exit_code = cli.main([str(tmp_path)])

    assert exit_code == 1
    assert "Error: Invalid configuration file" in capsys.readouterr().err


@pytest.mark.unit
def test_main_render_error_fails(tmp_path: Path, mocker: MockerFixture, capsys: pytest.CaptureFixture[str]) -> None:
    mocker.patch.object(cli, "assemble", side_effect=RenderError(message="tree too deep"))

    exit_code = cli.main([str(tmp_path), "-o", str(tmp_path / "llm.txt")])

    assert exit_code == 1
    assert "Error: tree too deep" in capsys.readouterr().err


@pytest.mark.unit
def test_main_write_failure_fails(tmp_path: Path, mocker: MockerFixture, capsys: pytest.CaptureFixture[str]) -> None:
    mocker.patch.object(cli, "write_string_to_file", side_effect=OSError("disk full"))

    exit_code = cli.main([str(tmp_path), "-o", str(tmp_path / "llm.txt")])

    assert exit_code == 1
    assert "disk full" in capsys.readouterr().err


@pytest.mark.unit
def test_main_list_files(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("print('hi')\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# hi\n", encoding="utf-8")

    exit_code = cli.main([str(tmp_path), "--list-files"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == ["README.md\tmarkdown", "src/app.py\tpython"]
    assert not (tmp_path / "llm.txt").exists()
