import os
import sys
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from llmify import cli


@pytest.mark.integration
def test_main_runs_rules_crawl_and_assembly(
    sample_project: Path,
    mocker: MockerFixture,
) -> None:
    output = sample_project / "llm.txt"
    build_spy = mocker.spy(cli, "build_rule_set")
    crawl_spy = mocker.spy(cli, "crawl_with_options")

    exit_code = cli.main([str(sample_project), "--output", str(output)])

    assert exit_code == 0
    build_spy.assert_called_once()
    crawl_spy.assert_called_once()
    result = crawl_spy.spy_return
    assert result.included_files == ("src/a.go",)
    assert output.exists()


@pytest.mark.integration
def test_main_prints_summary(sample_project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output = sample_project / "llm.txt"

    cli.main([str(sample_project), "-o", str(output)])

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        f"Successfully generated LLM context file: {output}",
        "Included 2 files/directories in the context.",
        "Excluded 3 files/directories based on rules.",
    ]


@pytest.mark.integration
def test_second_run_ignores_previous_output(sample_project: Path) -> None:
    output = sample_project / "llm.txt"

    cli.main([str(sample_project), "-o", str(output)])
    first = output.read_text(encoding="utf-8")
    cli.main([str(sample_project), "-o", str(output), "--no-header"])
    second = output.read_text(encoding="utf-8")

    assert "### File: llm.txt" not in second
    assert second == first[first.index("## File Tree Structure") :]


@pytest.mark.integration
def test_config_file_defaults_apply(sample_project: Path) -> None:
    (sample_project / "docs").mkdir()
    (sample_project / "docs" / "guide.md").write_text("# Guide\n", encoding="utf-8")
    (sample_project / ".llmifyrc.yaml").write_text(
        "crawl:\n  excludes: ['docs/']\n  header: false\n",
        encoding="utf-8",
    )
    output = sample_project / "llm.txt"

    exit_code = cli.main([str(sample_project), "-o", str(output)])

    content = output.read_text(encoding="utf-8")
    assert exit_code == 0
    assert content.startswith("## File Tree Structure")
    assert "guide.md" not in content


@pytest.mark.integration
@pytest.mark.skipif(sys.platform != "linux", reason="needs a file system accepting raw byte names")
def test_main_handles_undecodable_file_name(tmp_path: Path) -> None:
    root = tmp_path / "project"
    root.mkdir()
    (root / "main.go").write_text("package main\n", encoding="utf-8")
    with open(os.path.join(os.fsencode(root), b"caf\xe9.txt"), "wb") as f:
        f.write(b"hello\n")
    output = tmp_path / "llm.txt"

    exit_code = cli.main([str(root), "-o", str(output)])

    content = output.read_text(encoding="utf-8")
    assert exit_code == 0
    assert "### File: caf\\xe9.txt" in content
    assert "└── main.go" in content
    assert "hello" in content
