from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from llmify import settings
from llmify.exceptions import ConfigFileError
from llmify.settings import CrawlOptions, env_defaults, file_defaults, find_config_file, load_options


@pytest.mark.unit
def test_options_defaults() -> None:
    options = CrawlOptions()

    assert options.root.resolve() == Path.cwd().resolve()
    assert options.output == Path("llm.txt")
    assert options.excludes == []
    assert options.max_depth == 0
    assert options.use_gitignore is True
    assert options.exclude_binary is True
    assert options.header is True
    assert options.skip_hidden_dirs is True


@pytest.mark.unit
def test_options_split_comma_separated_globs() -> None:
    options = CrawlOptions(excludes=["*.md,docs/", " *.rst "], includes="a.py, b.py")

    assert options.excludes == ["*.md", "docs/", "*.rst"]
    assert options.includes == ["a.py", "b.py"]


@pytest.mark.unit
def test_options_reject_negative_depth() -> None:
    with pytest.raises(ValidationError):
        CrawlOptions(max_depth=-1)


@pytest.mark.unit
def test_options_are_frozen() -> None:
    options = CrawlOptions()

    with pytest.raises(ValidationError):
        options.max_depth = 3  # type: ignore[misc]


@pytest.mark.unit
def test_resolved_output_is_taken_from_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    options = CrawlOptions(root=tmp_path / "elsewhere", output=Path("ctx.txt"))

    assert options.resolved_output == (tmp_path / "ctx.txt").resolve()


@pytest.mark.unit
def test_env_defaults_converts_types() -> None:
    values = env_defaults(
        {
            "LLMIFY_MAX_DEPTH": "3",
            "LLMIFY_HEADER": "no",
            "LLMIFY_EXCLUDES": "*.md, docs/",
            "LLMIFY_OUTPUT": "context.txt",
            "LLMIFY_ROOT": "/ignored",
            "LLMIFY_UNKNOWN": "x",
            "OTHER": "1",
        },
    )

    assert values == {
        "max_depth": 3,
        "header": False,
        "excludes": ["*.md", "docs/"],
        "output": "context.txt",
    }


@pytest.mark.unit
def test_env_defaults_rejects_bad_boolean() -> None:
    with pytest.raises(ValueError, match="LLMIFY_HEADER"):
        env_defaults({"LLMIFY_HEADER": "maybe"})


@pytest.mark.unit
def test_find_config_file_prefers_project_file(tmp_path: Path) -> None:
    assert find_config_file(tmp_path) is None

    rc = tmp_path / ".llmifyrc.yaml"
    rc.write_text("crawl: {}\n", encoding="utf-8")

    assert find_config_file(tmp_path) == rc


@pytest.mark.unit
def test_file_defaults_reads_crawl_section(tmp_path: Path) -> None:
    rc = tmp_path / ".llmifyrc.yaml"
    rc.write_text(
        "crawl:\n  max-depth: 2\n  excludes: ['*.md']\n  root: /nope\n  unknown: 1\nother: {}\n",
        encoding="utf-8",
    )

    assert file_defaults(rc) == {"max_depth": 2, "excludes": ["*.md"]}
    assert file_defaults(None) == {}


@pytest.mark.unit
def test_file_defaults_rejects_invalid_yaml(tmp_path: Path) -> None:
    rc = tmp_path / ".llmifyrc.yaml"
    rc.write_text("crawl: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigFileError):
        file_defaults(rc)


@pytest.mark.unit
def test_load_options_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".llmifyrc.yaml").write_text(
        "crawl:\n  max_depth: 2\n  header: false\n  output: from-file.txt\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("LLMIFY_MAX_DEPTH", "4")
    monkeypatch.setenv("LLMIFY_OUTPUT", "from-env.txt")

    options = load_options(tmp_path, {"output": Path("from-cli.txt")})

    assert options.root == tmp_path
    assert options.header is False
    assert options.max_depth == 4
    assert options.output == Path("from-cli.txt")


@pytest.mark.unit
def test_load_options_reads_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("LLMIFY_MAX_FILE_CHARS=500\n", encoding="utf-8")
    monkeypatch.setattr(settings, "ENV_FILE", str(env_file))

    options = load_options(tmp_path, {})

    assert options.max_file_chars == 500


@pytest.mark.unit
def test_load_options_wraps_invalid_values(tmp_path: Path) -> None:
    (tmp_path / ".llmifyrc.yaml").write_text("crawl:\n  max_depth: -5\n", encoding="utf-8")

    with pytest.raises(ConfigFileError, match="Invalid option value"):
        load_options(tmp_path, {})
