from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from llmify.config import FileType, guess_file_type, guess_language
from llmify.crawler import crawl
from llmify.logging import logger
from llmify.rules import build_rule_set

if TYPE_CHECKING:
    from collections.abc import Iterator

    from llmify.settings import CrawlOptions


class ProjectFile(BaseModel):
    """A relevant text file handed to downstream commands.

    Attributes:
        path: Absolute path to the file on disk.
        rel: Path relative to the crawl root, POSIX separators.
        language: Detected language name (never empty).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Absolute file path")
    rel: str = Field(..., description="File path relative to the crawl root")
    language: str = Field(..., min_length=1, description="Detected language")


def detect_language(path: str | Path) -> str:
    """Language of a file from its extension or base name, "" when unknown."""
    file_type = guess_file_type(Path(path).name)
    if file_type is FileType.OTHER:
        return ""
    return guess_language(file_type)


def walk_project_files(
    root: Path,
    options: CrawlOptions,
    *,
    start: str | Path | None = None,
) -> Iterator[ProjectFile]:
    """Yield the files a downstream command should process.

    Uses the same rules as the document export (ignore files, built-ins,
    `--exclude` / `--include`, depth, binary detection) but never creates a
    `.llmignore`. Files whose language cannot be detected are skipped.

    Args:
        root (Path): the project root.
        options (CrawlOptions): the invocation options.
        start (str | Path | None): only walk this file or subtree; defaults to
            `options.path`.

    Raises:
        RootDirectoryError: if the root cannot be walked.
        ScopePathError: if `start` is invalid.

    Yields:
        Iterator[ProjectFile]: relevant files, in the crawl's sorted order.
    """
    abs_root = root.expanduser().resolve()
    rules = build_rule_set(abs_root, options, create_missing=False)
    result = crawl(
        abs_root,
        rules,
        scope=start if start is not None else (options.path or None),
        max_depth=options.max_depth,
        exclude_binary=True,
        output_path=options.resolved_output,
        skip_hidden_dirs=options.skip_hidden_dirs,
        hidden_dir_allowlist=options.hidden_dir_allowlist,
    )
    for rel in result.included_files:
        language = detect_language(rel)
        if not language:
            logger.debug("walker_unknown_language", path=rel)
            continue
        yield ProjectFile(path=abs_root / rel, rel=rel, language=language)
