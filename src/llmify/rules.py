from __future__ import annotations

from typing import TYPE_CHECKING

from llmify.config import (
    BUILTIN_IGNORE_PATTERNS,
    DEFAULT_LLMIGNORE_PATTERNS,
    DEFAULT_OUTPUT,
    GITIGNORE_NAME,
    LLMIGNORE_NAME,
)
from llmify.file_manipulation import normalize_globs, read_lines, write_string_to_file
from llmify.logging import logger
from llmify.patterns import Pattern, PatternMatcher, compile_patterns

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from llmify.settings import CrawlOptions

SOURCE_BUILTIN = "built-in"
SOURCE_EXCLUDE = "--exclude"
SOURCE_INCLUDE = "--include"


class RuleSet:
    """Ignore rules of one crawl, in increasing override power.

    The ignore matcher holds, in order, the `.gitignore` patterns, the
    `.llmignore` patterns, the built-in defaults and the `--exclude` patterns.
    The `--include` patterns live in a separate matcher consulted after the
    ignore decision, and win over it.
    """

    def __init__(
        self,
        ignore: PatternMatcher,
        includes: PatternMatcher | None = None,
        sources: Sequence[tuple[str, int]] = (),
    ) -> None:
        self._ignore = ignore
        self._includes = includes or PatternMatcher()
        self._sources = tuple(sources)

    @property
    def ignore(self) -> PatternMatcher:
        return self._ignore

    @property
    def includes(self) -> PatternMatcher:
        return self._includes

    @property
    def sources(self) -> tuple[tuple[str, int], ...]:
        return self._sources

    def explain(self, rel_path: str, is_dir: bool | None = None) -> Pattern | None:
        """Return the pattern that ignores `rel_path`, if any."""
        return self._ignore.explain(rel_path, is_dir)

    def matches(self, rel_path: str, is_dir: bool | None = None) -> bool:
        """Tell whether `rel_path` is ignored, before include overrides."""
        return self._ignore.matches(rel_path, is_dir)

    def is_force_included(self, rel_path: str, is_dir: bool | None = None) -> bool:
        """Tell whether a `--include` pattern selects `rel_path`."""
        return self._includes.matches(rel_path, is_dir)

    def reincludes(self, rel_path: str, is_dir: bool | None = None) -> bool:
        """Tell whether a rule explicitly brings `rel_path` back (include or negation)."""
        return self.is_force_included(rel_path, is_dir) or self._ignore.negates(rel_path, is_dir)

    def include_reaches_beneath(self, rel_dir: str) -> bool:
        """Tell whether an anchored `--include` pattern may select something under `rel_dir`."""
        return self._includes.could_match_beneath(rel_dir)

    def summary(self) -> str:
        """One-line description of the rule sources and their pattern counts."""
        if not self._sources:
            return "none"
        return ", ".join(f"{name} ({count})" for name, count in self._sources)


def read_ignore_file(path: Path) -> list[str]:
    """Read the lines of an ignore file.

    A missing file yields no lines. A file that exists but cannot be read is
    reported as a warning and yields no lines either.

    Args:
        path (Path): the ignore file.

    Returns:
        list[str]: the raw lines of the file.
    """
    if not path.exists():
        return []
    try:
        return read_lines(path)
    except OSError as e:
        logger.warning("ignore_file_unreadable", path=str(path), error=str(e))
        return []


def default_llmignore_content(output_name: str = DEFAULT_OUTPUT) -> str:
    """Content written to a freshly created `.llmignore`."""
    return "\n".join([*DEFAULT_LLMIGNORE_PATTERNS, output_name]) + "\n"


def create_default_ignore_file(root: Path, output_name: str = DEFAULT_OUTPUT) -> Path:
    """Create `.llmignore` in `root` with the default patterns.

    Args:
        root (Path): the project root.
        output_name (str): the output file name, ignored by the new file.

    Raises:
        OSError: if the file cannot be written.

    Returns:
        Path: the created file.
    """
    path = root / LLMIGNORE_NAME
    write_string_to_file(path, default_llmignore_content(output_name))
    return path


def build_rule_set(
    root: Path,
    options: CrawlOptions,
    *,
    create_missing: bool = True,
) -> RuleSet:
    """Merge every rule source of a crawl into a RuleSet.

    Args:
        root (Path): the project root (absolute).
        options (CrawlOptions): the invocation options.
        create_missing (bool): create a default `.llmignore` when it is enabled
            and absent.

    Returns:
        RuleSet: the merged rules.
    """
    patterns: list[Pattern] = []
    sources: list[tuple[str, int]] = []

    def add(lines: Sequence[str], source: str) -> None:
        compiled = compile_patterns(lines, source)
        patterns.extend(compiled)
        sources.append((source, len(compiled)))

    if options.use_gitignore:
        add(read_ignore_file(root / GITIGNORE_NAME), GITIGNORE_NAME)

    if options.use_llmignore:
        llmignore = root / LLMIGNORE_NAME
        if create_missing and not llmignore.exists():
            logger.info("llmignore_missing", path=str(llmignore))
            try:
                create_default_ignore_file(root, options.output.name or DEFAULT_OUTPUT)
            except OSError as e:
                logger.warning("llmignore_create_failed", path=str(llmignore), error=str(e))
            else:
                logger.info("llmignore_created", path=str(llmignore))
        add(read_ignore_file(llmignore), LLMIGNORE_NAME)

    add(BUILTIN_IGNORE_PATTERNS, SOURCE_BUILTIN)
    add(normalize_globs(options.excludes), SOURCE_EXCLUDE)

    includes = compile_patterns(normalize_globs(options.includes), SOURCE_INCLUDE)
    sources.append((SOURCE_INCLUDE, len(includes)))

    rules = RuleSet(PatternMatcher(patterns), PatternMatcher(includes), sources)
    logger.debug("rules_built", root=str(root), rules=rules.summary())
    return rules
