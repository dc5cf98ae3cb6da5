from __future__ import annotations

import io
from typing import TYPE_CHECKING

from llmify.config import DEFAULT_MAX_FILE_CHARS, SEPARATOR, guess_file_type, guess_language
from llmify.file_manipulation import displayable, limit_string, now_iso, read_file_content
from llmify.logging import logger

if TYPE_CHECKING:
    from pathlib import Path

    from llmify.crawler import CrawlResult
    from llmify.rules import RuleSet
    from llmify.settings import CrawlOptions

FILE_SEPARATOR = "\n\n---\n\n"


def fence_language(rel: str) -> str:
    """Code fence hint for a file: known language, else its bare extension."""
    lang = guess_language(guess_file_type(rel))
    if lang:
        return lang
    name = rel.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot + 1 :].lower() if dot > 0 else ""


def file_body(path: Path, max_chars: int = DEFAULT_MAX_FILE_CHARS) -> str:
    """Content of one included file, truncated, or an inline error marker.

    Args:
        path (Path): the file to read.
        max_chars (int): characters kept before truncation.

    Returns:
        str: the (possibly truncated) content, or `Error reading file: ...`.
    """
    try:
        content = read_file_content(path)
    except OSError as e:
        logger.warning("file_unreadable", path=str(path), error=str(e))
        return f"Error reading file: {e}"
    return limit_string(content, max_chars)


def build_header(root: Path, rules: RuleSet | None) -> str:
    """Header block: root, generation time and rule summary between separators."""
    out = io.StringIO()
    out.write(f"{SEPARATOR}\n")
    out.write(f"Project Root: {displayable(str(root))}\n")
    out.write(f"Generated At: {now_iso()}\n")
    if rules is not None:
        out.write(f"Rules: {rules.summary()}\n")
    out.write(f"{SEPARATOR}\n\n")
    return out.getvalue()


def assemble(
    root: Path,
    crawl_result: CrawlResult,
    options: CrawlOptions,
    *,
    rules: RuleSet | None = None,
) -> str:
    """Build the output document from a crawl.

    The document holds an optional header, the fenced file tree, and one
    fenced section per included file in the crawl's order.

    Args:
        root (Path): the absolute crawl root.
        crawl_result (CrawlResult): the crawl to render.
        options (CrawlOptions): `header` and `max_file_chars` are used.
        rules (RuleSet | None): rules summarized in the header, if given.

    Returns:
        str: the output document.
    """
    out = io.StringIO()
    if options.header:
        out.write(build_header(root, rules))

    out.write("## File Tree Structure\n\n")
    out.write("```\n")
    out.write(crawl_result.file_tree)
    out.write("```\n\n")
    out.write(f"{SEPARATOR}\n\n")

    out.write("## File Contents\n\n")
    for idx, rel in enumerate(crawl_result.included_files):
        if idx:
            out.write(FILE_SEPARATOR)
        out.write(f"### File: {displayable(rel)}\n\n")
        out.write(f"```{fence_language(rel)}\n")
        out.write(file_body(root / rel, options.max_file_chars).removesuffix("\n"))
        out.write("\n```")

    return out.getvalue().rstrip() + "\n"
