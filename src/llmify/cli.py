"""llmify: prepare a project directory as context for an LLM.

Overview
--------
Crawls a project directory, honors `.gitignore`, `.llmignore` (created with
sensible defaults on first run) and built-in ignore rules, and writes a single
text file (`llm.txt` by default) holding a file tree and the content of every
relevant file.

Option values can also come from `LLMIFY_*` environment variables (a `.env`
file is read too) and from the `crawl:` section of `.llmifyrc.yaml`; flags
given on the command line win.

Usage
-----
Run `llmify --help` for full options. Common examples:
    - Whole project into llm.txt:
        llmify
    - Only `src/`, two levels deep, without the header block:
        llmify --path src --max-depth 2 --no-header
    - Bring back one ignored file, drop the docs:
        llmify -i node_modules/pkg/index.js -e "docs/**"
    - List the files downstream commands would process:
        llmify --list-files
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from llmify import __version__
from llmify.crawler import check_root, crawl_with_options, resolve_scope
from llmify.exceptions import FatalSetupError, RenderError
from llmify.file_manipulation import displayable, write_string_to_file
from llmify.logging import logger, setup_logging
from llmify.output_construction import assemble
from llmify.rules import build_rule_set
from llmify.settings import load_options
from llmify.walker import walk_project_files

if TYPE_CHECKING:
    from collections.abc import Sequence

    from llmify.settings import CrawlOptions


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Defaults are suppressed so that only flags given explicitly override the
    environment and config file values.

    Returns:
        argparse.ArgumentParser: the parser.
    """
    p = argparse.ArgumentParser(
        prog="llmify",
        description="Export a project directory as a single context file for LLMs.",
        argument_default=argparse.SUPPRESS,
    )
    p.add_argument("directory", nargs="?", default=".", help="Project root (default: cwd).")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-o", "--output", type=Path, help="Output file (default: llm.txt).")
    p.add_argument(
        "-e",
        "--exclude",
        dest="excludes",
        action="append",
        help="Glob pattern to exclude (repeatable, comma-separated accepted).",
    )
    p.add_argument(
        "-i",
        "--include",
        dest="includes",
        action="append",
        help="Glob pattern to include, overriding every exclusion (repeatable).",
    )
    p.add_argument("-p", "--path", help="Only include this file or directory.")
    p.add_argument(
        "-d",
        "--max-depth",
        type=int,
        help="Max directory depth, 0 for unlimited.",
    )
    p.add_argument(
        "--no-gitignore",
        dest="use_gitignore",
        action="store_false",
        help="Do not use .gitignore rules.",
    )
    p.add_argument(
        "--no-llmignore",
        dest="use_llmignore",
        action="store_false",
        help="Do not use (or create) .llmignore.",
    )
    p.add_argument(
        "--exclude-binary",
        action=argparse.BooleanOptionalAction,
        help="Exclude binary files (default: on).",
    )
    p.add_argument(
        "--header",
        action=argparse.BooleanOptionalAction,
        help="Write the header block (default: on).",
    )
    p.add_argument(
        "--include-hidden",
        dest="skip_hidden_dirs",
        action="store_false",
        help="Walk hidden directories too.",
    )
    p.add_argument(
        "--max-file-chars",
        type=int,
        help="Characters kept per file before truncation.",
    )
    p.add_argument(
        "--list-files",
        action="store_true",
        help="Print the relevant files and their language instead of writing a file.",
    )
    p.add_argument("--log-file", help="Log file path.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every include/exclude decision.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> CrawlOptions:
    """Parse the command line and merge it with environment and config defaults.

    Args:
        argv (Sequence[str] | None): arguments, defaults to `sys.argv[1:]`.

    Raises:
        ConfigFileError: if the config file or environment is invalid.

    Returns:
        CrawlOptions: the options of this invocation.
    """
    args = vars(build_parser().parse_args(argv))
    root = Path(args.pop("directory"))
    return load_options(root, args)


def list_files(options: CrawlOptions) -> int:
    """Print the files downstream commands would process, one per line."""
    root = check_root(options.root)
    count = 0
    for project_file in walk_project_files(root, options):
        print(f"{displayable(project_file.rel)}\t{project_file.language}")
        count += 1
    logger.info("files_listed", root=str(root), count=count)
    return 0


def export(options: CrawlOptions) -> int:
    """Crawl the project and write the context document.

    Raises:
        FatalSetupError: if the root or scope is invalid.
        RenderError: if the file tree cannot be produced.
        OSError: if the output file cannot be written.
        UnicodeError: if the document cannot be encoded.

    Returns:
        int: the process exit code.
    """
    root = check_root(options.root)
    resolve_scope(root, options.path or None)
    logger.debug("options", **options.model_dump(mode="json"))

    rules = build_rule_set(root, options)
    result = crawl_with_options(root, rules, options)
    content = assemble(root, result, options, rules=rules)

    out_path = options.resolved_output
    write_string_to_file(out_path, content)

    print(f"Successfully generated LLM context file: {displayable(str(out_path))}")
    print(f"Included {result.included_count} files/directories in the context.")
    if result.excluded_count > 0:
        print(f"Excluded {result.excluded_count} files/directories based on rules.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    try:
        options = parse_args(argv)
    except FatalSetupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(options.log_file or None, verbose=options.verbose)

    try:
        if options.list_files:
            return list_files(options)
        return export(options)
    except (FatalSetupError, RenderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: failed to write output file: {e}", file=sys.stderr)
        return 1
    except UnicodeError as e:
        print(f"Error: output is not valid UTF-8 text: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
