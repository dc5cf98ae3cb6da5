"""Directory crawler and per-entry inclusion decisions.

`classify_entry` is a pure function of a relative path and a `CrawlContext`; it
returns what to do with the entry (include it or not, and whether to walk into
it). `crawl` drives `os.walk` with those decisions, pruning the directory list
in place, and collects the included paths.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from enum import StrEnum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, computed_field

from llmify.binary import ContentKind, classify
from llmify.config import (
    ALWAYS_PRUNED_DIRS,
    GITIGNORE_NAME,
    HIDDEN_DIR_ALLOWLIST,
    LLMIGNORE_NAME,
)
from llmify.exceptions import RootDirectoryError, ScopePathError
from llmify.file_manipulation import is_within, relpath
from llmify.logging import logger
from llmify.patterns import split_path
from llmify.rules import SOURCE_EXCLUDE, RuleSet
from llmify.tree import render_tree, sort_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from llmify.settings import CrawlOptions

SniffFn = Callable[[str], ContentKind]


class Reason(StrEnum):
    """Why an entry was included or excluded."""

    NOT_IGNORED = auto()
    MATCHED_IGNORE = auto()
    MATCHED_EXCLUDE = auto()
    OVERRIDDEN_BY_INCLUDE = auto()
    OUTSIDE_SCOPE = auto()
    EXCEEDS_DEPTH = auto()
    BINARY_EXCLUDED = auto()
    HIDDEN_DIRECTORY = auto()
    UNREADABLE = auto()
    TOOL_FILE = auto()
    TRAVERSED_FOR_INCLUDE = auto()


class Action(StrEnum):
    """What the walk does with an entry once classified."""

    DESCEND = auto()
    SKIP = auto()
    PRUNE = auto()


# Exclusions that are bookkeeping rather than filtering.
_UNCOUNTED = frozenset({Reason.TOOL_FILE, Reason.TRAVERSED_FOR_INCLUDE})


class ClassificationResult(BaseModel):
    """Decision for one entry. Transient, used for diagnostics and counting."""

    model_config = ConfigDict(frozen=True)

    included: bool
    reason: Reason
    action: Action

    @computed_field
    @property
    def counted(self) -> bool:
        """Whether the entry adds to the excluded count."""
        return not self.included and self.reason not in _UNCOUNTED


class CrawlContext(BaseModel):
    """Everything `classify_entry` needs besides the path.

    Attributes:
        rules: The merged ignore rules.
        scope: POSIX path of the scope target relative to the root, or None.
        scope_is_dir: Whether the scope target is a directory.
        max_depth: Maximum number of path segments, 0 for unlimited.
        exclude_binary: Whether binary files are excluded.
        tool_files: Relative paths excluded without being counted. The ignore
            files come back when an `--include` pattern names them; the output
            file never does.
        skip_hidden_dirs: Whether dot-directories outside the allow-list are pruned.
        hidden_dir_allowlist: Dot-directories walked anyway.
        sniff: Text/binary classifier taking a relative path; may raise OSError.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    rules: RuleSet
    scope: str | None = None
    scope_is_dir: bool = True
    max_depth: int = Field(default=0, ge=0)
    exclude_binary: bool = True
    tool_files: frozenset[str] = frozenset()
    skip_hidden_dirs: bool = True
    hidden_dir_allowlist: frozenset[str] = frozenset(HIDDEN_DIR_ALLOWLIST)
    sniff: SniffFn | None = None


class CrawlResult(BaseModel):
    """Outcome of one crawl. Never mutated once built.

    Attributes:
        included_files: Included files relative to the root, sorted case-insensitively.
        included_dirs: Included directories, same ordering.
        file_tree: Rendered tree over exactly the included paths.
        included_count: Number of included files and directories.
        excluded_count: Number of excluded entries (pruned subtrees count once).
    """

    model_config = ConfigDict(frozen=True)

    included_files: tuple[str, ...] = ()
    included_dirs: tuple[str, ...] = ()
    file_tree: str = ""
    included_count: int = Field(default=0, ge=0)
    excluded_count: int = Field(default=0, ge=0)


def _excluded(reason: Reason, *, is_dir: bool) -> ClassificationResult:
    return ClassificationResult(
        included=False,
        reason=reason,
        action=Action.PRUNE if is_dir else Action.SKIP,
    )


def _forced_ignore_file(rel_path: str, rules: RuleSet) -> bool:
    return rel_path in {GITIGNORE_NAME, LLMIGNORE_NAME} and rules.is_force_included(rel_path, is_dir=False)


def _in_scope(rel_path: str, *, is_dir: bool, context: CrawlContext) -> bool:
    scope = context.scope
    if scope is None or rel_path == scope:
        return True
    if context.scope_is_dir and rel_path.startswith(scope + "/"):
        return True
    # Ancestors of the target stay walkable.
    return is_dir and scope.startswith(rel_path + "/")


def classify_entry(rel_path: str, is_dir: bool, context: CrawlContext) -> ClassificationResult:  # noqa: C901, FBT001
    """Decide whether one entry is included and whether to walk into it.

    Checks run in order and stop at the first exclusion: tool files, scope,
    ignore rules (with `--include` overrides), hidden directories, depth,
    binary content.

    Args:
        rel_path (str): POSIX path relative to the crawl root.
        is_dir (bool): whether the entry is a directory.
        context (CrawlContext): rules and limits of the crawl.

    Returns:
        ClassificationResult: the decision for the entry.
    """
    parts = split_path(rel_path)
    if not parts:
        return ClassificationResult(included=True, reason=Reason.NOT_IGNORED, action=Action.DESCEND)
    rel = "/".join(parts)
    rules = context.rules

    if not is_dir and rel in context.tool_files and not _forced_ignore_file(rel, rules):
        return _excluded(Reason.TOOL_FILE, is_dir=False)

    if not _in_scope(rel, is_dir=is_dir, context=context):
        return _excluded(Reason.OUTSIDE_SCOPE, is_dir=is_dir)

    # Directory segments of the entry: itself when a directory, else its ancestors.
    dir_parts = parts if is_dir else parts[:-1]
    forced = rules.is_force_included(rel, is_dir)
    floor = any(part in ALWAYS_PRUNED_DIRS for part in dir_parts)
    pattern = None if floor else rules.explain(rel, is_dir)
    if (floor or pattern is not None) and not forced:
        if is_dir and rules.include_reaches_beneath(rel):
            return ClassificationResult(
                included=False,
                reason=Reason.TRAVERSED_FOR_INCLUDE,
                action=Action.DESCEND,
            )
        from_cli = pattern is not None and pattern.source == SOURCE_EXCLUDE
        return _excluded(Reason.MATCHED_EXCLUDE if from_cli else Reason.MATCHED_IGNORE, is_dir=is_dir)
    overridden = forced and (floor or pattern is not None)
    if overridden:
        logger.debug("override", path=rel, pattern=pattern.raw if pattern else parts[-1])

    hidden = context.skip_hidden_dirs and any(
        part.startswith(".") and part not in context.hidden_dir_allowlist for part in dir_parts
    )
    scope = context.scope
    targeted = scope is not None and (
        scope == rel or scope.startswith(rel + "/") or rel.startswith(scope + "/")
    )
    if hidden and not targeted and not rules.reincludes(rel, is_dir):
        if is_dir and rules.include_reaches_beneath(rel):
            return ClassificationResult(
                included=False,
                reason=Reason.TRAVERSED_FOR_INCLUDE,
                action=Action.DESCEND,
            )
        return _excluded(Reason.HIDDEN_DIRECTORY, is_dir=is_dir)

    if context.max_depth > 0 and len(parts) > context.max_depth:
        return _excluded(Reason.EXCEEDS_DEPTH, is_dir=is_dir)

    if not is_dir and context.exclude_binary and not forced and context.sniff is not None:
        try:
            kind = context.sniff(rel)
        except OSError as e:
            logger.warning("classify_failed", path=rel, error=str(e))
            return _excluded(Reason.UNREADABLE, is_dir=False)
        if kind is ContentKind.BINARY:
            return _excluded(Reason.BINARY_EXCLUDED, is_dir=False)

    return ClassificationResult(
        included=True,
        reason=Reason.OVERRIDDEN_BY_INCLUDE if overridden else Reason.NOT_IGNORED,
        action=Action.DESCEND if is_dir else Action.SKIP,
    )


def check_root(root: Path) -> Path:
    """Resolve the crawl root and make sure it is a readable directory.

    Args:
        root (Path): the root directory, possibly relative.

    Raises:
        RootDirectoryError: if the root is missing, not a directory or unreadable.

    Returns:
        Path: the absolute root.
    """
    resolved = root.expanduser().resolve()
    if not resolved.exists():
        raise RootDirectoryError(path=resolved)
    if not resolved.is_dir():
        raise RootDirectoryError(path=resolved, message="Specified path is not a directory")
    try:
        with os.scandir(resolved):
            pass
    except OSError as e:
        raise RootDirectoryError(path=resolved, message=f"Failed to access root directory ({e})") from e
    return resolved


def resolve_scope(root: Path, scope: str | Path | None) -> tuple[str | None, bool]:
    """Turn a `--path` value into a POSIX path relative to `root`.

    Args:
        root (Path): the absolute crawl root.
        scope (str | Path | None): the scope target, relative to the root or absolute.

    Raises:
        ScopePathError: if the target lies outside the root or does not exist.

    Returns:
        tuple[str | None, bool]: the relative target (None for no scope) and
            whether it is a directory.
    """
    if scope is None or str(scope).strip() in {"", "."}:
        return None, True
    target = Path(scope).expanduser()
    target = (target if target.is_absolute() else root / target).resolve()
    if not is_within(target, root):
        raise ScopePathError(path=target, message="Target path cannot be outside the root directory")
    if not target.exists():
        raise ScopePathError(path=target)
    if target == root:
        return None, True
    return relpath(target, root), target.is_dir()


def tool_files_for(root: Path, output_path: Path | None) -> frozenset[str]:
    """Relative paths the crawl never reports: root ignore files and the output file."""
    names = {GITIGNORE_NAME, LLMIGNORE_NAME}
    if output_path is not None:
        out = output_path.expanduser().resolve()
        if is_within(out, root) and out != root:
            names.add(relpath(out, root))
    return frozenset(names)


def crawl(  # noqa: PLR0913
    root: Path,
    rules: RuleSet,
    *,
    scope: str | Path | None = None,
    max_depth: int = 0,
    exclude_binary: bool = True,
    output_path: Path | None = None,
    skip_hidden_dirs: bool = True,
    hidden_dir_allowlist: Iterable[str] = HIDDEN_DIR_ALLOWLIST,
) -> CrawlResult:
    """Walk `root` once and collect the included paths.

    Args:
        root (Path): the directory to crawl.
        rules (RuleSet): the merged ignore rules.
        scope (str | Path | None): only crawl this file or subtree.
        max_depth (int): maximum number of path segments, 0 for unlimited.
        exclude_binary (bool): exclude files classified as binary.
        output_path (Path | None): the output file, never included.
        skip_hidden_dirs (bool): prune dot-directories outside the allow-list.
        hidden_dir_allowlist (Iterable[str]): dot-directories walked anyway.

    Raises:
        RootDirectoryError: if the root cannot be walked.
        ScopePathError: if the scope target is invalid.
        RenderError: if the file tree cannot be rendered.

    Returns:
        CrawlResult: included files and directories, tree and counts.
    """
    abs_root = check_root(Path(root))
    scope_rel, scope_is_dir = resolve_scope(abs_root, scope)

    def sniff(rel: str) -> ContentKind:
        return classify(abs_root / rel)

    context = CrawlContext(
        rules=rules,
        scope=scope_rel,
        scope_is_dir=scope_is_dir,
        max_depth=max_depth,
        exclude_binary=exclude_binary,
        tool_files=tool_files_for(abs_root, output_path),
        skip_hidden_dirs=skip_hidden_dirs,
        hidden_dir_allowlist=frozenset(hidden_dir_allowlist),
        sniff=sniff,
    )

    included_files: list[str] = []
    included_dirs: list[str] = []
    excluded = 0

    def on_error(err: OSError) -> None:
        logger.warning("walk_entry_error", path=str(err.filename), error=str(err))

    def visit(rel: str, *, is_dir: bool) -> ClassificationResult:
        nonlocal excluded
        result = classify_entry(rel, is_dir, context)
        if result.included:
            (included_dirs if is_dir else included_files).append(rel)
            logger.debug("include", path=rel, reason=result.reason.value)
        elif result.counted:
            excluded += 1
            logger.debug("exclude", path=rel, reason=result.reason.value)
        return result

    for dirpath, dirnames, filenames in os.walk(abs_root, topdown=True, onerror=on_error):
        base = relpath(Path(dirpath), abs_root)
        prefix = "" if base == "." else base + "/"
        kept: list[str] = []
        for name in sorted(dirnames, key=sort_key):
            if visit(prefix + name, is_dir=True).action is Action.DESCEND:
                kept.append(name)
        dirnames[:] = kept
        for name in sorted(filenames, key=sort_key):
            visit(prefix + name, is_dir=False)

    files = tuple(sorted(included_files, key=sort_key))
    dirs = tuple(sorted(included_dirs, key=sort_key))
    tree = render_tree(abs_root.name or str(abs_root), files, dirs, max_depth)
    return CrawlResult(
        included_files=files,
        included_dirs=dirs,
        file_tree=tree,
        included_count=len(files) + len(dirs),
        excluded_count=excluded,
    )


def crawl_with_options(root: Path, rules: RuleSet, options: CrawlOptions) -> CrawlResult:
    """Run `crawl` with the limits and toggles held by `options`."""
    return crawl(
        root,
        rules,
        scope=options.path or None,
        max_depth=options.max_depth,
        exclude_binary=options.exclude_binary,
        output_path=options.resolved_output,
        skip_hidden_dirs=options.skip_hidden_dirs,
        hidden_dir_allowlist=options.hidden_dir_allowlist,
    )
