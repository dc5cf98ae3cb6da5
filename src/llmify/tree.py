from __future__ import annotations

from typing import TYPE_CHECKING, Any

from llmify.exceptions import RenderError
from llmify.file_manipulation import displayable
from llmify.patterns import split_path

if TYPE_CHECKING:
    from collections.abc import Iterable

# A key no file or directory name can take.
_FILES = "/"


def sort_key(name: str) -> tuple[str, str]:
    """Case-insensitive ordering, ties broken by the exact name."""
    return (name.lower(), name)


def _add(tree: dict[str, Any], parts: tuple[str, ...], *, is_dir: bool) -> None:
    cur = tree
    stop = len(parts) if is_dir else len(parts) - 1
    for part in parts[:stop]:
        cur = cur.setdefault(part, {})
    if not is_dir:
        cur.setdefault(_FILES, set()).add(parts[-1])


def build_tree_lines(
    root_name: str,
    rel_files: Iterable[str],
    rel_dirs: Iterable[str] = (),
    max_depth: int = 0,
) -> list[str]:
    """Build a visual tree of included paths.

    Ancestors of every file and directory are implied. Each level lists its
    directories first and then its files, both sorted case-insensitively, and
    is indented by two characters.

    Args:
        root_name (str): the name to use for the root of the tree
        rel_files (Iterable[str]): included files relative to the root, POSIX separators
        rel_dirs (Iterable[str]): included directories, so that empty ones are shown
        max_depth (int): drop entries deeper than this many segments; 0 for no limit

    Returns:
        list[str]: a list of strings representing the tree structure, suitable for printing
    """
    tree: dict[str, Any] = {}
    for is_dir, rels in ((True, rel_dirs), (False, rel_files)):
        for rel in rels:
            parts = split_path(rel)
            if not parts or (max_depth > 0 and len(parts) > max_depth):
                continue
            _add(tree, parts, is_dir=is_dir)

    lines: list[str] = [f"{displayable(root_name)}/"]

    def walk(node: dict[str, Any], prefix: str) -> None:
        dirs = sorted((k for k in node if k != _FILES), key=sort_key)
        files = sorted(node.get(_FILES, set()), key=sort_key)
        entries: list[tuple[str, dict[str, Any] | None]] = [(d, node[d]) for d in dirs]
        entries.extend((f, None) for f in files)
        for idx, (name, child) in enumerate(entries):
            last = idx == len(entries) - 1
            branch = "└── " if last else "├── "
            lines.append(prefix + branch + displayable(name) + ("/" if child is not None else ""))
            if child is not None:
                walk(child, prefix + ("  " if last else "│ "))

    walk(tree, "")
    return lines


def render_tree(
    root_name: str,
    rel_files: Iterable[str],
    rel_dirs: Iterable[str] = (),
    max_depth: int = 0,
) -> str:
    """Render the tree of `build_tree_lines` as one newline-terminated string.

    Raises:
        RenderError: if the tree cannot be built.
    """
    try:
        lines = build_tree_lines(root_name, rel_files, rel_dirs, max_depth)
    except RecursionError as e:
        msg = f"File tree of {root_name} is too deep to render"
        raise RenderError(message=msg) from e
    return "\n".join(lines) + "\n"
