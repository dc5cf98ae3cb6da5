from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def is_within(path: Path, root: Path) -> bool:
    """Check if `path` is `root` or lies beneath it (both absolute)."""
    return path == root or root in path.parents


def normalize_globs(globs: Sequence[str]) -> list[str]:
    """Normalize a sequence of path glob patterns.

    Normalize a sequence of glob patterns by stripping whitespace and
    replacing backslashes with forward slashes.

    Args:
        globs (Sequence[str]): the glob patterns to normalize

    Returns:
        list[str]: the normalized glob patterns
    """
    out: list[str] = []
    for g in globs:
        g2 = (g or "").strip()
        if not g2:
            continue
        out.append(g2.replace("\\", "/"))
    return out


def read_lines(path: Path) -> list[str]:
    """Read a text file and return its lines, without line terminators.

    Args:
        path (Path): the file to read

    Raises:
        OSError: if the file cannot be read.

    Returns:
        list[str]: the lines of the file
    """
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


def decode_content(data: bytes) -> str:
    """Decode file bytes as UTF-8, falling back to Latin-1.

    Latin-1 maps every byte to a code point, so the fallback never fails.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def read_file_content(path: Path) -> str:
    """Read a file's whole content as text.

    Args:
        path (Path): the file to read

    Raises:
        OSError: if the file cannot be read.

    Returns:
        str: the decoded content
    """
    return decode_content(path.read_bytes())


def limit_string(text: str, max_chars: int) -> str:
    """Cap `text` to `max_chars` characters, preferring to cut at a line end.

    The cut happens after the last newline before the limit when there is one,
    otherwise exactly at the limit. A marker line with the kept and total sizes
    is appended to a truncated text.

    Args:
        text (str): the text to cap
        max_chars (int): the maximum number of characters kept

    Returns:
        str: `text` unchanged if short enough, else the truncated text and marker
    """
    if len(text) <= max_chars:
        return text
    head = text[:max_chars]
    newline = head.rfind("\n")
    if newline > 0:
        head = head[:newline]
    return f"{head}\n... [truncated: showing {len(head)} of {len(text)} characters]"


def write_string_to_file(path: Path, content: str) -> None:
    """Write `content` to `path` as UTF-8, creating parent directories.

    The text is encoded before the file is opened, so a failed encoding
    leaves an existing file untouched.

    Args:
        path (Path): the destination file
        content (str): the text to write

    Raises:
        UnicodeEncodeError: if `content` holds lone surrogates.
        OSError: if the directory or file cannot be written.
    """
    data = content.encode("utf-8")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def displayable(text: str) -> str:
    """Render a name decoded by `os.fsdecode` as printable UTF-8 text.

    Undecodable bytes come back from the OS as lone surrogates, which cannot be
    encoded. They are shown as `\\xNN` escapes instead.
    """
    try:
        return text.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")
    except UnicodeEncodeError:
        return text.encode("utf-8", "backslashreplace").decode("utf-8")


def now_iso() -> str:
    """Return the current date and time in ISO 8601 format with timezone.

    Returns:
        str: the current date and time in ISO 8601 format with timezone
    """
    return datetime.now(UTC).astimezone().isoformat(timespec="seconds")
