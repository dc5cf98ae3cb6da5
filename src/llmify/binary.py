from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from llmify.config import (
    BINARY_EXTENSIONS,
    BINARY_NAMES,
    CONTROL_BYTE_RATIO_THRESHOLD,
    SNIFF_BYTES,
)

_UTF16_BOMS = (b"\xfe\xff", b"\xff\xfe")
_ALLOWED_CONTROL = frozenset(b"\t\n\r")
# Longest UTF-8 sequence minus one: a cut at the sniff boundary may leave this many bytes.
_MAX_UTF8_TAIL = 3


class ContentKind(StrEnum):
    """Result of the text/binary heuristic."""

    TEXT = auto()
    BINARY = auto()


def has_binary_name(path: str | Path) -> bool:
    """Check the extension and base name of a path against the binary/lockfile tables.

    Args:
        path (str | Path): the file path, absolute or relative.

    Returns:
        bool: True if the name alone says the file is binary or a lockfile.
    """
    p = Path(path)
    return p.name in BINARY_NAMES or p.suffix.lower() in BINARY_EXTENSIONS


def is_valid_utf8(chunk: bytes, *, truncated: bool) -> bool:
    """Check if a byte chunk decodes as UTF-8.

    When `truncated` is True the chunk is the head of a longer file, and a
    multi-byte sequence cut by the end of the chunk is not an error.

    Args:
        chunk (bytes): the bytes to test.
        truncated (bool): whether more bytes follow the chunk in the file.

    Returns:
        bool: True if the chunk is valid UTF-8.
    """
    try:
        chunk.decode("utf-8")
    except UnicodeDecodeError as e:
        cut_at_boundary = (
            truncated and e.reason == "unexpected end of data" and len(chunk) - e.start <= _MAX_UTF8_TAIL
        )
        return cut_at_boundary
    return True


def control_byte_ratio(chunk: bytes) -> float:
    """Share of NUL and control bytes (TAB, LF, CR excluded) in `chunk`."""
    if not chunk:
        return 0.0
    control = sum(1 for b in chunk if b < 0x20 and b not in _ALLOWED_CONTROL)  # noqa: PLR2004
    return control / len(chunk)


def classify_bytes(chunk: bytes, *, truncated: bool = False) -> ContentKind:
    """Classify the head of a file from its bytes alone.

    Args:
        chunk (bytes): the first bytes of the file.
        truncated (bool): whether the file is longer than `chunk`.

    Returns:
        ContentKind: TEXT or BINARY.
    """
    if not chunk:
        return ContentKind.TEXT
    if chunk.startswith(_UTF16_BOMS):
        return ContentKind.BINARY
    if not is_valid_utf8(chunk, truncated=truncated):
        return ContentKind.BINARY
    if control_byte_ratio(chunk) > CONTROL_BYTE_RATIO_THRESHOLD:
        return ContentKind.BINARY
    return ContentKind.TEXT


def classify(path: str | Path) -> ContentKind:
    """Decide whether a file is text or binary.

    The checks short-circuit in this order: binary extension or lockfile name,
    empty file, UTF-16 byte order mark, invalid UTF-8, share of control bytes
    above `CONTROL_BYTE_RATIO_THRESHOLD`. Only the first `SNIFF_BYTES` bytes
    are read.

    Args:
        path (str | Path): the file to classify.

    Raises:
        OSError: if the file cannot be opened or read.

    Returns:
        ContentKind: TEXT or BINARY.
    """
    p = Path(path)
    if has_binary_name(p):
        return ContentKind.BINARY
    with p.open("rb") as f:
        chunk = f.read(SNIFF_BYTES + 1)
    truncated = len(chunk) > SNIFF_BYTES
    return classify_bytes(chunk[:SNIFF_BYTES], truncated=truncated)


def is_likely_text(path: str | Path) -> bool:
    """Shortcut for `classify(path) is ContentKind.TEXT`."""
    return classify(path) is ContentKind.TEXT
