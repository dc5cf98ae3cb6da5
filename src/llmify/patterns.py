"""Ignore-style glob patterns and the matcher that evaluates them.

The syntax is the one of `.gitignore` files:

- blank lines and `#` comments are dropped when compiling,
- a leading `!` negates the rule (`\\!` and `\\#` escape the literal character),
- a trailing `/` restricts the rule to directories and anchors it to the root,
- any other pattern without `/` matches a base name at any depth,
- a leading `/` or any inner `/` anchors the pattern to the root,
- `**/` at the start matches at any depth, `/**` at the end matches everything
  beneath the prefix, and a `**` segment spans any number of segments.

Matching is done segment by segment with `fnmatch.fnmatchcase`, so `*`, `?` and
character classes never cross a `/`.
"""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, computed_field

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

_GLOB_CHARS = frozenset("*?[")


class Pattern(BaseModel):
    """One compiled ignore rule.

    Attributes:
        raw: The rule as written in its source.
        segments: The glob split on `/`, with negation, anchoring and
            trailing-slash markers removed.
        negated: Whether a match un-ignores the path.
        directory_only: Whether the rule only applies to directories.
        anchored: Whether the rule is matched from the root only.
        source: Where the rule came from (".gitignore", "--exclude", ...).
    """

    model_config = ConfigDict(frozen=True)

    raw: str = Field(..., description="Rule as written")
    segments: tuple[str, ...] = Field(..., min_length=1, description="Glob segments")
    negated: bool = Field(default=False, description="Leading '!'")
    directory_only: bool = Field(default=False, description="Trailing '/'")
    anchored: bool = Field(default=False, description="Matched from the root only")
    source: str = Field(default="", description="Origin of the rule")

    @computed_field
    @property
    def wildcarded(self) -> bool:
        """Whether any segment contains a glob character."""
        return any(_GLOB_CHARS & set(seg) for seg in self.segments)

    def matches(self, parts: Sequence[str], *, is_dir: bool | None = None) -> bool:
        """Tell whether this rule selects the path made of `parts`.

        Every ancestor directory of the path is a candidate, as is the path
        itself unless the rule is directory-only and the path is known to be a
        file. Anchored rules compare a candidate from the root; the others
        compare every trailing sub-path of a candidate.

        Args:
            parts (Sequence[str]): the path split on `/`.
            is_dir (bool | None): whether the path is a directory; None when
                the caller does not know.

        Returns:
            bool: True if the rule selects the path.
        """
        last = len(parts)
        for end in range(1, last + 1):
            if end == last and self.directory_only and is_dir is False:
                continue
            candidate = parts[:end]
            if self.anchored:
                if _match_segments(self.segments, candidate):
                    return True
                continue
            for start in range(len(candidate)):
                if _match_segments(self.segments, candidate[start:]):
                    return True
        return False

    def could_match_beneath(self, parts: Sequence[str]) -> bool:
        """Tell whether an anchored rule may select something below a directory.

        Unanchored rules can match at any depth and are not considered here.

        Args:
            parts (Sequence[str]): the directory path split on `/`.

        Returns:
            bool: True if a descendant of the directory may be selected.
        """
        if not self.anchored:
            return False
        return _could_descend(self.segments, tuple(parts))


def _match_segments(pattern: Sequence[str], parts: Sequence[str]) -> bool:
    if not pattern:
        return not parts
    head = pattern[0]
    if head == "**":
        return any(_match_segments(pattern[1:], parts[i:]) for i in range(len(parts) + 1))
    return bool(parts) and fnmatchcase(parts[0], head) and _match_segments(pattern[1:], parts[1:])


def _could_descend(pattern: Sequence[str], parts: Sequence[str]) -> bool:
    if not parts:
        return bool(pattern)
    if not pattern:
        return False
    if pattern[0] == "**":
        return True
    return fnmatchcase(parts[0], pattern[0]) and _could_descend(pattern[1:], parts[1:])


def split_path(rel_path: str) -> tuple[str, ...]:
    """Split a relative path into its non-empty POSIX segments.

    Args:
        rel_path (str): a relative path. Only `/` and the native separator split;
            a `\\` in a POSIX file name is kept as part of the name.

    Returns:
        tuple[str, ...]: the segments; empty for the root itself.
    """
    if os.sep != "/":
        rel_path = rel_path.replace(os.sep, "/")
    return tuple(p for p in rel_path.split("/") if p and p != ".")


def compile_pattern(line: str, source: str = "") -> Pattern | None:
    """Compile one line of an ignore file.

    Args:
        line (str): the raw line.
        source (str): label recorded on the compiled pattern.

    Returns:
        Pattern | None: the compiled pattern, or None for blank lines and comments.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    negated = False
    if text.startswith(("\\#", "\\!")):
        body = text[1:]
    elif text.startswith("!"):
        negated = True
        body = text[1:]
    else:
        body = text

    directory_only = body.endswith("/")
    body = body.rstrip("/")
    rooted = body.startswith("/")
    body = body.lstrip("/")
    deep = False
    while body.startswith("**/"):
        body = body[3:]
        rooted = False
        deep = True
    if body.endswith("/**"):
        body = body[:-3]
        anchored = not deep
    elif directory_only:
        anchored = not deep
    else:
        anchored = rooted or (not deep and "/" in body)
    if not body:
        return None

    return Pattern(
        raw=text,
        segments=tuple(seg for seg in body.split("/") if seg),
        negated=negated,
        directory_only=directory_only,
        anchored=anchored,
        source=source,
    )


def compile_patterns(lines: Iterable[str], source: str = "") -> list[Pattern]:
    """Compile ignore-file lines, dropping blanks and comments.

    Args:
        lines (Iterable[str]): raw lines, in file order.
        source (str): label recorded on every compiled pattern.

    Returns:
        list[Pattern]: compiled patterns in input order.
    """
    out: list[Pattern] = []
    for line in lines:
        pattern = compile_pattern(line, source)
        if pattern is not None:
            out.append(pattern)
    return out


class PatternMatcher:
    """Classify paths against an ordered list of compiled patterns.

    A path is ignored when at least one non-negated pattern selects it and no
    negated pattern does. The whole list is always evaluated, so a negation
    anywhere in the list reverses the positive matches.
    """

    def __init__(self, patterns: Iterable[Pattern] = ()) -> None:
        self._patterns: tuple[Pattern, ...] = tuple(patterns)

    @classmethod
    def from_lines(cls, lines: Iterable[str], source: str = "") -> PatternMatcher:
        """Build a matcher from raw ignore-file lines."""
        return cls(compile_patterns(lines, source))

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    def explain(self, rel_path: str, is_dir: bool | None = None) -> Pattern | None:
        """Return the last positive pattern that ignores `rel_path`.

        Args:
            rel_path (str): path relative to the root, POSIX or native separators.
            is_dir (bool | None): whether the path is a directory, None if unknown.

        Returns:
            Pattern | None: the deciding pattern, or None when the path is not
                ignored (no positive match, or a negated pattern matched).
        """
        parts = split_path(rel_path)
        if not parts:
            return None
        decided: Pattern | None = None
        negated = False
        for pattern in self._patterns:
            if not pattern.matches(parts, is_dir=is_dir):
                continue
            if pattern.negated:
                negated = True
            else:
                decided = pattern
        return None if negated else decided

    def matches(self, rel_path: str, is_dir: bool | None = None) -> bool:
        """Tell whether `rel_path` is ignored by this pattern list."""
        return self.explain(rel_path, is_dir) is not None

    def negates(self, rel_path: str, is_dir: bool | None = None) -> bool:
        """Tell whether a negated pattern explicitly selects `rel_path`."""
        parts = split_path(rel_path)
        return bool(parts) and any(
            p.negated and p.matches(parts, is_dir=is_dir) for p in self._patterns
        )

    def could_match_beneath(self, rel_dir: str) -> bool:
        """Tell whether an anchored positive pattern may select a descendant of `rel_dir`."""
        parts = split_path(rel_dir)
        return any(not p.negated and p.could_match_beneath(parts) for p in self._patterns)
