from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from llmify import settings

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"

TreeFactory = Callable[[Path, dict[str, str | bytes]], None]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host `LLMIFY_*` variables, `.env` files and user config out of the tests."""
    for key in list(os.environ):
        if key.startswith("LLMIFY_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(settings, "ENV_FILE", "")
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))


def _make_tree(root: Path, files: dict[str, str | bytes]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


@pytest.fixture
def make_tree() -> TreeFactory:
    """Create files (relative path to content) under a root."""
    return _make_tree


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """A small project: one source file, one image, VCS metadata and a dependency."""
    root = tmp_path / "project"
    _make_tree(
        root,
        {
            "src/a.go": "package main\n\nfunc main() {}\n",
            "src/img.png": PNG_BYTES,
            ".git/HEAD": "ref: refs/heads/main\n",
            "node_modules/pkg/index.js": "module.exports = 1;\n",
            ".gitignore": "node_modules/\n",
        },
    )
    return root
