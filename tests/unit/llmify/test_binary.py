from __future__ import annotations

from pathlib import Path

import pytest

from llmify.binary import (
    ContentKind,
    classify,
    classify_bytes,
    control_byte_ratio,
    has_binary_name,
    is_likely_text,
    is_valid_utf8,
)
from llmify.config import SNIFF_BYTES


@pytest.mark.unit
def test_png_magic_bytes_are_binary(tmp_path: Path) -> None:
    # No extension, so only the content can tell.
    image = tmp_path / "image"
    image.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 32)

    assert classify(image) is ContentKind.BINARY
    assert not is_likely_text(image)


@pytest.mark.unit
def test_empty_file_is_text(tmp_path: Path) -> None:
    empty = tmp_path / "empty.cfg"
    empty.write_bytes(b"")

    assert classify(empty) is ContentKind.TEXT


@pytest.mark.unit
def test_utf16_bom_is_binary() -> None:
    assert classify_bytes(b"\xff\xfeh\x00i\x00") is ContentKind.BINARY
    assert classify_bytes(b"\xfe\xff\x00h\x00i") is ContentKind.BINARY


@pytest.mark.unit
def test_control_byte_ratio_threshold() -> None:
    over = b"\x01" * 4 + b"a" * 6
    at = b"\x01" * 3 + b"a" * 7

    assert control_byte_ratio(over) == pytest.approx(0.4)
    assert classify_bytes(over) is ContentKind.BINARY
    assert classify_bytes(at) is ContentKind.TEXT


@pytest.mark.unit
def test_tabs_and_newlines_are_not_control_bytes() -> None:
    assert control_byte_ratio(b"\t\r\n\t\r\n") == 0.0
    assert control_byte_ratio(b"") == 0.0


@pytest.mark.unit
def test_multibyte_character_cut_at_sniff_boundary_is_text(tmp_path: Path) -> None:
    text = tmp_path / "notes.txt"
    text.write_bytes(b"a" * (SNIFF_BYTES - 1) + "é".encode())

    assert classify(text) is ContentKind.TEXT


@pytest.mark.unit
def test_incomplete_sequence_in_whole_file_is_binary() -> None:
    assert not is_valid_utf8(b"abc\xc3", truncated=False)
    assert is_valid_utf8(b"abc\xc3", truncated=True)
    assert classify_bytes(b"abc\xc3") is ContentKind.BINARY


@pytest.mark.unit
def test_invalid_utf8_is_binary() -> None:
    assert classify_bytes(b"caf\xe9 latin-1 text") is ContentKind.BINARY


@pytest.mark.unit
def test_lockfiles_and_binary_extensions_skip_sniffing(tmp_path: Path) -> None:
    lock = tmp_path / "package-lock.json"
    lock.write_text('{"lockfileVersion": 3}\n', encoding="utf-8")

    assert has_binary_name("yarn.lock")
    assert has_binary_name("assets/logo.PNG")
    assert not has_binary_name("src/main.go")
    assert classify(lock) is ContentKind.BINARY


@pytest.mark.unit
def test_classify_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        classify(tmp_path / "missing.txt")
