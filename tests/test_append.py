# tests/test_append.py
# -*- coding: utf-8 -*-
"""Tests for appending text to encrypted files (memory and temporary-file strategies)."""

import os
import stat
from pathlib import Path

import pytest

from cryptostream.core.append import (
    TemporaryFileBufferStrategy, append_text, append_text_via_temporary_file
)
from cryptostream.core.decryptor import Decryptor
from cryptostream.core.encryptor import Encryptor
from cryptostream.core.settings import EncryptSettings
from cryptostream.utils.exceptions import InvalidConfiguration, InvalidPassword, TruncatedHeader

PASSWORD = "Easy#Password"
NL = os.linesep


def read_plaintext(path: Path, password=PASSWORD, settings=None) -> bytes:
    with Decryptor(path, password, settings) as decryptor:
        return decryptor.decrypt()

def write_encrypted(path: Path, data: bytes, password=PASSWORD) -> None:
    with Encryptor(path, password) as encryptor:
        encryptor.encrypt_bytes(data)

@pytest.fixture
def dirs(tmp_path: Path):
    """Separate data and scratch directories, as the temp-file strategy requires."""
    data_dir = tmp_path / "data"
    scratch_dir = tmp_path / "scratch"
    data_dir.mkdir()
    scratch_dir.mkdir()
    return data_dir, scratch_dir

def append_in_memory(path, text, **kwargs):
    append_text(path, text, PASSWORD, **kwargs)

def append_via_temp(path, text, **kwargs):
    scratch_dir = Path(path).parent.parent / "scratch"
    append_text_via_temporary_file(path, scratch_dir, text, PASSWORD, **kwargs)

STRATEGIES = [append_in_memory, append_via_temp]


@pytest.mark.parametrize("append", STRATEGIES)
def test_append_creates_missing_file(dirs, append):
    target = dirs[0] / "journal.enc"
    append(target, "hello")
    assert read_plaintext(target) == f"hello{NL}".encode()

@pytest.mark.parametrize("append", STRATEGIES)
def test_append_to_existing_file(dirs, append):
    target = dirs[0] / "journal.enc"
    write_encrypted(target, f"a{NL}".encode())
    append(target, "b")
    assert read_plaintext(target) == f"a{NL}b{NL}".encode()

@pytest.mark.parametrize("append", STRATEGIES)
def test_repeated_append_keeps_both_copies(dirs, append):
    target = dirs[0] / "journal.enc"
    append(target, "same line")
    append(target, "same line")
    assert read_plaintext(target) == f"same line{NL}same line{NL}".encode()

@pytest.mark.parametrize("append", STRATEGIES)
def test_append_leaves_no_stray_files(dirs, append):
    data_dir, scratch_dir = dirs
    target = data_dir / "journal.enc"
    append(target, "first")
    append(target, "second")
    assert [p.name for p in data_dir.iterdir()] == ["journal.enc"]
    assert list(scratch_dir.iterdir()) == []

@pytest.mark.parametrize("append", STRATEGIES)
def test_append_uses_requested_encoding(dirs, append):
    target = dirs[0] / "journal.enc"
    append(target, "héllo", encoding="latin-1")
    assert read_plaintext(target) == f"héllo{NL}".encode("latin-1")

def test_default_encoding_is_utf8_without_bom(dirs):
    target = dirs[0] / "journal.enc"
    append_text(target, "日本語", PASSWORD)
    plaintext = read_plaintext(target)
    assert not plaintext.startswith(b"\xef\xbb\xbf")
    assert plaintext.decode("utf-8") == f"日本語{NL}"

def test_append_large_existing_content(dirs):
    target = dirs[0] / "journal.enc"
    existing = b"".join(f"line {i}{NL}".encode() for i in range(20_000))
    write_encrypted(target, existing)
    append_via_temp(target, "tail")
    assert read_plaintext(target) == existing + f"tail{NL}".encode()

def test_append_with_custom_settings(dirs):
    target = dirs[0] / "journal.enc"
    settings = EncryptSettings(key_size_bits=256)
    append_text(target, "one", PASSWORD, settings=settings)
    append_text(target, "two", PASSWORD, settings=settings)
    assert read_plaintext(target, settings=settings) == f"one{NL}two{NL}".encode()

def test_append_preserves_file_mode(dirs):
    target = dirs[0] / "journal.enc"
    write_encrypted(target, b"")
    os.chmod(target, 0o640)
    append_text(target, "mode", PASSWORD)
    assert stat.S_IMODE(os.stat(target).st_mode) == 0o640

def test_temp_dir_equal_to_target_dir_rejected_before_io(tmp_path: Path):
    target = tmp_path / "journal.enc"
    with pytest.raises(InvalidConfiguration):
        append_text_via_temporary_file(target, tmp_path, "text", PASSWORD)
    assert list(tmp_path.iterdir()) == []

def test_temp_dir_guard_resolves_relative_paths(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(InvalidConfiguration):
        TemporaryFileBufferStrategy(".", "journal.enc")
    with pytest.raises(InvalidConfiguration):
        TemporaryFileBufferStrategy(str(tmp_path / "sub" / ".."), tmp_path / "journal.enc")

def test_append_rejects_empty_password(dirs):
    target = dirs[0] / "journal.enc"
    with pytest.raises(InvalidPassword):
        append_text(target, "text", "")
    assert not target.exists()

def test_append_rejects_unknown_encoding(dirs):
    target = dirs[0] / "journal.enc"
    with pytest.raises(InvalidConfiguration):
        append_text(target, "text", PASSWORD, encoding="no-such-codec")
    assert not target.exists()

@pytest.mark.parametrize("append", STRATEGIES)
def test_append_rejects_unencodable_text(dirs, append):
    target = dirs[0] / "journal.enc"
    with pytest.raises(InvalidConfiguration):
        append(target, "héllo", encoding="ascii")
    assert not target.exists()
    assert list(dirs[1].iterdir()) == []

@pytest.mark.parametrize("append", STRATEGIES)
def test_failed_append_keeps_original_file(dirs, append):
    data_dir, scratch_dir = dirs
    target = data_dir / "journal.enc"
    target.write_bytes(b"not a container")
    with pytest.raises(TruncatedHeader):
        append(target, "text")
    assert target.read_bytes() == b"not a container"
    assert [p.name for p in data_dir.iterdir()] == ["journal.enc"]
    assert list(scratch_dir.iterdir()) == []
