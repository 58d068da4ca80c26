# tests/test_provisioning.py
from __future__ import annotations
import os
import shutil

import pytest

from adapters.executor import Executor
from adapters.ios.provisioning import ProvisionResolver
from contracts.errors import CommandFailed, ProvisioningProfileNotEmbedded, ProvisioningProfileNotFound


def _profile(store, name, body: bytes, mtime: int):
    p = store / name
    p.write_bytes(body)
    os.utime(p, (mtime, mtime))
    return str(p)


@pytest.fixture
def store(tmp_path):
    s = tmp_path / "Provisioning Profiles"
    s.mkdir()
    return s


def test_resolve_picks_newest_match_not_first_found(make_executor, store):
    old = _profile(store, "a.mobileprovision", b"<plist>Acme AdHoc v1</plist>", 1_000)
    newest = _profile(store, "b.mobileprovision", b"<plist>Acme AdHoc v3</plist>", 3_000)
    middle = _profile(store, "c.mobileprovision", b"<plist>Acme AdHoc v2</plist>", 2_000)
    _profile(store, "d.mobileprovision", b"<plist>Other Team</plist>", 4_000)
    # grep reports matches in directory order, not by age
    ex = make_executor({"grep": (0, "\0".join([old, middle, newest]) + "\0")})

    resolver = ProvisionResolver(ex, str(store))
    assert resolver.resolve("Acme AdHoc") == newest
    assert ex.commands[-1].argv == ("grep", "-rlZ", "--", "Acme AdHoc", str(store))


def test_resolve_not_found_carries_search_command(make_executor, store):
    ex = make_executor({"grep": (1, "")})
    resolver = ProvisionResolver(ex, str(store))
    with pytest.raises(ProvisioningProfileNotFound) as ei:
        resolver.resolve("Missing Profile")
    assert ei.value.command == resolver.search_command("Missing Profile").render()
    assert ei.value.command in str(ei.value)
    assert "Missing Profile" in str(ei.value)


def test_resolve_grep_error_is_command_failure(make_executor, store):
    ex = make_executor({"grep": (2, "grep: unreadable")})
    with pytest.raises(CommandFailed):
        ProvisionResolver(ex, str(store)).resolve("q")


def test_verify_identical_bytes(make_executor, store, tmp_path):
    body = b"\x00\x01profile-bytes Acme AdHoc\xff"
    good = _profile(store, "good.mobileprovision", body, 5_000)
    embedded = tmp_path / "embedded.mobileprovision"
    embedded.write_bytes(body)
    ex = make_executor({"grep": (0, good + "\0")})
    assert ProvisionResolver(ex, str(store)).verify(str(embedded), "Acme AdHoc") == good


def test_verify_single_byte_difference(make_executor, store, tmp_path):
    body = b"profile-bytes Acme AdHoc"
    good = _profile(store, "good.mobileprovision", body, 5_000)
    embedded = tmp_path / "embedded.mobileprovision"
    embedded.write_bytes(b"profile-bytes Acme AdHoC")
    ex = make_executor({"grep": (0, good + "\0")})
    with pytest.raises(ProvisioningProfileNotEmbedded) as ei:
        ProvisionResolver(ex, str(store)).verify(str(embedded), "Acme AdHoc")
    assert not isinstance(ei.value, ProvisioningProfileNotFound)
    assert ei.value.expected == good


def test_verify_missing_embedded_file(make_executor, store, tmp_path):
    good = _profile(store, "good.mobileprovision", b"x", 5_000)
    ex = make_executor({"grep": (0, good + "\0")})
    with pytest.raises(ProvisioningProfileNotEmbedded):
        ProvisionResolver(ex, str(store)).verify(str(tmp_path / "nope"), "x")


@pytest.mark.skipif(shutil.which("grep") is None, reason="requires grep")
def test_resolve_with_real_grep(store):
    _profile(store, "old.mobileprovision", b"team ABC123", 1_000)
    newest = _profile(store, "new.mobileprovision", b"team ABC123 renewed", 2_000)
    _profile(store, "other.mobileprovision", b"team ZZZ999", 3_000)
    assert ProvisionResolver(Executor(), str(store)).resolve("ABC123") == newest


def test_missing_profile_store_is_not_found(make_executor, tmp_path):
    missing = tmp_path / "no-such-store"
    ex = make_executor({"grep": (2, f"grep: {missing}: No such file or directory")})
    resolver = ProvisionResolver(ex, str(missing))
    with pytest.raises(ProvisioningProfileNotFound) as ei:
        resolver.resolve("Acme")
    assert ei.value.command == resolver.search_command("Acme").render()
    assert str(missing) in ei.value.command


def test_missing_profile_store_with_real_executor(tmp_path):
    with pytest.raises(ProvisioningProfileNotFound):
        ProvisionResolver(Executor(), str(tmp_path / "no-such-store")).resolve("Acme")
