import os
import sys
from pathlib import Path

import pytest

from trunk.common import (
    TrunkError,
    copy_dir_recursive,
    is_executable,
    parse_public_url,
    path_exists,
    remove_dir_all,
    run_command,
    strip_prefix,
)


@pytest.mark.parametrize("value", ["/", "/app/", "/a/b/"])
def test_parse_public_url_keeps_formatted_values(value):
    assert parse_public_url(value) == value


@pytest.mark.parametrize("value", ["app", "/app", "app/", "a/b"])
def test_parse_public_url_adds_slashes(value):
    result = parse_public_url(value)
    assert result.startswith("/") and result.endswith("/")
    assert result.strip("/") == value.strip("/")
    assert parse_public_url(result) == result


def test_parse_public_url_pinned():
    assert parse_public_url("app") == "/app/"


def test_path_exists(tmp_path):
    assert path_exists(tmp_path) is True
    assert path_exists(tmp_path / "missing") is False


def test_remove_dir_all_removes_tree(tmp_path):
    root = tmp_path / "root"
    (root / "nested").mkdir(parents=True)
    (root / "nested" / "file.txt").write_text("data")
    remove_dir_all(root)
    assert path_exists(root) is False


def test_remove_dir_all_missing_is_ok(tmp_path):
    target = tmp_path / "never"
    remove_dir_all(target)
    assert not target.exists()


def test_copy_dir_recursive_copies_contents(tmp_path):
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "a.txt").write_text("alpha")
    (src / "sub" / "b.txt").write_text("beta")
    dst = tmp_path / "dst"
    dst.mkdir()
    (dst / "a.txt").write_text("old")
    copy_dir_recursive(src, dst)
    assert (dst / "a.txt").read_text() == "alpha"
    assert (dst / "sub" / "b.txt").read_text() == "beta"
    assert not (dst / "src").exists()


def test_copy_dir_recursive_missing_source(tmp_path):
    with pytest.raises(TrunkError, match="does not exist"):
        copy_dir_recursive(tmp_path / "missing", tmp_path / "dst")


def test_is_executable(tmp_path):
    exe = tmp_path / "exe"
    exe.write_text("#!/bin/sh\n")
    exe.chmod(0o755)
    plain = tmp_path / "plain"
    plain.write_text("text")
    plain.chmod(0o644)
    assert is_executable(exe) is True
    assert is_executable(plain) is (os.name != "posix")
    assert is_executable(tmp_path) is False
    assert is_executable(tmp_path / "missing") is False


def test_strip_prefix_relative_to_cwd():
    target = Path.cwd() / "a" / "b.txt"
    assert strip_prefix(target) == Path("a") / "b.txt"


def test_strip_prefix_outside_cwd_unchanged(tmp_path):
    outside = Path(tmp_path.anchor) / "definitely-not-cwd-prefix" / "x"
    if Path.cwd() == Path(tmp_path.anchor):
        outside = Path("relative") / "x"
    assert strip_prefix(outside) == outside


def test_run_command_success(tmp_path):
    out = tmp_path / "out.txt"
    code = f"open({str(out)!r}, 'w').write('done')"
    result = run_command("python", sys.executable, ["-c", code])
    assert result is None
    assert out.read_text() == "done"


def test_run_command_bad_status():
    with pytest.raises(TrunkError, match="python call returned a bad status"):
        run_command("python", sys.executable, ["-c", "raise SystemExit(3)"])


def test_run_command_spawn_error(tmp_path):
    with pytest.raises(TrunkError, match="error spawning missing call"):
        run_command("missing", tmp_path / "no-such-program", [])