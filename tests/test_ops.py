import os
import zipfile

import pytest

from appwrap.utils.ops import Operations
from appwrap.utils.subprocess import SubprocessError, run_command


def test_write_file_adds_newline_and_skips_none(tmp_path):
    ops = Operations()
    path = tmp_path / "a" / "b.txt"

    ops.write_file(path, "text")
    ops.write_file(tmp_path / "none.txt", None)

    assert path.read_text() == "text\n"
    assert not (tmp_path / "none.txt").exists()


def test_write_file_keeps_existing(tmp_path):
    ops = Operations()
    path = tmp_path / "file"
    path.write_text("old")

    ops.write_file(path, "new", replace=False)
    assert path.read_text() == "old"


def test_zip_dir(tmp_path):
    src = tmp_path / "Publish"
    (src / "sub").mkdir(parents=True)
    (src / "app").write_text("binary")
    (src / "sub" / "data.txt").write_text("data")

    out = Operations().zip_dir(src, tmp_path / "out" / "App-1.0.0-1.linux-x64.zip")

    with zipfile.ZipFile(out) as archive:
        names = set(archive.namelist())
    assert {"app", "sub/data.txt"} <= names


def test_list_files_and_symlink(tmp_path):
    ops = Operations()
    (tmp_path / "usr" / "bin").mkdir(parents=True)
    (tmp_path / "usr" / "bin" / "app").write_text("x")
    ops.symlink("usr/bin/app", tmp_path / "AppRun")

    assert ops.list_files(tmp_path) == ["AppRun", "usr/bin/app"]
    assert ops.list_files(tmp_path / "missing") == []


def test_make_executable(tmp_path):
    path = tmp_path / "script"
    path.write_text("#!/bin/sh\n")

    Operations().make_executable(path)
    assert os.access(path, os.X_OK)


@pytest.mark.skipif(os.name == "nt", reason="POSIX shell required")
def test_execute_passes_environment_and_cwd(tmp_path):
    ops = Operations()
    output = ops.execute('sh -c "echo $APP_ID; pwd"', env={"APP_ID": "net.example.app"}, cwd=tmp_path)

    lines = output.splitlines()
    assert lines[0] == "net.example.app"
    assert os.path.realpath(lines[1]) == os.path.realpath(tmp_path)
    assert "APP_ID" not in os.environ


@pytest.mark.skipif(os.name == "nt", reason="POSIX shell required")
def test_failed_command_raises():
    with pytest.raises(SubprocessError, match="Exit code: 3"):
        run_command(["sh", "-c", "exit 3"])


def test_missing_command_raises():
    with pytest.raises(SubprocessError, match="Command not found"):
        run_command(["appwrap-no-such-tool"])


def test_clear_dir_keeps_published_tree(tmp_path):
    root = tmp_path / "work"
    keep = root / "AppDir" / "opt" / "app"
    keep.mkdir(parents=True)
    (keep / "app").write_text("binary")
    (root / "AppDir" / "opt" / "stale").mkdir()
    (root / "AppDir" / "usr").mkdir()
    (root / "manifest.yml").write_text("old")

    Operations().clear_dir(root, keep=keep)

    assert Operations().list_files(root) == ["AppDir/opt/app/app"]
    assert not (root / "AppDir" / "usr").exists()
