from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from appwrap.errors import ExternalToolError, FilesystemError
from appwrap.utils.subprocess import run_command

logger = logging.getLogger(__name__)

Command = Union[str, list[str]]


class Operations:
    """Synchronous file and process operations used by the package builders."""

    def __init__(
        self,
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        capture_output: bool = True,
    ):
        self.cwd = cwd
        self.env = dict(env) if env is not None else None
        self.capture_output = capture_output

    def execute(
        self,
        command: Command,
        *,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> str:
        logger.info("Running: %s", command if isinstance(command, str) else " ".join(command))

        merged = None
        if env is not None or self.env is not None:
            merged = dict(os.environ)
            merged.update(self.env or {})
            merged.update(env or {})

        result = run_command(
            command,
            cwd=cwd or self.cwd,
            env=merged,
            capture_output=self.capture_output,
        )

        output = (result.stdout or "").strip()
        if output:
            logger.debug(output)
        return output

    def execute_all(self, commands: Iterable[Command]) -> None:
        for command in commands:
            self.execute(command)

    def create_dir(self, path: Optional[Path]) -> None:
        if path is None:
            return
        logger.debug("Create directory: %s", path)
        self._mkdir(Path(path))

    def remove_dir(self, path: Optional[Path]) -> None:
        if path is None:
            return
        logger.debug("Remove directory: %s", path)
        self._remove(Path(path))

    def clear_dir(self, path: Path, *, keep: Path) -> None:
        """Remove everything under ``path`` except ``keep`` and its contents."""
        path = Path(path)
        keep = Path(keep)
        if not path.is_dir():
            return

        logger.debug("Clear directory: %s (keeping %s)", path, keep)
        for child in path.iterdir():
            if child == keep:
                continue
            if child in keep.parents and not child.is_symlink():
                self.clear_dir(child, keep=keep)
            else:
                self._remove(child)

    def write_file(self, path: Optional[Path], content: Optional[str], *, replace: bool = True) -> None:
        if path is None or content is None:
            return

        path = Path(path)
        if path.exists() and not replace:
            logger.debug("Keep existing file: %s", path)
            return

        logger.debug("Write file: %s", path)
        self._mkdir(path.parent)

        text = content if content.endswith("\n") else content + "\n"
        partial = path.with_name(path.name + ".part")
        try:
            partial.write_bytes(text.encode("utf-8"))
            os.replace(partial, path)
        except OSError as exc:
            raise FilesystemError(f"Failed to write file: {path}") from exc

    def copy_file(self, src: Path, dst: Path, *, replace: bool = True) -> None:
        src = Path(src)
        dst = Path(dst)

        if dst.exists() and not replace:
            logger.debug("Keep existing file: %s", dst)
            return

        logger.debug("Copy file: %s -> %s", src, dst)
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
        except OSError as exc:
            raise FilesystemError(f"Failed to copy {src} to {dst}") from exc

    def copy_dir(self, src: Path, dst: Path) -> None:
        logger.debug("Copy directory: %s -> %s", src, dst)
        try:
            shutil.copytree(src, dst, dirs_exist_ok=True)
        except (OSError, shutil.Error) as exc:
            raise FilesystemError(f"Failed to copy {src} to {dst}") from exc

    def zip_dir(self, src: Path, dst: Path) -> Path:
        src = Path(src)
        dst = Path(dst)
        logger.info("Zipping: %s -> %s", src, dst)

        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            if dst.exists():
                dst.unlink()
            archive = shutil.make_archive(
                base_name=str(dst.with_suffix("")),
                format="zip",
                root_dir=src,
            )
            if Path(archive) != dst:
                os.replace(archive, dst)
        except (OSError, shutil.Error) as exc:
            raise FilesystemError(f"Failed to create zip archive: {dst}") from exc

        return dst

    def symlink(self, target: str, link: Path) -> None:
        link = Path(link)
        logger.debug("Symlink: %s -> %s", link, target)
        try:
            if link.is_symlink() or link.exists():
                link.unlink()
            os.symlink(target, link)
        except OSError as exc:
            raise FilesystemError(f"Failed to create link: {link}") from exc

    def make_executable(self, path: Path) -> None:
        path = Path(path)
        logger.debug("Make executable: %s", path)
        exec_bits = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
        read_bits = stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH
        try:
            path.chmod(path.stat().st_mode | read_bits | exec_bits)
        except OSError as exc:
            raise FilesystemError(f"Failed to mark file executable: {path}") from exc

    def assert_exists(self, path: Path) -> None:
        if not Path(path).exists():
            raise ExternalToolError(f"Expected file not found: {path}")

    def list_files(self, root: Path) -> list[str]:
        root = Path(root)
        if not root.is_dir():
            return []

        files = [
            path.relative_to(root).as_posix()
            for path in root.rglob("*")
            if path.is_file() or path.is_symlink()
        ]
        return sorted(files)

    @staticmethod
    def _mkdir(path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"Failed to create directory: {path}") from exc

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            if path.is_symlink() or path.is_file():
                path.unlink()
            elif path.exists():
                shutil.rmtree(path)
        except OSError as exc:
            raise FilesystemError(f"Failed to remove: {path}") from exc
