from __future__ import annotations

import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterator

from .errors import ScriptError
from .logging import log_event

if TYPE_CHECKING:
    from .context import RunOptions

TEMP_PREFIX = "packagexml-diff-"


def create_temp_dir(prefix: str = TEMP_PREFIX) -> Path:
    try:
        return Path(tempfile.mkdtemp(prefix=prefix))
    except OSError as exc:
        raise ScriptError(f"unable to create temp directory: {exc}", kind="io_error") from exc


@contextmanager
def temp_workspace(keep: bool = False, ctx: RunOptions | None = None) -> Iterator[Callable[[], Path]]:
    """Yield a factory for temp directories that are all removed on exit.

    With ``keep`` the directories survive the context and are logged instead.
    """
    created: list[Path] = []

    def _create() -> Path:
        path = create_temp_dir()
        created.append(path)
        return path

    try:
        yield _create
    finally:
        for path in created:
            if keep:
                if ctx:
                    log_event(ctx, "info", "fs", "temp-kept", path=str(path))
                continue
            shutil.rmtree(path, ignore_errors=True)
            if ctx:
                log_event(ctx, "verbose", "fs", "temp-removed", path=str(path))


def read_text(path: Path) -> str:
    if not path.exists():
        raise ScriptError(f"supplied path doesn't exist: {path}", kind="io_error")
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ScriptError(f"unable to read file {path}: {exc}", kind="io_error") from exc


def write_text(path: Path, content: str) -> Path:
    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
    except OSError as exc:
        raise ScriptError(f"unable to write file {path}: {exc}", kind="io_error") from exc
    return path


def delete_file(path: Path) -> None:
    if not path.exists():
        return
    try:
        path.unlink()
    except OSError as exc:
        raise ScriptError(f"unable to delete file {path}: {exc}", kind="io_error") from exc


def copy_file(src: Path, dest: Path, overwrite: bool = False) -> Path:
    if not src.is_file():
        raise ScriptError(f"source does not exist: {src}", kind="io_error")
    if dest.exists():
        if not overwrite:
            raise ScriptError(f"destination exists: {dest}", kind="io_error")
        delete_file(dest)
    try:
        shutil.copyfile(src, dest)
    except OSError as exc:
        raise ScriptError(f"unable to copy {src} to {dest}: {exc}", kind="io_error") from exc
    return dest
