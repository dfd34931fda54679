from __future__ import annotations

import zipfile
import zlib
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import ScriptError
from .logging import log_event

if TYPE_CHECKING:
    from .context import RunOptions

RETRIEVED_ARCHIVE_NAME = "unpackaged.zip"


def _safe_target(dest: Path, member: str) -> Path:
    root = dest.resolve()
    target = (root / member).resolve()
    if target != root and root not in target.parents:
        raise ScriptError(f"archive member escapes destination: {member}", kind="extraction_error")
    return target


def extract_zip(archive: Path, dest: Path, ctx: RunOptions | None = None) -> list[Path]:
    """Extract every member of ``archive`` into ``dest``.

    Returns only after all members are written; a corrupt or missing archive or
    an unwritable destination raises ``ScriptError(kind="extraction_error")``.
    """
    if not archive.is_file():
        raise ScriptError(f"archive does not exist: {archive}", kind="extraction_error")
    written: list[Path] = []
    try:
        with zipfile.ZipFile(archive) as zf:
            bad = zf.testzip()
            if bad is not None:
                raise ScriptError(f"corrupt archive member {bad} in {archive}", kind="extraction_error")
            for info in zf.infolist():
                target = _safe_target(dest, info.filename)
                zf.extract(info, dest)
                if not info.is_dir():
                    written.append(target)
    except (zipfile.BadZipFile, zlib.error) as exc:
        raise ScriptError(f"unable to read archive {archive}: {exc}", kind="extraction_error") from exc
    except OSError as exc:
        raise ScriptError(f"unable to extract {archive} into {dest}: {exc}", kind="extraction_error") from exc
    if ctx:
        log_event(ctx, "verbose", "archive", "extracted", archive=str(archive), dest=str(dest), files=len(written))
    return written
