from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from ..core.clock import file_timestamp
from ..core.errors import ScriptError
from ..core.fs import copy_file
from ..core.logging import log_event

if TYPE_CHECKING:
    from ..core.context import RunOptions


class SavePolicy(str, Enum):
    NEVER = "never"
    DIFF = "diff"
    ALWAYS = "always"

    @classmethod
    def parse(cls, value: str) -> "SavePolicy":
        try:
            return cls(value)
        except ValueError:
            raise ScriptError(f"invalid value <{value}> for --save-packagexml", kind="argument_error") from None


def should_save(policy: SavePolicy, differs: bool) -> bool:
    if policy is SavePolicy.ALWAYS:
        return True
    if policy is SavePolicy.DIFF:
        return differs
    return False


def saved_names(moment: datetime | None = None) -> tuple[str, str]:
    stamp = file_timestamp(moment)
    return f"package-1-{stamp}.xml", f"package-2-{stamp}.xml"


def maybe_save(
    policy: SavePolicy,
    differs: bool,
    first: Path,
    second: Path,
    save_dir: Path,
    overwrite: bool = False,
    moment: datetime | None = None,
    ctx: RunOptions | None = None,
) -> list[Path]:
    """Copy both compared manifests into ``save_dir`` when the policy asks for it."""
    if not should_save(policy, differs):
        return []
    name1, name2 = saved_names(moment)
    written = [
        copy_file(first, save_dir / name1, overwrite=overwrite),
        copy_file(second, save_dir / name2, overwrite=overwrite),
    ]
    if ctx:
        log_event(ctx, "info", "manifest", "saved", policy=policy.value, paths=",".join(str(p) for p in written))
    return written
