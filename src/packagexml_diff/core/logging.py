from __future__ import annotations

import inspect
import json
import sys
from typing import TYPE_CHECKING

from .clock import utc_now_iso

if TYPE_CHECKING:
    from .context import RunOptions

LEVELS = ("verbose", "info", "warn", "error")


def log_event(ctx: RunOptions, level: str, component: str, action: str, **fields: object) -> None:
    if level == "verbose" and not ctx.verbose:
        return
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    payload = {
        "ts": utc_now_iso(),
        "level": level,
        "run_id": ctx.run_id,
        "component": component,
        "action": action,
        "file": caller.f_code.co_filename if caller is not None else "",
        "line": caller.f_lineno if caller is not None else 0,
        **fields,
    }
    if ctx.log_json:
        sys.stderr.write(json.dumps(payload, sort_keys=True, default=str) + "\n")
        return
    core = f"ts={payload['ts']} level={level} run_id={ctx.run_id} component={component} action={action}"
    extras = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
    sys.stderr.write((core if not extras else f"{core} {extras}") + "\n")
