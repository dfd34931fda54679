"""CLI payload output helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.serialize import dumps_json

if TYPE_CHECKING:
    from ..core.context import RunOptions
    from ..pipeline import RunResult

SAME_BANNER = "The files are the same"
DIFF_BANNER = "!! THERE ARE DIFFERENCES BETWEEN THE FILES !!"


def build_result_payload(ctx: RunOptions, result: RunResult) -> dict[str, object]:
    return {
        "schema_name": "packagexml_diff.result.v1",
        "schema_version": 1,
        "tool": "packagexml-diff",
        "status": "different" if result.differs else "same",
        "run_id": ctx.run_id,
        "orgs": list(ctx.orgs),
        "mode": ctx.mode,
        "packagename": None if ctx.explicit_manifest else ctx.packagename,
        "packagexml": str(ctx.packagexml) if ctx.packagexml else None,
        "segments": [segment.to_dict() for segment in result.segments],
        "saved": [str(path) for path in result.saved],
        "exit_code": result.exit_code,
    }


def render_text(result: RunResult) -> str:
    if not result.differs:
        lines = [SAME_BANNER]
    else:
        lines = [DIFF_BANNER]
        for segment in result.segments:
            label = "ADDED" if segment.added else "REMOVED"
            lines.append(f"{label}: {segment.display}")
    for path in result.saved:
        lines.append(f"saved: {path}")
    return "\n".join(lines)


def emit_result(ctx: RunOptions, result: RunResult) -> None:
    if ctx.output_format == "json":
        print(dumps_json(build_result_payload(ctx, result)))
        return
    print(render_text(result))


def render_error(*, as_json: bool, message: str, code: int, kind: str) -> str:
    if as_json:
        return dumps_json(
            {
                "schema_name": "packagexml_diff.error.v1",
                "schema_version": 1,
                "tool": "packagexml-diff",
                "status": "error",
                "errors": [{"code": code, "kind": kind, "message": message}],
            },
            pretty=False,
        )
    return message
