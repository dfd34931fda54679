from __future__ import annotations

import argparse
import sys

from .. import __version__
from ..core.context import DEFAULT_PACKAGENAME, RunOptions
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_RUN
from ..core.logging import log_event
from ..pipeline import run_pipeline
from ..sfdx.client import DEFAULT_WAIT
from .output import emit_result, render_error

DESCRIPTION = (
    "Reads metadata from two Salesforce orgs using SalesforceDX and compares the package.xml, "
    "removing namespacePrefix if found when metadata is read based on a package name."
)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise ScriptError(f"error parsing command line or invalid value supplied: {message}", kind="argument_error")


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(prog="packagexml-diff", description=DESCRIPTION)
    p.add_argument("--version", action="version", version=f"packagexml-diff {__version__}")
    req = p.add_argument_group("required options")
    req.add_argument("--org1", required=True, help="username / alias of the first SalesforceDX org to compare")
    req.add_argument("--org2", required=True, help="username / alias of the second SalesforceDX org to compare")
    opt = p.add_argument_group("optional options")
    opt.add_argument(
        "--packagename",
        help=f"package name to read metadata for (default: {DEFAULT_PACKAGENAME}); ignored with --packagexml",
    )
    opt.add_argument("--packagexml", help="path to a package.xml used to drive the retrieval instead of a package name")
    opt.add_argument(
        "--save-packagexml",
        choices=["never", "diff", "always"],
        default=None,
        help="save the compared files as package-1-<timestamp>.xml and package-2-<timestamp>.xml (default: never)",
    )
    opt.add_argument("--save-dir", help="existing directory for saved package.xml files (default: current directory)")
    opt.add_argument("--wait", type=int, default=None, help=f"value passed to sfdx --wait for the retrieval (default: {DEFAULT_WAIT})")
    opt.add_argument("--config", help="YAML file with default option values")
    opt.add_argument("--keep-temp", action="store_true", help="keep the temp directories used for retrieval")
    opt.add_argument("--overwrite", action="store_true", help="overwrite existing saved package.xml files")
    opt.add_argument("--verbose", action="store_true", help="be more verbose in the output")
    opt.add_argument("--sfdx-verbose", action="store_true", help="be more verbose in the SalesforceDX output")
    opt.add_argument("--json", action="store_true", help="emit the comparison result as JSON")
    opt.add_argument("--log-json", action="store_true", help="emit structured JSON log lines")
    opt.add_argument("--run-id", help="run identifier stamped on log lines")
    return p


def _log_runtime_info(ctx: RunOptions) -> None:
    log_event(ctx, "info", "cli", "start", org1=ctx.org1, org2=ctx.org2, mode=ctx.mode)
    if ctx.packagexml is not None:
        log_event(ctx, "info", "cli", "source", packagexml=str(ctx.packagexml))
    else:
        log_event(ctx, "info", "cli", "source", packagename=ctx.packagename)
    log_event(ctx, "info", "cli", "save", policy=ctx.save_policy.value, save_dir=str(ctx.save_dir))


def main(argv: list[str] | None = None) -> int:
    raw_argv = argv if argv is not None else sys.argv[1:]
    as_json = "--json" in raw_argv
    parser = build_parser()
    ctx: RunOptions | None = None
    try:
        ns = parser.parse_args(raw_argv)
        ctx = RunOptions.from_args(
            ns.org1,
            ns.org2,
            packagename=ns.packagename,
            packagexml=ns.packagexml,
            save_packagexml=ns.save_packagexml,
            save_dir=ns.save_dir,
            verbose=ns.verbose,
            sfdx_verbose=ns.sfdx_verbose,
            wait=ns.wait,
            config=ns.config,
            keep_temp=ns.keep_temp,
            overwrite=ns.overwrite,
            output_format="json" if ns.json else "text",
            log_json=ns.log_json,
            run_id=ns.run_id,
        )
        _log_runtime_info(ctx)
        result = run_pipeline(ctx)
        emit_result(ctx, result)
        log_event(ctx, "verbose", "cli", "exit", code=result.exit_code)
        return result.exit_code
    except ScriptError as exc:
        if ctx is not None:
            log_event(ctx, "error", "cli", "failed", kind=exc.kind)
        if exc.kind in {"argument_error", "config_error"} and not as_json:
            parser.print_usage(sys.stderr)
        print(render_error(as_json=as_json, message=str(exc), code=exc.code, kind=exc.kind), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(
            render_error(as_json=as_json, message=f"internal error: {exc}", code=ERR_RUN, kind="internal_error"),
            file=sys.stderr,
        )
        return ERR_RUN


if __name__ == "__main__":
    raise SystemExit(main())
