from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from ..manifest.persist import SavePolicy
from ..sfdx.client import DEFAULT_COMMAND, DEFAULT_WAIT
from .clock import utc_now
from .config import load_config_file
from .env import getenv, getenv_int
from .errors import ScriptError

OutputFormat = Literal["text", "json"]

DEFAULT_PACKAGENAME = "becem"
ENV_SFDX = "PACKAGEXML_DIFF_SFDX"
ENV_WAIT = "PACKAGEXML_DIFF_WAIT"
ENV_SAVE_DIR = "PACKAGEXML_DIFF_SAVE_DIR"


def _command_tuple(raw: str | list[str]) -> tuple[str, ...]:
    parts = shlex.split(raw) if isinstance(raw, str) else [str(p) for p in raw]
    if not parts:
        raise ScriptError("sfdx command must not be empty", kind="config_error")
    return tuple(parts)


@dataclass(frozen=True)
class RunOptions:
    org1: str
    org2: str
    packagename: str
    packagexml: Path | None
    save_policy: SavePolicy
    save_dir: Path
    verbose: bool = False
    sfdx_verbose: bool = False
    wait_seconds: int = DEFAULT_WAIT
    sfdx_command: tuple[str, ...] = DEFAULT_COMMAND
    process_timeout_seconds: int = 0
    keep_temp: bool = False
    overwrite: bool = False
    output_format: OutputFormat = "text"
    log_json: bool = False
    run_id: str = "packagexml-diff"

    @property
    def explicit_manifest(self) -> bool:
        return self.packagexml is not None

    @property
    def orgs(self) -> tuple[str, str]:
        return self.org1, self.org2

    @property
    def mode(self) -> str:
        return "packagexml" if self.explicit_manifest else "packagename"

    @classmethod
    def from_args(
        cls,
        org1: str | None,
        org2: str | None,
        packagename: str | None = None,
        packagexml: str | None = None,
        save_packagexml: str | None = None,
        save_dir: str | None = None,
        verbose: bool = False,
        sfdx_verbose: bool = False,
        wait: int | None = None,
        config: str | None = None,
        keep_temp: bool = False,
        overwrite: bool = False,
        output_format: OutputFormat = "text",
        log_json: bool = False,
        run_id: str | None = None,
    ) -> "RunOptions":
        """Resolve options with precedence flag > environment > config file > default."""
        if not org1 or not org2:
            raise ScriptError("both --org1 and --org2 are required", kind="argument_error")
        cfg: dict[str, Any] = load_config_file(Path(config)) if config else {}

        policy = SavePolicy.parse(save_packagexml or cfg.get("save_packagexml") or SavePolicy.NEVER.value)

        resolved_save_dir = Path(save_dir or getenv(ENV_SAVE_DIR) or cfg.get("save_dir") or os.getcwd())
        if not resolved_save_dir.is_dir():
            raise ScriptError(f"specified path to --save-dir does NOT exist: {resolved_save_dir}", kind="argument_error")

        manifest: Path | None = None
        if packagexml:
            manifest = Path(packagexml).resolve()
            if not manifest.is_file():
                raise ScriptError(f"specified --packagexml does NOT exist: {packagexml}", kind="argument_error")

        try:
            env_wait = getenv_int(ENV_WAIT)
        except ValueError:
            raise ScriptError(f"{ENV_WAIT} must be an integer", kind="config_error") from None
        resolved_wait = wait if wait is not None else env_wait if env_wait is not None else int(cfg.get("wait", DEFAULT_WAIT))
        if resolved_wait < 1:
            raise ScriptError(f"invalid value <{resolved_wait}> for --wait", kind="argument_error")

        env_command = getenv(ENV_SFDX)
        if env_command:
            command = _command_tuple(env_command)
        elif "sfdx_command" in cfg:
            command = _command_tuple(cfg["sfdx_command"])
        else:
            command = DEFAULT_COMMAND

        default_run = f"packagexml-diff-{utc_now().strftime('%Y%m%d-%H%M%S')}"
        return cls(
            org1=org1,
            org2=org2,
            packagename=packagename or cfg.get("packagename") or DEFAULT_PACKAGENAME,
            packagexml=manifest,
            save_policy=policy,
            save_dir=resolved_save_dir.resolve(),
            verbose=verbose,
            sfdx_verbose=sfdx_verbose,
            wait_seconds=resolved_wait,
            sfdx_command=command,
            process_timeout_seconds=int(cfg.get("process_timeout_seconds", 0)),
            keep_temp=keep_temp,
            overwrite=overwrite,
            output_format=output_format,
            log_json=log_json,
            run_id=run_id or getenv("RUN_ID") or default_run,
        )
