from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from ..core.errors import ScriptError
from ..core.logging import log_event
from ..core.process import CommandResult, run_command

if TYPE_CHECKING:
    from ..core.context import RunOptions

DEFAULT_WAIT = 100
DEFAULT_COMMAND: tuple[str, ...] = ("sfdx",)

SourceKind = Literal["manifest", "package_name"]


@dataclass(frozen=True)
class RetrievalSource:
    """What drives a metadata retrieval: a package.xml file or a package name."""

    kind: SourceKind
    value: str

    @classmethod
    def from_manifest(cls, path: Path) -> "RetrievalSource":
        return cls("manifest", str(path))

    @classmethod
    def from_package_name(cls, name: str) -> "RetrievalSource":
        return cls("package_name", name)

    def args(self) -> list[str]:
        if self.kind == "manifest":
            return ["--unpackaged", self.value]
        return ["--singlepackage", "--packagenames", self.value]


class SalesforceDX:
    def __init__(
        self,
        org: str,
        command: tuple[str, ...] = DEFAULT_COMMAND,
        verbose: bool = False,
        timeout_seconds: int = 0,
        ctx: RunOptions | None = None,
    ) -> None:
        self.org = org
        self.command = tuple(command)
        self.verbose = verbose
        self.timeout_seconds = timeout_seconds
        self.ctx = ctx

    def execute(self, args: list[str]) -> CommandResult:
        cmd = [*self.command, *args, "--targetusername", self.org]
        if self.ctx:
            log_event(self.ctx, "verbose", "sfdx", "execute", org=self.org, command=" ".join(cmd))
        result = run_command(cmd, timeout_seconds=self.timeout_seconds, ctx=self.ctx)
        if self.verbose and self.ctx and result.stdout.strip():
            log_event(self.ctx, "info", "sfdx", "output", org=self.org, stdout=result.stdout.strip())
        return result

    def ensure_org_connected(self) -> None:
        result = self.execute(["force:org:display", "--json"])
        if not result.ok:
            raise ScriptError(
                f"org <{self.org}> is not available in SalesforceDX (exit {result.code}): {result.combined_output}",
                kind="connection_error",
            )

    def retrieve_args(self, source: RetrievalSource, target_dir: Path, wait_seconds: int = DEFAULT_WAIT) -> list[str]:
        args = ["force:mdapi:retrieve", *source.args(), "--wait", str(wait_seconds), "--retrievetargetdir", str(target_dir)]
        if self.verbose:
            args.append("--verbose")
        return args

    def retrieve(self, source: RetrievalSource, target_dir: Path, wait_seconds: int = DEFAULT_WAIT) -> CommandResult:
        result = self.execute(self.retrieve_args(source, target_dir, wait_seconds))
        if not result.ok:
            raise ScriptError(
                f"metadata retrieval from org <{self.org}> failed (exit {result.code}): {result.combined_output}",
                kind="retrieval_error",
            )
        return result
