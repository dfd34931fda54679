"""Two-org package.xml comparison pipeline.

Each stage fans out over both orgs and joins before the next stage starts.
Any error aborts the whole run; there is no retry and no partial result.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, TypeVar

from .core.archive import RETRIEVED_ARCHIVE_NAME, extract_zip
from .core.context import RunOptions
from .core.errors import ScriptError
from .core.exit_codes import DIFFERENT, OK
from .core.fs import read_text, temp_workspace
from .core.logging import log_event
from .manifest.differ import DiffSegment, changed_segments, diff_trimmed_lines
from .manifest.locator import package_xml_path
from .manifest.namespace import strip_namespace_marker_file
from .manifest.persist import maybe_save
from .sfdx.client import RetrievalSource, SalesforceDX

T = TypeVar("T")


class Stage(str, Enum):
    START = "start"
    ORGS_VERIFIED = "orgs-verified"
    TEMP_DIRS_READY = "temp-dirs-ready"
    RETRIEVED = "retrieved"
    EXTRACTED = "extracted"
    MANIFESTS_READ = "manifests-read"
    STRIPPED = "stripped"
    MANIFESTS_FINAL = "manifests-final"
    DIFFED = "diffed"
    SAVED = "saved"
    DONE = "done"
    FAILED = "failed"


@dataclass
class OrgContext:
    lane: int
    org: str
    client: SalesforceDX
    tmpdir: Path | None = None
    manifest: Path | None = None


@dataclass(frozen=True)
class RunResult:
    exit_code: int
    segments: tuple[DiffSegment, ...]
    saved: tuple[Path, ...]
    manifests: tuple[Path, Path]

    @property
    def differs(self) -> bool:
        return bool(self.segments)


ClientFactory = Callable[[str, RunOptions], SalesforceDX]


def default_client(org: str, options: RunOptions) -> SalesforceDX:
    return SalesforceDX(
        org,
        command=options.sfdx_command,
        verbose=options.sfdx_verbose,
        timeout_seconds=options.process_timeout_seconds,
        ctx=options,
    )


def retrieval_source(options: RunOptions) -> RetrievalSource:
    if options.packagexml is not None:
        return RetrievalSource.from_manifest(options.packagexml)
    return RetrievalSource.from_package_name(options.packagename)


class ManifestPipeline:
    def __init__(
        self,
        options: RunOptions,
        client_factory: ClientFactory = default_client,
        moment: datetime | None = None,
    ) -> None:
        self.options = options
        self.moment = moment
        self.stage = Stage.START
        self.lanes = (
            OrgContext(1, options.org1, client_factory(options.org1, options)),
            OrgContext(2, options.org2, client_factory(options.org2, options)),
        )

    def _advance(self, stage: Stage) -> None:
        self.stage = stage
        log_event(self.options, "verbose", "pipeline", "stage", stage=stage.value)

    def _both(self, pool: ThreadPoolExecutor, fn: Callable[[OrgContext], T]) -> list[T]:
        futures = [pool.submit(fn, lane) for lane in self.lanes]
        return [future.result() for future in futures]

    def _read_manifests(self, pool: ThreadPoolExecutor) -> list[str]:
        return self._both(pool, lambda lane: read_text(lane.manifest))

    def run(self) -> RunResult:
        try:
            return self._run()
        except ScriptError as exc:
            failed_at = self.stage
            self.stage = Stage.FAILED
            log_event(self.options, "error", "pipeline", "failed", after=failed_at.value, kind=exc.kind)
            raise
        except Exception as exc:
            failed_at = self.stage
            self.stage = Stage.FAILED
            log_event(self.options, "error", "pipeline", "failed", after=failed_at.value, kind="internal_error")
            raise ScriptError(f"internal error: {exc}", kind="internal_error") from exc

    def _run(self) -> RunResult:
        opts = self.options
        first, second = self.lanes
        log_event(opts, "verbose", "pipeline", "start", org1=opts.org1, org2=opts.org2, mode=opts.mode)
        with temp_workspace(keep=opts.keep_temp, ctx=opts) as make_tmp, ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="packagexml-diff"
        ) as pool:
            self._both(pool, lambda lane: lane.client.ensure_org_connected())
            self._advance(Stage.ORGS_VERIFIED)

            for lane, tmpdir in zip(self.lanes, self._both(pool, lambda lane: make_tmp())):
                lane.tmpdir = tmpdir
                log_event(opts, "verbose", "pipeline", "temp-dir", lane=lane.lane, path=str(tmpdir))
            self._advance(Stage.TEMP_DIRS_READY)

            source = retrieval_source(opts)
            self._both(pool, lambda lane: lane.client.retrieve(source, lane.tmpdir, opts.wait_seconds))
            self._advance(Stage.RETRIEVED)

            self._both(pool, lambda lane: extract_zip(lane.tmpdir / RETRIEVED_ARCHIVE_NAME, lane.tmpdir, ctx=opts))
            self._advance(Stage.EXTRACTED)

            for lane in self.lanes:
                lane.manifest = package_xml_path(lane.tmpdir, opts.explicit_manifest)
            texts = self._read_manifests(pool)
            self._advance(Stage.MANIFESTS_READ)

            if opts.explicit_manifest:
                log_event(opts, "info", "manifest", "namespace-skip", reason="explicit package.xml")
            else:
                log_event(opts, "info", "manifest", "namespace-detect", packagename=opts.packagename)
                self._both(pool, lambda lane: strip_namespace_marker_file(lane.manifest, ctx=opts))
                self._advance(Stage.STRIPPED)
                texts = self._read_manifests(pool)
            self._advance(Stage.MANIFESTS_FINAL)

            segments = changed_segments(diff_trimmed_lines(texts[0], texts[1]))
            self._advance(Stage.DIFFED)
            for segment in segments:
                log_event(opts, "verbose", "manifest", "segment", tag=segment.tag, lines=len(segment.lines))
            exit_code = DIFFERENT if segments else OK

            saved = maybe_save(
                opts.save_policy,
                bool(segments),
                first.manifest,
                second.manifest,
                opts.save_dir,
                overwrite=opts.overwrite,
                moment=self.moment,
                ctx=opts,
            )
            if saved:
                self._advance(Stage.SAVED)
            self._advance(Stage.DONE)
            log_event(opts, "verbose", "pipeline", "exit", code=exit_code)
            return RunResult(
                exit_code=exit_code,
                segments=tuple(segments),
                saved=tuple(saved),
                manifests=(first.manifest, second.manifest),
            )


def run_pipeline(
    options: RunOptions,
    client_factory: ClientFactory = default_client,
    moment: datetime | None = None,
) -> RunResult:
    return ManifestPipeline(options, client_factory, moment).run()
