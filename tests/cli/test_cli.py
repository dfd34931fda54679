from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from helpers import MANIFEST_NS1, MANIFEST_NS2, MANIFEST_NS2_CHANGED
from packagexml_diff.cli.main import build_parser, main


def test_help_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    for flag in ("--org1", "--org2", "--packagename", "--packagexml", "--save-packagexml", "--save-dir", "--sfdx-verbose"):
        assert flag in out


def test_parser_defaults() -> None:
    ns = build_parser().parse_args(["--org1", "a", "--org2", "b"])
    assert ns.packagename is None
    assert ns.save_packagexml is None
    assert ns.verbose is False and ns.sfdx_verbose is False


def test_missing_org_prints_usage_and_exits_one(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--org1", "a"]) == 1
    err = capsys.readouterr().err
    assert "usage: packagexml-diff" in err
    assert "--org2" in err


def test_invalid_save_policy_exits_one(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--org1", "a", "--org2", "b", "--save-packagexml", "sometimes"]) == 1
    assert "invalid choice" in capsys.readouterr().err


def test_missing_save_dir_exits_one_with_json_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--org1", "a", "--org2", "b", "--save-dir", str(tmp_path / "missing"), "--json"])
    assert code == 1
    payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert payload["schema_name"] == "packagexml_diff.error.v1"
    assert payload["errors"][0]["kind"] == "argument_error"


@pytest.mark.integration
def test_identical_after_namespace_strip_exits_zero(
    fake_sfdx: Callable[..., Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_sfdx("org-a", MANIFEST_NS1)
    fake_sfdx("org-b", MANIFEST_NS2)
    assert main(["--org1", "org-a", "--org2", "org-b", "--save-dir", str(tmp_path)]) == 0
    captured = capsys.readouterr()
    assert "The files are the same" in captured.out
    assert "component=cli action=start" in captured.err


@pytest.mark.integration
def test_differences_exit_one_and_are_listed(
    fake_sfdx: Callable[..., Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_sfdx("org-a", MANIFEST_NS1)
    fake_sfdx("org-b", MANIFEST_NS2_CHANGED)
    assert main(["--org1", "org-a", "--org2", "org-b", "--save-dir", str(tmp_path)]) == 1
    out = capsys.readouterr().out.splitlines()
    assert out == ["!! THERE ARE DIFFERENCES BETWEEN THE FILES !!", "REMOVED: <b/>", "ADDED: <c/>"]


@pytest.mark.integration
def test_json_report_and_save_on_diff(
    fake_sfdx: Callable[..., Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_sfdx("org-a", MANIFEST_NS1)
    fake_sfdx("org-b", MANIFEST_NS2_CHANGED)
    saved = tmp_path / "saved"
    saved.mkdir()
    argv = ["--org1", "org-a", "--org2", "org-b", "--save-dir", str(saved), "--save-packagexml", "diff", "--json"]
    assert main([*argv, "--run-id", "cli-json"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "different"
    assert payload["run_id"] == "cli-json"
    assert payload["mode"] == "packagename"
    assert payload["segments"] == [{"tag": "removed", "lines": ["<b/>"]}, {"tag": "added", "lines": ["<c/>"]}]
    assert len(payload["saved"]) == 2
    names = sorted(p.name for p in saved.iterdir())
    assert names[0].startswith("package-1-") and names[1].startswith("package-2-")


@pytest.mark.integration
def test_explicit_packagexml_keeps_namespace_lines(
    fake_sfdx: Callable[..., Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_sfdx("org-a", MANIFEST_NS1)
    fake_sfdx("org-b", MANIFEST_NS1)
    manifest = tmp_path / "package.xml"
    manifest.write_text("<Package/>", encoding="utf-8")
    argv = ["--org1", "org-a", "--org2", "org-b", "--packagexml", str(manifest), "--save-dir", str(tmp_path)]
    assert main(argv) == 0
    assert "action=namespace-skip" in capsys.readouterr().err


@pytest.mark.integration
def test_disconnected_org_fails_with_exit_one(
    fake_sfdx: Callable[..., Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_sfdx("org-a", MANIFEST_NS1)
    fake_sfdx("org-b", MANIFEST_NS1, connected=False)
    assert main(["--org1", "org-a", "--org2", "org-b", "--save-dir", str(tmp_path)]) == 1
    err = capsys.readouterr().err
    assert "kind=connection_error" in err
    assert "No authorization information found for org-b" in err


@pytest.mark.integration
def test_retrieve_failure_reports_tool_message(
    fake_sfdx: Callable[..., Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_sfdx("org-a", MANIFEST_NS1, retrieve_ok=False)
    fake_sfdx("org-b", MANIFEST_NS1)
    assert main(["--org1", "org-a", "--org2", "org-b", "--save-dir", str(tmp_path), "--log-json"]) == 1
    err_lines = capsys.readouterr().err.strip().splitlines()
    events = [json.loads(line) for line in err_lines if line.startswith("{")]
    assert any(e["action"] == "failed" and e["kind"] == "retrieval_error" for e in events)
    assert "INVALID_CROSS_REFERENCE_KEY" in err_lines[-1]


@pytest.mark.integration
def test_verbose_logs_pipeline_stages(
    fake_sfdx: Callable[..., Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_sfdx("org-a", "<a/>")
    fake_sfdx("org-b", "<a/>")
    argv = ["--org1", "org-a", "--org2", "org-b", "--save-dir", str(tmp_path), "--verbose", "--sfdx-verbose"]
    assert main(argv) == 0
    err = capsys.readouterr().err
    for stage in ("orgs-verified", "temp-dirs-ready", "retrieved", "extracted", "manifests-final", "diffed", "done"):
        assert f"stage={stage}" in err
    assert "Retrieving metadata... done" in err
