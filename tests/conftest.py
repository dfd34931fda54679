from __future__ import annotations

import shlex
import socket
import sys
from pathlib import Path
from typing import Callable

import pytest
from hypothesis import settings

from helpers import FAKE_SFDX_SOURCE

_ALLOWED_MARKERS = {"unit", "integration"}

settings.register_profile("packagexml-diff", deadline=None, max_examples=200)
settings.load_profile("packagexml-diff")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PACKAGEXML_DIFF_SFDX", "PACKAGEXML_DIFF_WAIT", "PACKAGEXML_DIFF_SAVE_DIR", "RUN_ID"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_sfdx(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[..., Path]:
    """Install a fake sfdx executable and return a function registering org manifests."""
    script = tmp_path / "fake_sfdx.py"
    script.write_text(FAKE_SFDX_SOURCE, encoding="utf-8")
    orgs = tmp_path / "orgs"
    orgs.mkdir()
    monkeypatch.setenv("FAKE_SFDX_ORGS", str(orgs))
    monkeypatch.setenv("PACKAGEXML_DIFF_SFDX", f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}")

    def _add(org: str, manifest: str, connected: bool = True, retrieve_ok: bool = True) -> Path:
        org_dir = orgs / org
        org_dir.mkdir(parents=True, exist_ok=True)
        (org_dir / "package.xml").write_text(manifest, encoding="utf-8")
        if not connected:
            (org_dir / "disconnected").write_text("", encoding="utf-8")
        if not retrieve_ok:
            (org_dir / "retrieve-fails").write_text("", encoding="utf-8")
        return org_dir

    return _add
