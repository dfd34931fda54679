from __future__ import annotations

import zipfile
from pathlib import Path

from packagexml_diff.core.context import RunOptions
from packagexml_diff.core.errors import ScriptError
from packagexml_diff.manifest.persist import SavePolicy
from packagexml_diff.sfdx.client import RetrievalSource

FAKE_SFDX_SOURCE = '''\
import json
import os
import sys
import zipfile
from pathlib import Path

args = sys.argv[1:]
org = args[args.index("--targetusername") + 1]
org_dir = Path(os.environ["FAKE_SFDX_ORGS"]) / org
if args[0] == "force:org:display":
    if not org_dir.is_dir() or (org_dir / "disconnected").exists():
        print(f"No authorization information found for {org}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps({"status": 0, "result": {"username": org}}))
    sys.exit(0)
if args[0] == "force:mdapi:retrieve":
    if (org_dir / "retrieve-fails").exists():
        print("ERROR: INVALID_CROSS_REFERENCE_KEY", file=sys.stderr)
        sys.exit(1)
    target = Path(args[args.index("--retrievetargetdir") + 1])
    inner = "unpackaged/package.xml" if "--unpackaged" in args else "package.xml"
    with zipfile.ZipFile(target / "unpackaged.zip", "w") as zf:
        zf.writestr(inner, (org_dir / "package.xml").read_text(encoding="utf-8"))
    print("Retrieving metadata... done")
    sys.exit(0)
sys.exit(2)
'''

MANIFEST_NS1 = "<a/>\n<namespacePrefix>ns1</namespacePrefix>\n<b/>"
MANIFEST_NS2 = "<a/>\n<namespacePrefix>ns2</namespacePrefix>\n<b/>"
MANIFEST_NS2_CHANGED = "<a/>\n<namespacePrefix>ns2</namespacePrefix>\n<c/>"


def make_options(tmp_path: Path, **overrides: object) -> RunOptions:
    values: dict[str, object] = {
        "org1": "org-a",
        "org2": "org-b",
        "packagename": "becem",
        "packagexml": None,
        "save_policy": SavePolicy.NEVER,
        "save_dir": tmp_path,
        "run_id": "pytest-run",
    }
    values.update(overrides)
    return RunOptions(**values)  # type: ignore[arg-type]


class FakeClient:
    """In-process stand-in for SalesforceDX that zips a canned manifest."""

    def __init__(self, org: str, manifests: dict[str, str], failures: dict[str, str] | None = None) -> None:
        self.org = org
        self.manifests = manifests
        self.failures = failures or {}
        self.retrieved: list[RetrievalSource] = []

    def ensure_org_connected(self) -> None:
        if self.failures.get(self.org) == "connect":
            raise ScriptError(f"org <{self.org}> is not available in SalesforceDX", kind="connection_error")

    def retrieve(self, source: RetrievalSource, target_dir: Path, wait_seconds: int = 100) -> None:
        self.retrieved.append(source)
        failure = self.failures.get(self.org)
        if failure == "retrieve":
            raise ScriptError(f"metadata retrieval from org <{self.org}> failed", kind="retrieval_error")
        archive = target_dir / "unpackaged.zip"
        if failure == "corrupt":
            archive.write_bytes(b"not a zip archive")
            return
        inner = "unpackaged/package.xml" if source.kind == "manifest" else "package.xml"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr(inner, self.manifests[self.org])


def client_factory(manifests: dict[str, str], failures: dict[str, str] | None = None, created: list[FakeClient] | None = None):
    def _factory(org: str, _options: RunOptions) -> FakeClient:
        client = FakeClient(org, manifests, failures)
        if created is not None:
            created.append(client)
        return client

    return _factory
