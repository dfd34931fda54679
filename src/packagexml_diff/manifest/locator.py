from __future__ import annotations

from pathlib import Path

PACKAGE_XML = "package.xml"
UNPACKAGED_DIR = "unpackaged"


def package_xml_path(base: Path, explicit_manifest: bool) -> Path:
    # mdapi:retrieve nests the output under unpackaged/ only for --unpackaged retrievals
    if explicit_manifest:
        return base / UNPACKAGED_DIR / PACKAGE_XML
    return base / PACKAGE_XML
