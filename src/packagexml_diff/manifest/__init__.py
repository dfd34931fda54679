"""package.xml handling: locate, normalize, compare and persist."""

from .differ import DiffSegment, changed_segments, diff_trimmed_lines
from .locator import package_xml_path
from .namespace import find_marker_lines, strip_namespace_marker, strip_namespace_marker_file
from .persist import SavePolicy, maybe_save, should_save

__all__ = [
    "DiffSegment",
    "SavePolicy",
    "changed_segments",
    "diff_trimmed_lines",
    "find_marker_lines",
    "maybe_save",
    "package_xml_path",
    "should_save",
    "strip_namespace_marker",
    "strip_namespace_marker_file",
]
