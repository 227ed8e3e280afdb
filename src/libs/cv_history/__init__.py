"""
CV Version History Module

Keeps a bounded, most-recent-first history of CV snapshots per document and
compares snapshots word by word.

Features:
- Word-level LCS diff with a whole-text fallback for very long inputs
- Section diffs for summary, experience descriptions and skills
- Snapshot store over injectable key/value storage
- YAML export/import of a document's history
"""

from .diff import diff_versions, normalize_skill_name, tokenize, word_diff
from .models import CVVersion, DiffKind, DiffToken, SectionDiff, SectionKind
from .storage import InMemoryStorage, JsonFileStorage, KeyValueStorage
from .utils import export_history, format_section_diffs, format_version_list, import_history
from .version_store import VersionHistory

__all__ = [
    "CVVersion",
    "DiffKind",
    "DiffToken",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "SectionDiff",
    "SectionKind",
    "VersionHistory",
    "diff_versions",
    "export_history",
    "format_section_diffs",
    "format_version_list",
    "import_history",
    "normalize_skill_name",
    "tokenize",
    "word_diff",
]
