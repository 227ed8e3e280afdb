"""
Utility functions for CV version history.
"""

import dataclasses
from datetime import datetime
from pathlib import Path
from typing import List

import yaml

from src.logging import logger

from .models import CVVersion, DiffKind, SectionDiff, generate_version_id
from .version_store import VersionHistory

EXPORT_FORMAT_VERSION = '1.0'


def export_history(history: VersionHistory, document_id: str, export_path: Path) -> bool:
    """Export every snapshot of a document to a YAML file."""
    try:
        export_path = Path(export_path)
        export_path.parent.mkdir(parents=True, exist_ok=True)

        versions = history.list_versions(document_id)
        payload = {
            'export_info': {
                'exported_at': datetime.now().isoformat(),
                'export_version': EXPORT_FORMAT_VERSION,
                'document_id': document_id,
            },
            'versions': [v.to_dict() for v in versions],
        }
        with open(export_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(payload, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

        logger.info(f"Exported {len(versions)} version(s) of {document_id} to {export_path}")
        return True

    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to export versions of {document_id}: {e}")
        return False


def import_history(history: VersionHistory, document_id: str, import_path: Path) -> List[CVVersion]:
    """
    Merge snapshots from an exported YAML file into a document's history.

    Imported snapshots get fresh ids so they never collide with existing
    ones. The merged history keeps the newest ``history.max_versions``.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a version export
    """
    import_path = Path(import_path)
    if not import_path.exists():
        raise FileNotFoundError(f"Import file not found: {import_path}")

    with open(import_path, 'r', encoding='utf-8') as f:
        try:
            payload = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Error reading YAML file {import_path}: {e}") from e

    if not isinstance(payload, dict) or not isinstance(payload.get('versions'), list):
        raise ValueError(f"Not a version export: {import_path}")

    export_info = payload.get('export_info') or {}
    if export_info:
        logger.info(f"Importing versions exported at {export_info.get('exported_at')}")
    else:
        logger.warning("No export info found in import file")

    imported = []
    for item in payload['versions']:
        try:
            version = CVVersion.from_dict(item)
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed version entry in {import_path}: {e}") from e
        imported.append(dataclasses.replace(version, id=generate_version_id(), resume_id=document_id))

    merged = history.replace_history(document_id, imported + history.list_versions(document_id))
    logger.info(f"Imported {len(imported)} version(s) into {document_id}")
    return merged


_MARKERS = {
    DiffKind.EQUAL: '  ',
    DiffKind.ADD: '+ ',
    DiffKind.REMOVE: '- ',
}


def format_section_diffs(diffs: List[SectionDiff]) -> str:
    """Render section diffs as a plain-text report."""
    if not diffs:
        return "No differences found."

    lines = []
    for diff in diffs:
        lines.extend([diff.label, "-" * len(diff.label)])
        for token in diff.tokens or []:
            lines.append(f"{_MARKERS[token.kind]}{token.text}")
        for name in diff.added or []:
            lines.append(f"+ {name}")
        for name in diff.removed or []:
            lines.append(f"- {name}")
        lines.append("")

    return "\n".join(lines).rstrip()


def format_version_list(versions: List[CVVersion]) -> str:
    """Render a list of snapshots, one per line."""
    if not versions:
        return "No saved versions."

    lines = []
    for version in versions:
        line = f"{version.id}  {version.timestamp}  {version.label}"
        extras = [x for x in (version.job_title, version.company) if x]
        if extras:
            line += f"  [{' @ '.join(extras)}]"
        if version.match_score is not None:
            line += f"  score={version.match_score}"
        lines.append(line)
    return "\n".join(lines)
