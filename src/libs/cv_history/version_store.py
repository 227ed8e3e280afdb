"""
Bounded per-document history of CV snapshots.
"""

import copy
import json
from typing import Any, Dict, List, Optional, Tuple

import config as cfg
from src.logging import logger
from src.utils.validator import ValidationError, validate_string

from .diff import diff_versions
from .models import CVVersion, SectionDiff
from .storage import KeyValueStorage

VERSION_META_FIELDS = ('job_title', 'company', 'match_score')


class VersionHistory:
    """
    Saves, lists and compares snapshots of a CV.

    Snapshots are kept most-recent-first under ``<prefix><document_id>`` in
    the injected storage. Once more than ``max_versions`` exist the oldest
    are dropped. A single writer per document is assumed.
    """

    def __init__(self, storage: KeyValueStorage, max_versions: int = None, key_prefix: str = None):
        """
        Initialize the version history.

        Args:
            storage: Backend exposing get/set/remove on string values
            max_versions: Number of snapshots kept per document
            key_prefix: Prefix of the storage key for each document
        """
        self.storage = storage
        self.max_versions = cfg.MAX_VERSIONS if max_versions is None else max_versions
        self.key_prefix = cfg.VERSION_STORAGE_KEY_PREFIX if key_prefix is None else key_prefix

    def storage_key(self, document_id: str) -> str:
        return f"{self.key_prefix}{document_id}"

    def _write(self, document_id: str, versions: List[CVVersion]) -> None:
        payload = json.dumps([v.to_dict() for v in versions], ensure_ascii=False)
        self.storage.set(self.storage_key(document_id), payload)

    def list_versions(self, document_id: str) -> List[CVVersion]:
        """List the snapshots of a document, newest first."""
        raw = self.storage.get(self.storage_key(document_id))
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Corrupt version history for {document_id}, ignoring it: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Unexpected version history format for {document_id}, ignoring it")
            return []

        versions = []
        for item in data:
            try:
                versions.append(CVVersion.from_dict(item))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed version entry for {document_id}: {e}")
        return versions

    def save_version(self,
                     document_id: str,
                     content: Any,
                     label: str,
                     meta: Optional[Dict[str, Any]] = None) -> CVVersion:
        """
        Snapshot the given content.

        Args:
            document_id: CV the snapshot belongs to
            content: CV content, a mapping or a ``ResumeContent`` model
            label: Human readable label
            meta: Optional ``job_title``, ``company`` and ``match_score``

        Returns:
            The stored snapshot
        """
        validate_string(label, min_length=1)
        meta = dict(meta or {})
        unknown = set(meta) - set(VERSION_META_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown version metadata: {', '.join(sorted(unknown))}")

        if hasattr(content, 'model_dump'):
            content = content.model_dump()

        version = CVVersion.create(document_id, content, label, **meta)
        versions = [version] + self.list_versions(document_id)
        dropped = len(versions) - self.max_versions
        self._write(document_id, versions[:self.max_versions])

        if dropped > 0:
            logger.debug(f"Dropped {dropped} oldest version(s) of {document_id}")
        logger.info(f"Saved version '{label}' ({version.id}) for {document_id}")
        return version

    def get_version(self, document_id: str, version_id: str) -> Optional[CVVersion]:
        """Get one snapshot by id."""
        for version in self.list_versions(document_id):
            if version.id == version_id:
                return version
        logger.warning(f"Version not found: {version_id}")
        return None

    def delete_version(self, document_id: str, version_id: str) -> None:
        """Delete one snapshot, leaving the others untouched."""
        versions = self.list_versions(document_id)
        remaining = [v for v in versions if v.id != version_id]
        if len(remaining) == len(versions):
            logger.warning(f"Version {version_id} not found for {document_id}")
        self._write(document_id, remaining)
        logger.info(f"Deleted version {version_id} of {document_id}")

    def clear_versions(self, document_id: str) -> None:
        """Drop the whole history of a document."""
        self.storage.remove(self.storage_key(document_id))
        logger.info(f"Cleared version history of {document_id}")

    def compare_with_current(self,
                             document_id: str,
                             version_id: str,
                             current_content: Any) -> Optional[List[SectionDiff]]:
        """Diff a stored snapshot against the current content."""
        version = self.get_version(document_id, version_id)
        if not version:
            return None
        return diff_versions(version.content_snapshot, current_content)

    def compare_versions(self,
                         document_id: str,
                         old_version_id: str,
                         new_version_id: str) -> Optional[List[SectionDiff]]:
        """Diff two stored snapshots of the same document."""
        old_version = self.get_version(document_id, old_version_id)
        new_version = self.get_version(document_id, new_version_id)
        if not old_version or not new_version:
            return None
        return diff_versions(old_version.content_snapshot, new_version.content_snapshot)

    def restore_version(self, document_id: str, version_id: str) -> Optional[Tuple[Dict[str, Any], str]]:
        """
        Get a copy of a snapshot's content to load back into the editor.

        Returns:
            ``(content, label)`` or None if the snapshot does not exist
        """
        version = self.get_version(document_id, version_id)
        if not version:
            return None
        logger.info(f"Restoring version '{version.label}' ({version_id}) of {document_id}")
        return copy.deepcopy(version.content_snapshot), version.label

    def replace_history(self, document_id: str, versions: List[CVVersion]) -> List[CVVersion]:
        """Overwrite a document's history, newest first, capped at ``max_versions``."""
        ordered = sorted(versions, key=lambda v: v.timestamp, reverse=True)[:self.max_versions]
        self._write(document_id, ordered)
        logger.info(f"Replaced version history of {document_id} with {len(ordered)} version(s)")
        return ordered
