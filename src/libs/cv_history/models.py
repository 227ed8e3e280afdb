"""
Data models for CV version history and diffs.
"""

import copy
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Dict, Any


class DiffKind(Enum):
    """Kind of a word-level diff token."""
    EQUAL = "equal"
    ADD = "add"
    REMOVE = "remove"


class SectionKind(Enum):
    """Document regions that are diffed independently."""
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    SKILLS = "skills"


@dataclass
class DiffToken:
    """A run of words sharing the same diff kind."""
    kind: DiffKind
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind.value, 'text': self.text}


@dataclass
class SectionDiff:
    """Changes found in one section of a CV."""
    section: SectionKind
    label: str
    tokens: Optional[List[DiffToken]] = None
    added: Optional[List[str]] = None
    removed: Optional[List[str]] = None
    has_changes: bool = True

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'section': self.section.value,
            'label': self.label,
            'has_changes': self.has_changes,
        }
        if self.tokens is not None:
            data['tokens'] = [token.to_dict() for token in self.tokens]
        if self.added is not None:
            data['added'] = list(self.added)
        if self.removed is not None:
            data['removed'] = list(self.removed)
        return data


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def generate_version_id() -> str:
    """Build an id of the form ``v-<epoch ms>-<5 base36 chars>``."""
    suffix = ''.join(random.choices(string.digits + string.ascii_lowercase, k=5))
    return f"v-{int(time.time() * 1000)}-{suffix}"


@dataclass(frozen=True)
class CVVersion:
    """
    Immutable snapshot of a CV's full content.

    Attributes:
        id: Unique identifier of the snapshot
        resume_id: Document the snapshot belongs to
        timestamp: ISO-8601 creation time
        label: Human readable label, e.g. "Optimized for Google - Frontend Dev"
        content_snapshot: Deep copy of the CV content at save time
        job_title: Job title the CV was tailored for, if any
        company: Company the CV was tailored for, if any
        match_score: Job match score at save time, if any
    """
    id: str
    resume_id: str
    timestamp: str
    label: str
    content_snapshot: Dict[str, Any] = field(default_factory=dict)
    job_title: Optional[str] = None
    company: Optional[str] = None
    match_score: Optional[float] = None

    @classmethod
    def create(cls,
               resume_id: str,
               content: Dict[str, Any],
               label: str,
               job_title: Optional[str] = None,
               company: Optional[str] = None,
               match_score: Optional[float] = None) -> 'CVVersion':
        """Snapshot ``content`` with a fresh id and timestamp."""
        return cls(
            id=generate_version_id(),
            resume_id=resume_id,
            timestamp=_now_iso(),
            label=label,
            content_snapshot=copy.deepcopy(content),
            job_title=job_title,
            company=company,
            match_score=match_score,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the snapshot to a JSON-friendly dictionary."""
        data = {
            'id': self.id,
            'resume_id': self.resume_id,
            'timestamp': self.timestamp,
            'label': self.label,
            'content_snapshot': copy.deepcopy(self.content_snapshot),
        }
        if self.job_title is not None:
            data['job_title'] = self.job_title
        if self.company is not None:
            data['company'] = self.company
        if self.match_score is not None:
            data['match_score'] = self.match_score
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CVVersion':
        """Create a snapshot from a dictionary."""
        return cls(
            id=data['id'],
            resume_id=data.get('resume_id', ''),
            timestamp=data.get('timestamp', ''),
            label=data.get('label', ''),
            content_snapshot=copy.deepcopy(data.get('content_snapshot') or {}),
            job_title=data.get('job_title'),
            company=data.get('company'),
            match_score=data.get('match_score'),
        )
