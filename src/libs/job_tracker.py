"""
Tracks which job listings the user applied to or skipped.
"""

import json
from dataclasses import dataclass, asdict, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import config as cfg
from src.logging import logger
from src.libs.cv_history.storage import KeyValueStorage
from src.utils.validator import validate_choice

JOB_STATUSES = ("applied", "skipped")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass
class TrackedJob:
    job_id: str
    title: str
    company: str
    status: str
    tracked_at: str
    location: Optional[str] = None
    employment_type: Optional[str] = None
    salary_range: Optional[str] = None
    posted_date: Optional[str] = None
    apply_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrackedJob':
        return cls(
            job_id=data['job_id'],
            title=data.get('title', ''),
            company=data.get('company', ''),
            status=data.get('status', 'applied'),
            tracked_at=data.get('tracked_at', ''),
            location=data.get('location'),
            employment_type=data.get('employment_type'),
            salary_range=data.get('salary_range'),
            posted_date=data.get('posted_date'),
            apply_url=data.get('apply_url'),
        )


class JobTracker:
    """Newest-first list of tracked jobs kept in key/value storage."""

    def __init__(self, storage: KeyValueStorage, max_entries: int = None, storage_key: str = None):
        self.storage = storage
        self.max_entries = cfg.JOB_TRACKER_MAX_ENTRIES if max_entries is None else max_entries
        self.storage_key = storage_key or cfg.JOB_TRACKER_STORAGE_KEY

    def _write(self, jobs: List[TrackedJob]) -> None:
        self.storage.set(self.storage_key, json.dumps([j.to_dict() for j in jobs], ensure_ascii=False))

    def get_tracked_jobs(self) -> List[TrackedJob]:
        raw = self.storage.get(self.storage_key)
        if not raw:
            return []
        try:
            return [TrackedJob.from_dict(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Corrupt job tracker data, ignoring it: {e}")
            return []

    def get_job_status(self, job_id: str) -> Optional[str]:
        for job in self.get_tracked_jobs():
            if job.job_id == job_id:
                return job.status
        return None

    def track_job(self, job: Mapping[str, Any], status: str) -> TrackedJob:
        """Record a job as applied or skipped, replacing any earlier entry."""
        validate_choice(status, JOB_STATUSES, name="job status")
        job_id = str(job['id'])
        entry = TrackedJob(
            job_id=job_id,
            title=job.get('title', ''),
            company=job.get('company', ''),
            status=status,
            tracked_at=_now_iso(),
            location=job.get('location'),
            employment_type=job.get('employment_type'),
            salary_range=job.get('salary_range'),
            posted_date=job.get('posted_date'),
            apply_url=job.get('apply_url'),
        )
        existing = [j for j in self.get_tracked_jobs() if j.job_id != job_id]
        self._write(([entry] + existing)[:self.max_entries])
        logger.info(f"Tracked job {job_id} as {status}")
        return entry

    def remove_tracked_job(self, job_id: str) -> None:
        self._write([j for j in self.get_tracked_jobs() if j.job_id != job_id])
        logger.info(f"Removed tracked job {job_id}")

    def update_tracked_job_status(self, job_id: str, status: str) -> None:
        validate_choice(status, JOB_STATUSES, name="job status")
        updated = [
            replace(j, status=status, tracked_at=_now_iso()) if j.job_id == job_id else j
            for j in self.get_tracked_jobs()
        ]
        self._write(updated)
        logger.info(f"Updated tracked job {job_id} to {status}")
