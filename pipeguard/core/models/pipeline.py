# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from pipeguard.core.enums import BuildStatus, CIProvider



def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Return value as an aware UTC datetime.

    Naive values are taken to already be in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

@dataclass(frozen=True)
class PipelineRun:
    """
    Immutable snapshot of one CI/CD pipeline execution.

    Supplied by the history store. The core reads it and never mutates it.
    Timestamps are stored as aware UTC; naive values are read as UTC.
    """
    id: str
    repository_name: str
    branch: str
    build_number: int
    status: BuildStatus

    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    duration: Optional[timedelta] = None

    commit_hash: str = ""
    commit_message: str = ""
    commit_author: str = ""

    provider: CIProvider = CIProvider.GITHUB_ACTIONS
    repository_url: str = ""
    triggered_by: str = ""
    web_url: str = ""

    def __post_init__(self):
        object.__setattr__(self, "started_at", as_utc(self.started_at))
        object.__setattr__(self, "finished_at", as_utc(self.finished_at))

    def is_failed(self) -> bool:
        """ Check if the run ended in failure. """
        return self.status == BuildStatus.FAILURE

    def is_running(self) -> bool:
        """ Check if the run is still in flight. """
        return self.status == BuildStatus.RUNNING

    def is_protected_branch(self) -> bool:
        """ Check if the run targets main or master. """
        return self.branch in ("main", "master")

    @property
    def display_name(self) -> str:
        return f"{self.repository_name} #{self.build_number}"

    def to_dict(self) -> dict:
        """ Convert to dictionary. """
        return {
            "id": self.id,
            "repository_name": self.repository_name,
            "branch": self.branch,
            "build_number": self.build_number,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_seconds": self.duration.total_seconds() if self.duration else None,
            "commit_hash": self.commit_hash,
            "commit_author": self.commit_author,
            "provider": self.provider.value,
        }

@dataclass(frozen=True)
class Commit:
    """ A commit that landed before a pipeline run. """
    sha: str
    message: str
    author: str
    timestamp: datetime
    files: tuple[str, ...] = field(default_factory=tuple)
    files_changed: int = 0
    lines_added: int = 0
    lines_deleted: int = 0

    def __post_init__(self):
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def total_lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted

    def to_dict(self) -> dict:
        """ Convert to dictionary """
        return {
            "sha": self.sha,
            "message": self.message,
            "author": self.author,
            "timestamp": self.timestamp.isoformat(),
            "files": list(self.files),
            "files_changed": self.files_changed,
            "lines_added": self.lines_added,
            "lines_deleted": self.lines_deleted,
        }
