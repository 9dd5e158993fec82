# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""Shared fixtures for PipeGuard tests."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from pipeguard.core.config import Settings
from pipeguard.core.enums import BuildStatus, CIProvider
from pipeguard.core.models.pipeline import Commit, PipelineRun

BASE_TIME = datetime(2025, 11, 10, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> Settings:
    """Fixture for default settings independent of the cached instance."""
    return Settings()


@pytest.fixture
def base_time() -> datetime:
    """Fixture for a fixed Monday 10:00 UTC reference time."""
    return BASE_TIME


@pytest.fixture
def make_run() -> Callable[..., PipelineRun]:
    """Factory fixture for pipeline runs."""

    def _make_run(
        id: str = "p1",
        repository_name: str = "svc-a",
        branch: str = "main",
        status: BuildStatus = BuildStatus.FAILURE,
        started_at: Optional[datetime] = BASE_TIME,
        duration: Optional[timedelta] = None,
        provider: CIProvider = CIProvider.GITHUB_ACTIONS,
        build_number: int = 1,
        finished_at: Optional[datetime] = None,
    ) -> PipelineRun:
        return PipelineRun(
            id=id,
            repository_name=repository_name,
            branch=branch,
            build_number=build_number,
            status=status,
            started_at=started_at,
            finished_at=finished_at,
            duration=duration,
            provider=provider,
        )

    return _make_run


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    """Factory fixture for commits."""

    def _make_commit(
        sha: str = "abc1234def5678",
        message: str = "Update handler",
        author: str = "dev",
        timestamp: datetime = BASE_TIME - timedelta(days=3),
        files: tuple = ("src/app.py",),
        files_changed: Optional[int] = None,
        lines_added: int = 10,
        lines_deleted: int = 2,
    ) -> Commit:
        return Commit(
            sha=sha,
            message=message,
            author=author,
            timestamp=timestamp,
            files=tuple(files),
            files_changed=files_changed if files_changed is not None else len(files),
            lines_added=lines_added,
            lines_deleted=lines_deleted,
        )

    return _make_commit
