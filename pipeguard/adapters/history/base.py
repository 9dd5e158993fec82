# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from abc import ABC, abstractmethod
from typing import Optional

from pipeguard.core.models.pipeline import PipelineRun


class HistoryStore(ABC):
    """
    Read-only source of pipeline runs and their raw logs.

    Implementations wrap a CI provider, a database or a cache. The core
    only reads from it.
    """

    @abstractmethod
    async def list_all(self) -> list[PipelineRun]:
        """
        Get every known pipeline run.

        Returns:
            Snapshot of pipeline runs
        """
        pass

    @abstractmethod
    async def get_by_id(self, pipeline_id: str) -> Optional[PipelineRun]:
        """
        Look up a single pipeline run.

        Args:
            pipeline_id: Pipeline identifier

        Returns:
            The run, or None if unknown
        """
        pass

    @abstractmethod
    async def fetch_logs(self, pipeline: PipelineRun) -> str:
        """
        Fetch raw build logs for a run.

        Implementations return an empty string on any failure instead of
        raising.

        Args:
            pipeline: Pipeline run to fetch logs for

        Returns:
            Log text, or "" if unavailable
        """
        pass
