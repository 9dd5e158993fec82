# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
In-memory history store.

Holds runs and logs in dictionaries. Suitable for tests, local tooling and
callers that already have a snapshot in hand.
"""

from typing import Iterable, Optional

import structlog

from pipeguard.adapters.history.base import HistoryStore
from pipeguard.core.models.pipeline import PipelineRun

logger = structlog.get_logger(__name__)


class InMemoryHistoryStore(HistoryStore):

    def __init__(
        self,
        runs: Optional[Iterable[PipelineRun]] = None,
        logs: Optional[dict[str, str]] = None,
    ):
        self._runs: dict[str, PipelineRun] = {}
        self._logs: dict[str, str] = dict(logs or {})

        for run in runs or []:
            self.add(run)

    def add(self, run: PipelineRun, logs: Optional[str] = None) -> None:
        """ Add or replace a run, optionally with its logs. """
        self._runs[run.id] = run
        if logs is not None:
            self._logs[run.id] = logs

    def set_logs(self, pipeline_id: str, logs: str) -> None:
        self._logs[pipeline_id] = logs

    async def list_all(self) -> list[PipelineRun]:
        return list(self._runs.values())

    async def get_by_id(self, pipeline_id: str) -> Optional[PipelineRun]:
        return self._runs.get(pipeline_id)

    async def fetch_logs(self, pipeline: PipelineRun) -> str:
        logs = self._logs.get(pipeline.id)
        if logs is None:
            logger.debug("history_logs_missing", pipeline_id=pipeline.id)
            return ""
        return logs

    def __len__(self) -> int:
        return len(self._runs)
