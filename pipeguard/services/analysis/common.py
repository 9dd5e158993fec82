# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from collections import defaultdict
from typing import Callable, Hashable, Iterable, TypeVar

from pipeguard.core.models.pipeline import PipelineRun

K = TypeVar("K", bound=Hashable)


def start_key(run: PipelineRun) -> tuple:
    """
    Sort key ordering runs by start time.

    Runs without a start time sort before every timestamped run, as if they
    started at the epoch.
    """
    if run.started_at is None:
        return (0, 0)
    return (1, run.started_at)


def sort_by_start(runs: Iterable[PipelineRun]) -> list[PipelineRun]:
    """ Stable sort of runs by start time. """
    return sorted(runs, key=start_key)


def group_runs(
    runs: Iterable[PipelineRun],
    key: Callable[[PipelineRun], K],
) -> dict[K, list[PipelineRun]]:
    """
    Group runs preserving first-seen key order.

    Args:
        runs: Runs to group
        key: Grouping key function

    Returns:
        Mapping of key to runs
    """
    groups: dict[K, list[PipelineRun]] = defaultdict(list)
    for run in runs:
        groups[key(run)].append(run)
    return dict(groups)
