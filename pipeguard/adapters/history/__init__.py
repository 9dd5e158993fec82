# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""Pipeline history store interface and adapters."""

from pipeguard.adapters.history.base import HistoryStore
from pipeguard.adapters.history.memory import InMemoryHistoryStore

__all__ = [
    "HistoryStore",
    "InMemoryHistoryStore",
]
