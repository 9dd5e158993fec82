# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from pipeguard.adapters.ai.base import NarrativeGenerator, generate_with_fallback
from pipeguard.adapters.ai.client import HttpNarrativeGenerator
from pipeguard.adapters.ai.keyword import KeywordNarrativeGenerator
from pipeguard.adapters.ai.factory import create_narrative_generator

__all__ = [
    "NarrativeGenerator",
    "generate_with_fallback",
    "HttpNarrativeGenerator",
    "KeywordNarrativeGenerator",
    "create_narrative_generator",
]
