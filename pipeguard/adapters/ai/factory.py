# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from typing import Optional

import structlog

from pipeguard.adapters.ai.base import NarrativeGenerator
from pipeguard.adapters.ai.client import HttpNarrativeGenerator
from pipeguard.adapters.ai.keyword import KeywordNarrativeGenerator
from pipeguard.core.config import Settings, get_settings

logger = structlog.get_logger(__name__)


def create_narrative_generator(settings: Optional[Settings] = None) -> Optional[NarrativeGenerator]:
    """
    Create the narrative generator selected by configuration.

    Returns None when narrative generation is disabled, the HTTP generator
    when an API key is configured, and the keyword generator otherwise.

    Args:
        settings: Application settings

    Returns:
        Narrative generator or None
    """
    settings = settings or get_settings()

    if not settings.features.enable_narrative_generation:
        return None

    if settings.narrative.api_key:
        return HttpNarrativeGenerator(settings=settings)

    logger.warning("narrative_api_key_missing", fallback="keyword")
    return KeywordNarrativeGenerator()
