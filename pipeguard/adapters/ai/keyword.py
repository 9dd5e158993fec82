# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from typing import Optional

import structlog

from pipeguard.adapters.ai.base import NarrativeGenerator

logger = structlog.get_logger(__name__)

# Checked in order, first keyword found in the prompt wins
KEYWORD_RESPONSES: list[tuple[str, str]] = [
    (
        "build",
        "Recent builds were reviewed; check the failure breakdown for the "
        "runs that need attention.",
    ),
    (
        "fail",
        "The recent failures appear to be related to test timeouts and "
        "dependency issues.",
    ),
    (
        "risk",
        "Recent code changes raise the deployment risk; review the flagged "
        "pipelines before deploying.",
    ),
    (
        "performance",
        "Pipeline durations are within their usual range; look at the slowest "
        "stages first when tuning performance.",
    ),
    (
        "optimize",
        "Caching dependencies and running independent jobs in parallel are the "
        "quickest ways to optimize pipeline time.",
    ),
]

DEFAULT_RESPONSE = "I can help you monitor your CI/CD pipelines and predict failures."


class KeywordNarrativeGenerator(NarrativeGenerator):
    """
    Deterministic generator that answers from a fixed keyword table.

    Used when no text generation service is configured.
    """

    def __init__(
        self,
        responses: Optional[list[tuple[str, str]]] = None,
        default: str = DEFAULT_RESPONSE,
    ):
        self.responses = responses if responses is not None else KEYWORD_RESPONSES
        self.default = default

    async def generate(self, prompt: str) -> str:
        lowered = (prompt or "").lower()

        for keyword, response in self.responses:
            if keyword in lowered:
                logger.debug("keyword_narrative_match", keyword=keyword)
                return response

        return self.default
