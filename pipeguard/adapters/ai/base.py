# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Narrative Generator Interface

Optional text generation used to phrase analysis results. Every caller keeps
a deterministic fallback, so a generator is never required.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class NarrativeGenerator(ABC):
    """
    Abstract base class for narrative text generators.

    Implementations raise NarrativeGenerationError on any failure.
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate narrative text for a prompt.

        Args:
            prompt: Prompt text

        Returns:
            Generated text

        Raises:
            NarrativeGenerationError: If generation fails
        """
        pass

    async def close(self) -> None:
        """ Release any held resources. """
        return None


async def generate_with_fallback(
    generator: Optional[NarrativeGenerator],
    prompt: str,
    fallback: str,
) -> str:
    """
    Generate text, falling back to a deterministic string on any failure.

    Args:
        generator: Narrative generator, or None to always use the fallback
        prompt: Prompt text
        fallback: Text returned when generation is unavailable or fails

    Returns:
        Generated or fallback text
    """
    if generator is None:
        return fallback

    try:
        text = await generator.generate(prompt)
    except Exception as e:
        logger.warning(
            "narrative_generation_fallback",
            generator=generator.__class__.__name__,
            error=str(e),
        )
        return fallback

    if not text or not text.strip():
        logger.warning(
            "narrative_generation_empty",
            generator=generator.__class__.__name__,
        )
        return fallback

    return text.strip()
