# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Backoff Utilities

Delay calculation shared by the remediation orchestrator.
"""

import random


def calculate_backoff(
    attempt: int,
    base_delay: float = 2.0,
    max_delay: float = 300.0,
    exponential: bool = True,
    jitter: bool = False,
) -> float:
    """
    Calculate retry delay with exponential backoff and optional jitter.

    With the defaults, attempt 0 waits 2s, attempt 1 waits 4s, attempt 2
    waits 8s.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds
        exponential: Use exponential backoff
        jitter: Add random jitter to prevent thundering herd

    Returns:
        Delay in seconds
    """
    if attempt < 0:
        raise ValueError("attempt must be >= 0")

    if exponential:
        delay = base_delay * (2 ** attempt)
    else:
        delay = base_delay * (attempt + 1)

    delay = min(delay, max_delay)

    if jitter:
        # 0.5x to 1.0x of delay
        delay = delay * (0.5 + random.random() * 0.5)

    return delay
