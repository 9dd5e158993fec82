# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

import pytest

from pipeguard.utils.retry import calculate_backoff


class TestCalculateBackoff:

    def test_exponential_defaults(self):
        assert [calculate_backoff(i) for i in range(3)] == [2.0, 4.0, 8.0]

    def test_linear(self):
        assert calculate_backoff(2, base_delay=3.0, exponential=False) == 9.0

    def test_capped_at_max_delay(self):
        assert calculate_backoff(10, max_delay=60.0) == 60.0

    def test_jitter_stays_within_half_to_full_delay(self):
        for _ in range(20):
            delay = calculate_backoff(1, jitter=True)
            assert 2.0 <= delay <= 4.0

    def test_negative_attempt_rejected(self):
        with pytest.raises(ValueError):
            calculate_backoff(-1)
