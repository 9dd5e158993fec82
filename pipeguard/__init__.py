# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
PipeGuard

Classifies failed CI/CD pipeline runs, proposes remediation that only runs
with human consent, and analyzes pipeline history for cascade risk, flaky
tests, suspicious commits and deployment windows.
"""

__version__ = "0.1.0"
