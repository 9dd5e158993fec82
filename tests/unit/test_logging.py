# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

import structlog

from pipeguard.core.config import Settings
from pipeguard.core.enums import Environment
from pipeguard.utils.logging import configure_logging, get_logger


class TestLogging:

    def teardown_method(self):
        structlog.reset_defaults()

    def test_console_renderer_outside_production(self):
        configure_logging(Settings(environment=Environment.DEVELOPMENT))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_json_renderer_in_production(self):
        configure_logging(Settings(environment=Environment.PRODUCTION))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_get_logger_binds_name(self):
        logger = get_logger("pipeguard.test").bind(pipeline_id="p1")

        assert logger is not None
