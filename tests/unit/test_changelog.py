# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""Unit tests for the changelog correlation analyzer."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from pipeguard.adapters.ai.keyword import KEYWORD_RESPONSES, KeywordNarrativeGenerator
from pipeguard.adapters.history import InMemoryHistoryStore
from pipeguard.core.enums import BuildStatus
from pipeguard.exceptions import NarrativeGenerationError
from pipeguard.services.analysis.changelog import ChangelogAnalyzer


class TestChangelogAnalyzer:
    """Test suite for ChangelogAnalyzer."""

    @pytest.fixture
    def analyzer(self) -> ChangelogAnalyzer:
        return ChangelogAnalyzer()

    @pytest.fixture
    def pipeline(self, make_run):
        return make_run(id="p1")

    @pytest.fixture
    def risky_commit(self, make_commit, base_time):
        """Fixture for a large, recent work-in-progress refactor."""
        return make_commit(
            sha="deadbeef0001",
            message="WIP refactor",
            author="alice",
            timestamp=base_time - timedelta(minutes=30),
            files=("src/core.py", "src/api.py", "src/db.py"),
            files_changed=50,
        )

    @pytest.fixture
    def benign_commit(self, make_commit):
        return make_commit(sha="cafebabe0002", message="fix typo")

    @pytest.mark.asyncio
    async def test_no_commits(self, analyzer, pipeline):
        """Test an empty commit list yields a zero-confidence analysis."""
        result = await analyzer.analyze(pipeline, [])

        assert result.analysis == "No commits to analyze"
        assert result.recommendation == "Check if commit data is available"
        assert result.confidence == 0.0
        assert result.root_cause_commit is None
        assert result.suspicious_commits == []

    @pytest.mark.asyncio
    async def test_risky_commit_ranks_first(self, analyzer, pipeline, risky_commit, benign_commit):
        """Test the large WIP refactor is picked as root cause."""
        result = await analyzer.analyze(pipeline, [benign_commit, risky_commit])

        assert result.root_cause_commit is not None
        assert result.root_cause_commit.commit is risky_commit
        assert [s.commit for s in result.suspicious_commits] == [risky_commit]
        assert result.root_cause_commit.suspicion_score == 85.0
        assert result.confidence == pytest.approx((0.85 + 0.6) / 2)
        assert "Most likely cause:" in result.analysis
        assert "Commit: WIP refactor" in result.analysis
        assert "1. Review commit: deadbee" in result.recommendation
        assert "src/core.py, src/api.py, src/db.py" in result.recommendation

    def test_score_reasons(self, analyzer, pipeline, risky_commit):
        """Test reasons cover large commits and risky message markers."""
        score, reasons = analyzer.score_commit(risky_commit, pipeline)

        assert score == 85.0
        assert reasons == [
            "Large commit (50 files changed)",
            "Work in progress commit",
            "Code refactoring",
        ]

    def test_fix_and_typo_lower_score_without_reasons(self, analyzer, pipeline, benign_commit):
        """Test negative factors reduce the score and clamp at zero."""
        score, reasons = analyzer.score_commit(benign_commit, pipeline)

        assert score == 0.0
        assert reasons == []

    def test_config_and_dependency_files(self, analyzer, pipeline, make_commit):
        """Test configuration and dependency changes are scored."""
        commit = make_commit(files=("deploy/app.yaml", "package.json"))

        score, reasons = analyzer.score_commit(commit, pipeline)

        assert score == 35.0
        assert reasons == ["Configuration file changes", "Dependency updates"]

    def test_score_only_factors_add_no_reasons(self, analyzer, pipeline, make_commit, base_time):
        """Test recency, experimental and the wider file sets move only the score."""
        commit = make_commit(
            message="experimental cache",
            timestamp=base_time - timedelta(minutes=5),
            files=("conf/app.properties", "requirements.txt"),
        )

        score, reasons = analyzer.score_commit(commit, pipeline)

        assert score == 85.0
        assert reasons == []

    @pytest.mark.asyncio
    async def test_confidence_counts_only_reported_reasons(self, analyzer, pipeline, make_commit, base_time):
        commit = make_commit(
            message="WIP refactor",
            timestamp=base_time - timedelta(minutes=30),
            files_changed=50,
        )

        result = await analyzer.analyze(pipeline, [commit])

        assert len(result.root_cause_commit.reasons) == 3
        assert result.confidence == pytest.approx(0.725)

    def test_large_diff(self, analyzer, pipeline, make_commit):
        commit = make_commit(lines_added=400, lines_deleted=150)

        score, reasons = analyzer.score_commit(commit, pipeline)

        assert score == 15.0
        assert reasons == ["Significant code changes (+400 / -150)"]

    def test_recency_uses_whole_hours(self, analyzer, pipeline, make_commit, base_time):
        """Test elapsed hours are truncated before comparing."""
        commit = make_commit(timestamp=base_time - timedelta(hours=23, minutes=59))

        score, reasons = analyzer.score_commit(commit, pipeline)

        assert score == 15.0
        assert reasons == []

    def test_naive_start_time_is_read_as_utc(self, analyzer, make_run, make_commit, base_time):
        """Test a naive run start compares against an aware commit time."""
        pipeline = make_run(started_at=base_time.replace(tzinfo=None))
        commit = make_commit(timestamp=base_time - timedelta(minutes=10))

        score, _ = analyzer.score_commit(commit, pipeline)

        assert pipeline.started_at == base_time
        assert score == 30.0

    def test_recency_skipped_without_start_time(self, analyzer, make_run, make_commit, base_time):
        """Test an unstarted pipeline contributes no recency factor."""
        pipeline = make_run(started_at=None)
        commit = make_commit(timestamp=base_time - timedelta(minutes=5))

        assert analyzer.score_commit(commit, pipeline) == (0.0, [])

    def test_threshold_is_inclusive(self, analyzer, pipeline, make_commit, base_time):
        """Test a commit scoring exactly 30 is suspicious."""
        commit = make_commit(timestamp=base_time - timedelta(minutes=10))

        suspicious = analyzer.find_suspicious([commit], pipeline)

        assert len(suspicious) == 1
        assert suspicious[0].suspicion_score == 30.0

    def test_ties_keep_input_order(self, analyzer, pipeline, make_commit, base_time):
        first = make_commit(sha="aaaaaaa1", timestamp=base_time - timedelta(minutes=10))
        second = make_commit(sha="bbbbbbb2", timestamp=base_time - timedelta(minutes=20))

        suspicious = analyzer.find_suspicious([first, second], pipeline)

        assert [s.commit.sha for s in suspicious] == ["aaaaaaa1", "bbbbbbb2"]

    @pytest.mark.asyncio
    async def test_no_suspicious_commits(self, analyzer, pipeline, benign_commit):
        result = await analyzer.analyze(pipeline, [benign_commit])

        assert result.confidence == 0.0
        assert result.analysis.startswith("No suspicious commits identified")
        assert result.recommendation.startswith("Review recent changes")

    @pytest.mark.asyncio
    async def test_narrative_replaces_analysis_only(self, pipeline, risky_commit):
        """Test a narrative generator rephrases text but not the ranking."""
        analyzer = ChangelogAnalyzer(narrative=KeywordNarrativeGenerator())

        result = await analyzer.analyze(pipeline, [risky_commit])

        assert result.analysis == dict(KEYWORD_RESPONSES)["build"]
        assert result.root_cause_commit.suspicion_score == 85.0

    @pytest.mark.asyncio
    async def test_narrative_failure_falls_back_to_template(self, pipeline, risky_commit):
        """Test a failing generator never fails the analysis."""
        narrative = AsyncMock()
        narrative.generate.side_effect = NarrativeGenerationError("timeout", status_code=504)
        analyzer = ChangelogAnalyzer(narrative=narrative)

        result = await analyzer.analyze(pipeline, [risky_commit])

        assert result.analysis.startswith("Most likely cause:")
        narrative.generate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_similar_failures_counted_and_capped(self, pipeline, make_run, risky_commit):
        """Test similar failures match repository and branch and cap at five."""
        runs = [pipeline]
        runs += [make_run(id=f"f{i}") for i in range(7)]
        runs += [
            make_run(id="other-branch", branch="develop"),
            make_run(id="passing", status=BuildStatus.SUCCESS),
        ]
        analyzer = ChangelogAnalyzer(history_store=InMemoryHistoryStore(runs=runs))

        result = await analyzer.analyze(pipeline, [risky_commit])

        assert result.similar_failures == 5

    @pytest.mark.asyncio
    async def test_history_errors_do_not_fail_analysis(self, pipeline, risky_commit):
        store = AsyncMock()
        store.list_all.side_effect = RuntimeError("store offline")
        analyzer = ChangelogAnalyzer(history_store=store)

        result = await analyzer.analyze(pipeline, [risky_commit])

        assert result.similar_failures == 0
