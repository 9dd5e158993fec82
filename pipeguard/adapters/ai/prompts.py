# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from typing import Sequence

from pipeguard.core.models.pipeline import Commit, PipelineRun

# System prompt for narrative generation
SYSTEM_PROMPT = """You are an expert DevOps engineer reviewing CI/CD pipeline failures.
Answer briefly and concretely. Do not invent commits, files or numbers that are not in the prompt."""

# Changelog analysis prompt template
CHANGELOG_ANALYSIS_PROMPT = """Analyze this build failure:
Repository: {repository}
Branch: {branch}
Status: {status}

Recent commits:
{commit_lines}

Provide a brief analysis of what might have caused the failure."""

MAX_PROMPT_COMMITS = 5


def format_commit_line(commit: Commit) -> str:
    """
    Format a single commit for a prompt.

    Args:
        commit: Commit to format

    Returns:
        One prompt line
    """
    return f"- {commit.message} by {commit.author} ({commit.files_changed} files)"


def build_changelog_analysis_prompt(
    pipeline: PipelineRun,
    commits: Sequence[Commit],
) -> str:
    """
    Build the changelog analysis prompt.

    Only the first few commits are included.

    Args:
        pipeline: Failed pipeline run
        commits: Candidate commits

    Returns:
        Formatted prompt
    """
    commit_lines = "\n".join(
        format_commit_line(commit) for commit in list(commits)[:MAX_PROMPT_COMMITS]
    )

    return CHANGELOG_ANALYSIS_PROMPT.format(
        repository=pipeline.repository_name,
        branch=pipeline.branch,
        status=pipeline.status.value,
        commit_lines=commit_lines or "- (none)",
    )
