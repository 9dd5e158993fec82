# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

import asyncio
from typing import Optional

import structlog

from pipeguard.core.models.remediation import RemediationProposal

logger = structlog.get_logger(__name__)


class ConsentGate:
    """
    Holds remediation proposals until a human approves or declines them.

    At most one proposal is pending per pipeline id. The map is owned by
    this object and every access goes through its lock, so a proposal can
    be consumed exactly once even under concurrent consent calls.
    """

    def __init__(self):
        self._pending: dict[str, RemediationProposal] = {}
        self._lock = asyncio.Lock()

    async def propose(self, proposal: RemediationProposal) -> None:
        """
        Store a proposal, replacing any pending one for the same pipeline.

        Args:
            proposal: Proposal awaiting consent
        """
        pipeline_id = proposal.pipeline.id

        async with self._lock:
            replaced = pipeline_id in self._pending
            self._pending[pipeline_id] = proposal

        logger.info(
            "remediation_proposal_pending",
            pipeline_id=pipeline_id,
            replaced=replaced,
            action_count=len(proposal.actions),
        )

    async def consume(self, pipeline_id: str) -> Optional[RemediationProposal]:
        """
        Atomically remove and return the pending proposal.

        Args:
            pipeline_id: Pipeline identifier

        Returns:
            The proposal, or None if nothing was pending
        """
        async with self._lock:
            proposal = self._pending.pop(pipeline_id, None)

        if proposal is None:
            logger.debug("remediation_proposal_missing", pipeline_id=pipeline_id)
        return proposal

    async def peek(self, pipeline_id: str) -> Optional[RemediationProposal]:
        async with self._lock:
            return self._pending.get(pipeline_id)

    async def pending_ids(self) -> list[str]:
        async with self._lock:
            return list(self._pending.keys())

    async def clear(self) -> int:
        """ Drop every pending proposal, returning how many were dropped. """
        async with self._lock:
            count = len(self._pending)
            self._pending.clear()

        if count:
            logger.info("remediation_proposals_cleared", count=count)
        return count

    def __len__(self) -> int:
        return len(self._pending)
