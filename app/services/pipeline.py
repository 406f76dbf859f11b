"""Extraction pipeline.

Runs the classified strategies one after another and stops at the first
outcome that clears the acceptance threshold. Nothing is shared between
runs, so one pipeline instance can serve concurrent requests.
"""
from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional, Sequence, Union

from app.models import (
    ExtractionFailure,
    ExtractionResult,
    FailureKind,
    FileRecord,
    StrategyId,
    StrategyOutcome,
)
from app.services.classifier import classify
from app.services.strategies import ExtractionStrategy, build_strategies
from app.utils.config import ExtractionSettings

logger = logging.getLogger(__name__)

NO_READABLE_TEXT = "No readable text found (file may be image-only). Please upload a text-based PDF or DOCX."
TIMED_OUT = "Extraction timed out"

Outcome = Union[ExtractionResult, ExtractionFailure]


class ExtractionPipeline:
    def __init__(
        self,
        settings: Optional[ExtractionSettings] = None,
        strategies: Optional[Dict[StrategyId, ExtractionStrategy]] = None,
        clock=time.monotonic,
    ):
        self.settings = settings or ExtractionSettings()
        self.strategies = strategies if strategies is not None else build_strategies(self.settings)
        self.clock = clock

    def _attempt(self, strategy_id: StrategyId, record: FileRecord) -> StrategyOutcome:
        strategy = self.strategies.get(strategy_id)
        if strategy is None:
            return StrategyOutcome.failure(strategy_id, "strategy not available")
        try:
            outcome = strategy.attempt(record)
        except Exception as e:
            outcome = StrategyOutcome.failure(strategy_id, f"{type(e).__name__}: {e}")
        if outcome.succeeded and not self.settings.accepts(outcome.text):
            got = len((outcome.text or "").strip())
            outcome = StrategyOutcome.failure(
                strategy_id,
                f"only {got} characters extracted (minimum {self.settings.min_chars})",
            )
        return outcome

    def _expired(self, started: float) -> bool:
        budget = self.settings.timeout_seconds
        return bool(budget) and self.clock() - started >= budget

    def _timed_out(self, record: FileRecord, outcomes: List[StrategyOutcome]) -> ExtractionFailure:
        logger.error("Extraction of %s timed out after %d attempt(s)", record.name, len(outcomes))
        return ExtractionFailure(FailureKind.TIMEOUT, TIMED_OUT, tuple(outcomes))

    def run(self, record: FileRecord, order: Optional[Sequence[StrategyId]] = None) -> Outcome:
        """Extract text from the record, trying strategies in the given order.

        When no order is given the record is classified first.
        """
        if order is None:
            order = classify(record)
        started = self.clock()
        outcomes: List[StrategyOutcome] = []

        for strategy_id in order:
            if self._expired(started):
                return self._timed_out(record, outcomes)

            outcome = self._attempt(strategy_id, record)
            outcomes.append(outcome)
            if outcome.succeeded:
                logger.info("Extracted %d chars from %s via %s", len(outcome.text), record.name, strategy_id.value)
                return ExtractionResult(outcome.text, strategy_id, tuple(outcomes))
            logger.warning("%s failed for %s: %s", strategy_id.value, record.name, outcome.failure_reason)

        # An overrun inside the last attempt still counts as a timeout
        if self._expired(started):
            return self._timed_out(record, outcomes)

        logger.error("No readable text in %s after %d attempt(s)", record.name, len(outcomes))
        return ExtractionFailure(FailureKind.NO_READABLE_TEXT, NO_READABLE_TEXT, tuple(outcomes))
