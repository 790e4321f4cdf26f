"""Two-phase matching of a feature description against candidate requests.

Phase 1 classifies every batch independently and yields at most one local
winner per batch. If more than one batch produced a winner, phase 2 asks the
classifier to arbitrate between those finalists. The winning candidate is
then rendered as curl locally.

Malformed classifier output never fails a match: an unreadable batch answer
counts as "no winner in this batch" and an unreadable arbitration answer
picks the first finalist. Exceptions raised by the classifier itself
(``OracleUnavailableError``, ``OracleRequestError``) are not caught here.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from harmatch.curl import to_curl
from harmatch.har.minimizer import MAX_POST_DATA_CHARS, minimize_all
from harmatch.har.reducer import CandidateRequest
from harmatch.logging import get_logger
from harmatch.match.batching import MAX_PAYLOAD_CHARS, Batch, plan_batches
from harmatch.match.oracle import Classifier, extract_json_object
from harmatch.match.prompts import (
    ARBITRATION_SYSTEM_PROMPT,
    MATCH_SYSTEM_PROMPT,
    NO_MATCH_INDEX,
    build_arbitration_message,
    build_match_message,
)

LOG = get_logger(__name__)

CONFIDENCE_TIERS = ("high", "medium", "low", "none")
NO_MATCH_BULLET = "No request matching the description was found."


@dataclass
class MatchOutcome:
    """What one classification call said about one batch.

    Attributes:
        index: Batch-local index of the selected request, or None when the
            answer held no usable index.
        no_match: True when the classifier explicitly answered "no match".
        confidence: One of ``CONFIDENCE_TIERS``, or None.
        bullets: Short justifications given by the classifier.
    """

    index: int | None = None
    no_match: bool = False
    confidence: str | None = None
    bullets: list[str] = field(default_factory=list)

    @property
    def usable(self) -> bool:
        return self.index is not None


@dataclass
class MatchResult:
    """Final answer of a match: the curl command and why it was chosen."""

    curl: str
    matched_index: int | None = None
    confidence: str | None = None
    explanation_bullets: list[str] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.matched_index is not None

    @classmethod
    def no_match(cls) -> MatchResult:
        return cls(curl="", explanation_bullets=[NO_MATCH_BULLET])

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"curl": self.curl}
        if self.matched_index is not None:
            out["matchedIndex"] = self.matched_index
        if self.confidence is not None:
            out["confidence"] = self.confidence
        if self.explanation_bullets:
            out["explanationBullets"] = list(self.explanation_bullets)
        return out


def _as_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def parse_match_response(raw: str, batch_size: int) -> MatchOutcome:
    """Parse a per-batch classifier answer.

    An index other than the no-match sentinel is clamped into
    ``[0, batch_size - 1]``; the sentinel itself is never clamped.
    """
    data = extract_json_object(raw)
    if data is None:
        return MatchOutcome()

    confidence = data.get("confidence")
    if confidence not in CONFIDENCE_TIERS:
        confidence = None
    bullets = data.get("explanationBullets")
    bullets = [b for b in bullets if isinstance(b, str)] if isinstance(bullets, list) else []

    index = _as_index(data.get("matchedIndex"))
    if index == NO_MATCH_INDEX:
        return MatchOutcome(no_match=True, confidence=confidence, bullets=bullets)
    if index is not None and batch_size > 0:
        index = min(max(index, 0), batch_size - 1)
    elif index is not None:
        index = None
    return MatchOutcome(index=index, confidence=confidence, bullets=bullets)


def parse_arbitration_response(raw: str, count: int) -> int:
    """Parse an arbitration answer; anything unusable selects finalist 0."""
    data = extract_json_object(raw)
    index = _as_index(data.get("matchedIndex")) if data is not None else None
    if index is None or not 0 <= index < count:
        LOG.warning("arbitration_answer_unusable", finalists=count)
        return 0
    return index


class MatchOrchestrator:
    """Drive batching, per-batch classification and arbitration.

    Args:
        classifier: The oracle to consult.
        max_payload_chars: Serialized payload budget per batch.
        max_post_data_chars: Post-data ceiling used when minimizing.
        max_workers: Batches classified concurrently; 1 classifies them in order.
    """

    def __init__(
        self,
        classifier: Classifier,
        *,
        max_payload_chars: int = MAX_PAYLOAD_CHARS,
        max_post_data_chars: int = MAX_POST_DATA_CHARS,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.classifier = classifier
        self.max_payload_chars = max_payload_chars
        self.max_post_data_chars = max_post_data_chars
        self.max_workers = max_workers

    def run(self, description: str, candidates: Sequence[CandidateRequest]) -> MatchResult:
        """Find the candidate that implements ``description`` and render it as curl."""
        if not candidates:
            LOG.info("match_skipped", reason="no_candidates")
            return MatchResult.no_match()

        minimized = minimize_all(candidates, max_post_data_chars=self.max_post_data_chars)
        batches = plan_batches(minimized, max_payload_chars=self.max_payload_chars)
        outcomes = self._classify_batches(description, batches)

        winners = [(batch, outcome) for batch, outcome in zip(batches, outcomes, strict=True) if outcome.usable]
        LOG.info("match_phase1_complete", batches=len(batches), winners=len(winners))

        if not winners:
            return MatchResult.no_match()
        if len(winners) == 1:
            batch, outcome = winners[0]
        else:
            batch, outcome = self._arbitrate(description, candidates, winners)

        assert outcome.index is not None
        global_index = batch.to_global(outcome.index)
        LOG.info("match_complete", matched_index=global_index, confidence=outcome.confidence)
        return MatchResult(
            curl=to_curl(candidates[global_index]),
            matched_index=global_index,
            confidence=outcome.confidence if outcome.confidence != "none" else None,
            explanation_bullets=list(outcome.bullets),
        )

    def _classify_batch(self, description: str, batch: Batch) -> MatchOutcome:
        message = build_match_message(description, batch.payload)
        raw = self.classifier.classify(MATCH_SYSTEM_PROMPT, message)
        outcome = parse_match_response(raw, batch.size)
        LOG.debug(
            "batch_classified",
            start=batch.start,
            end=batch.end,
            local_index=outcome.index,
            no_match=outcome.no_match,
        )
        return outcome

    def _classify_batches(self, description: str, batches: list[Batch]) -> list[MatchOutcome]:
        """Classify every batch; results are returned in batch order."""
        if self.max_workers == 1 or len(batches) == 1:
            return [self._classify_batch(description, batch) for batch in batches]

        pool = ThreadPoolExecutor(max_workers=min(self.max_workers, len(batches)))
        try:
            futures = [pool.submit(self._classify_batch, description, batch) for batch in batches]
            return [future.result() for future in futures]
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    def _arbitrate(
        self,
        description: str,
        candidates: Sequence[CandidateRequest],
        winners: list[tuple[Batch, MatchOutcome]],
    ) -> tuple[Batch, MatchOutcome]:
        finalists: list[dict[str, Any]] = []
        for position, (batch, outcome) in enumerate(winners):
            assert outcome.index is not None
            candidate = candidates[batch.to_global(outcome.index)]
            finalists.append(
                {
                    "index": position,
                    "method": candidate.method,
                    "url": candidate.url,
                    "explanationBullets": outcome.bullets,
                }
            )

        raw = self.classifier.classify(ARBITRATION_SYSTEM_PROMPT, build_arbitration_message(description, finalists))
        choice = parse_arbitration_response(raw, len(finalists))
        LOG.info("match_arbitrated", finalists=len(finalists), chosen=choice)
        return winners[choice]
