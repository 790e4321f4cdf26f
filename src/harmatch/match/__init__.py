"""Batching, classification and arbitration of candidate requests."""

from harmatch.match.batching import MAX_PAYLOAD_CHARS, Batch, plan_batches, serialize_payload
from harmatch.match.oracle import Classifier, OpenAIClassifier, classifier_from_settings, extract_json_object
from harmatch.match.orchestrator import (
    MatchOrchestrator,
    MatchOutcome,
    MatchResult,
    parse_arbitration_response,
    parse_match_response,
)

__all__ = [
    # Batching
    "MAX_PAYLOAD_CHARS",
    "Batch",
    "plan_batches",
    "serialize_payload",
    # Oracle
    "Classifier",
    "OpenAIClassifier",
    "classifier_from_settings",
    "extract_json_object",
    # Orchestration
    "MatchOrchestrator",
    "MatchOutcome",
    "MatchResult",
    "parse_arbitration_response",
    "parse_match_response",
]
