"""Parse and match entry points.

Parsing and matching are separate calls: a HAR document is parsed once and
its candidate list can then be matched against any number of descriptions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from harmatch.config import HarmatchSettings, get_settings
from harmatch.exceptions import InvalidInputError
from harmatch.har.parser import ParseError, parse_har_data
from harmatch.har.reducer import CandidateRequest, reduce_har
from harmatch.logging import get_logger
from harmatch.match.oracle import Classifier, classifier_from_settings
from harmatch.match.orchestrator import MatchOrchestrator, MatchResult

LOG = get_logger(__name__)


@dataclass
class ParseHarResult:
    """Candidates extracted from one HAR document."""

    entries: list[CandidateRequest]
    errors: list[ParseError] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "entries": [e.to_dict() for e in self.entries]}


def parse_har(data: Any) -> ParseHarResult:
    """Parse a decoded HAR document into its candidate requests.

    Raises:
        HARParseError: If the document is not a HAR log with an entries array.
    """
    result = parse_har_data(data)
    return ParseHarResult(entries=reduce_har(result.log), errors=result.errors)


def load_candidates(entries: Any) -> list[CandidateRequest]:
    """Accept candidates as CandidateRequest objects or their JSON form.

    Raises:
        InvalidInputError: If ``entries`` is not a list of candidates.
    """
    if not isinstance(entries, list | tuple):
        raise InvalidInputError("entries must be an array of request summaries")
    return [e if isinstance(e, CandidateRequest) else CandidateRequest.from_dict(e) for e in entries]


def match_request(
    description: Any,
    entries: Sequence[CandidateRequest] | Sequence[dict[str, Any]],
    classifier: Classifier | None = None,
    settings: HarmatchSettings | None = None,
) -> MatchResult:
    """Find the request in ``entries`` that implements ``description``.

    Args:
        description: What the wanted request does, in plain language.
        entries: Candidates from a previous ``parse_har`` call, as objects or dicts.
        classifier: Oracle to use; defaults to the OpenAI classifier from settings.
        settings: Settings override; defaults to the global settings.

    Returns:
        The match result. "No match" is a result, not an exception.

    Raises:
        InvalidInputError: If the description or the entries are malformed.
        OracleUnavailableError: If no classifier is configured.
        OracleRequestError: If a classifier call fails.
    """
    if not isinstance(description, str) or not description.strip():
        raise InvalidInputError("description is required and must be a non-empty string")
    candidates = load_candidates(entries)
    settings = settings or get_settings()

    if not candidates:
        return MatchResult.no_match()

    if classifier is None:
        classifier = classifier_from_settings(settings)

    orchestrator = MatchOrchestrator(
        classifier,
        max_payload_chars=settings.max_payload_chars,
        max_post_data_chars=settings.max_post_data_chars,
        max_workers=settings.max_workers,
    )
    LOG.info("match_requested", candidates=len(candidates), description_chars=len(description))
    return orchestrator.run(description.strip(), candidates)
