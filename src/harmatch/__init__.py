"""harmatch - find the request behind a feature in a HAR capture.

This package provides:
- HAR parsing and reduction to deduplicated candidate API requests
- Token-frugal minimization and payload-bounded batching for classifier prompts
- Two-phase matching (per-batch, then arbitration) against a classifier oracle
- Deterministic curl rendering of the winning request

Example:
    >>> import json
    >>> from harmatch import match_request, parse_har
    >>> parsed = parse_har(json.load(open("capture.har")))
    >>> result = match_request("add item to cart", parsed.entries)
    >>> print(result.curl)
"""

from harmatch.config import HarmatchSettings, get_settings
from harmatch.curl import to_curl
from harmatch.exceptions import (
    HARParseError,
    HarmatchError,
    InvalidInputError,
    MatchServiceError,
    OracleRequestError,
    OracleUnavailableError,
)
from harmatch.har import CandidateRequest, MinimalCandidate, minimize, reduce_har
from harmatch.match import Classifier, MatchOrchestrator, MatchResult, OpenAIClassifier, plan_batches
from harmatch.service import ParseHarResult, match_request, parse_har

__version__ = "0.3.0"

__all__ = [
    # Version
    "__version__",
    # Entry points
    "parse_har",
    "match_request",
    "ParseHarResult",
    # Pipeline
    "CandidateRequest",
    "MinimalCandidate",
    "reduce_har",
    "minimize",
    "plan_batches",
    "MatchOrchestrator",
    "MatchResult",
    "to_curl",
    # Oracle
    "Classifier",
    "OpenAIClassifier",
    # Configuration
    "HarmatchSettings",
    "get_settings",
    # Exceptions
    "HarmatchError",
    "InvalidInputError",
    "HARParseError",
    "MatchServiceError",
    "OracleUnavailableError",
    "OracleRequestError",
]
