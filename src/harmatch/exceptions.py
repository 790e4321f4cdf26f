"""Custom exceptions for harmatch package.

Failures fall into two categories that are never conflated when reported:

- input errors (``InvalidInputError``): the HAR document, the candidate list,
  or the description supplied by the caller is unusable;
- service errors (``MatchServiceError``): the classifier oracle could not be
  used, either because it is not configured or because the call failed.

"Nothing matched" is not an error; it is a regular, empty result.
"""


class HarmatchError(Exception):
    """Base exception class for all harmatch errors."""


class InvalidInputError(HarmatchError):
    """Raised when caller-supplied input is malformed."""


class HARParseError(InvalidInputError):
    """Raised when a HAR document cannot be parsed."""


class MatchServiceError(HarmatchError):
    """Base class for failures of the matching service (the classifier oracle)."""


class OracleUnavailableError(MatchServiceError):
    """Raised when no classifier credential is configured.

    Fatal: retrying without changing configuration will not help.
    """


class OracleRequestError(MatchServiceError):
    """Raised when a classifier call itself fails (network or remote error).

    Retryable by the caller. harmatch never retries internally.
    """
