"""Reduce a HAR log to the API requests worth matching against.

HTML page loads are dropped, HTTP/2 pseudo-headers are stripped, and
duplicate captures of the same request are collapsed so that the list handed
to the classifier is short and every index in it is meaningful.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from harmatch.exceptions import InvalidInputError
from harmatch.har.parser import (
    HAREntry,
    HARHeader,
    HARLog,
    HARPostData,
    parse_headers,
    parse_post_data,
)
from harmatch.logging import get_logger

LOG = get_logger(__name__)

# Managed by the HTTP/2 transport; curl builds its own.
HTTP2_PSEUDO_HEADERS: frozenset[str] = frozenset(
    {
        ":authority",
        ":method",
        ":path",
        ":scheme",
        ":status",
    }
)

HTML_MEDIA_TYPE = "text/html"


@dataclass(frozen=True)
class CandidateRequest:
    """API-relevant projection of a captured request.

    Candidates are keyed by ``(method, url)``; a reduced list never holds two
    candidates with the same key. ``status`` is the status of the response the
    request was captured with, when known.
    """

    method: str
    url: str
    headers: tuple[HARHeader, ...] = ()
    query_string: tuple[dict[str, Any], ...] | None = None
    post_data: HARPostData | None = None
    status: int | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.method, self.url)

    def to_dict(self) -> dict[str, Any]:
        """Render the candidate in HAR-style camelCase JSON form."""
        out: dict[str, Any] = {
            "method": self.method,
            "url": self.url,
            "headers": [h.to_dict() for h in self.headers],
        }
        if self.query_string:
            out["queryString"] = [dict(q) for q in self.query_string]
        if self.post_data is not None:
            out["postData"] = self.post_data.to_dict()
        if self.status is not None:
            out["status"] = self.status
        return out

    @classmethod
    def from_dict(cls, data: Any) -> CandidateRequest:
        """Build a candidate from its JSON form (as produced by ``to_dict``).

        Pseudo-headers present in the input are dropped.

        Raises:
            InvalidInputError: If ``data`` is not a well-formed candidate.
        """
        if not isinstance(data, dict):
            raise InvalidInputError("each entry must be an object")
        method = data.get("method")
        url = data.get("url")
        if not isinstance(method, str) or not method:
            raise InvalidInputError("entry.method must be a non-empty string")
        if not isinstance(url, str) or not url:
            raise InvalidInputError("entry.url must be a non-empty string")

        query_string = data.get("queryString")
        if query_string is not None and (
            not isinstance(query_string, list) or not all(isinstance(q, dict) for q in query_string)
        ):
            raise InvalidInputError("entry.queryString must be an array of objects")
        status = data.get("status")
        if status is not None and (isinstance(status, bool) or not isinstance(status, int)):
            raise InvalidInputError("entry.status must be an integer")

        try:
            headers = parse_headers(data.get("headers"))
            post_data = parse_post_data(data.get("postData"))
        except TypeError as exc:
            raise InvalidInputError(f"entry is malformed: {exc}") from exc

        return cls(
            method=method,
            url=url,
            headers=strip_pseudo_headers(headers),
            query_string=tuple(query_string) if query_string else None,
            post_data=post_data,
            status=status,
        )


def _media_type(content_type: str) -> str:
    return content_type.split(";")[0].strip().lower()


def is_html_response(entry: HAREntry) -> bool:
    """Return True if the response is an HTML document.

    ``response.content.mimeType`` decides when present; otherwise the first
    ``Content-Type`` response header (matched case-insensitively) is used.
    A response with neither is not HTML.
    """
    response = entry.response
    if response.content_mime_type:
        return _media_type(response.content_mime_type) == HTML_MEDIA_TYPE
    for header in response.headers:
        if header.name.lower() == "content-type":
            return _media_type(header.value) == HTML_MEDIA_TYPE
    return False


def strip_pseudo_headers(headers: Iterable[HARHeader]) -> tuple[HARHeader, ...]:
    """Drop HTTP/2 pseudo-headers, keeping the order of everything else."""
    return tuple(h for h in headers if h.name.lower() not in HTTP2_PSEUDO_HEADERS)


def to_candidate(entry: HAREntry) -> CandidateRequest:
    """Project a HAR entry onto a CandidateRequest."""
    request = entry.request
    return CandidateRequest(
        method=request.method,
        url=request.url,
        headers=strip_pseudo_headers(request.headers),
        query_string=tuple(request.query_string) if request.query_string else None,
        post_data=request.post_data,
        status=entry.response.status,
    )


def reduce_entries(entries: Sequence[HAREntry]) -> list[CandidateRequest]:
    """Filter out HTML responses, project, and dedupe by ``(method, url)``.

    The first capture of a request wins and capture order is preserved, so a
    position in the result is stable for a given input.
    """
    candidates: list[CandidateRequest] = []
    seen: set[tuple[str, str]] = set()
    html_count = 0
    duplicate_count = 0

    for entry in entries:
        if is_html_response(entry):
            html_count += 1
            continue
        candidate = to_candidate(entry)
        if candidate.key in seen:
            duplicate_count += 1
            continue
        seen.add(candidate.key)
        candidates.append(candidate)

    LOG.info(
        "har_reduced",
        entries=len(entries),
        candidates=len(candidates),
        html_skipped=html_count,
        duplicates_skipped=duplicate_count,
    )
    return candidates


def reduce_har(log: HARLog) -> list[CandidateRequest]:
    """Reduce a parsed HAR log to its candidate API requests."""
    return reduce_entries(log.entries)
