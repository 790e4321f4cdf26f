"""Token-frugal views of candidate requests for classifier prompts."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from harmatch.har.reducer import CandidateRequest

MAX_POST_DATA_CHARS = 4096
TRUNCATION_MARKER = "..."

# Negotiation, client-hint and fetch-metadata headers that say nothing about
# which feature a request implements.
NOISE_HEADERS: frozenset[str] = frozenset(
    {
        "accept-encoding",
        "accept-language",
        "cache-control",
        "dnt",
        "pragma",
        "priority",
        "sec-ch-ua",
        "sec-ch-ua-mobile",
        "sec-ch-ua-platform",
        "sec-fetch-dest",
        "sec-fetch-mode",
        "sec-fetch-site",
        "content-length",
    }
)


@dataclass
class MinimalCandidate:
    """Lossy projection of a CandidateRequest.

    Only meaningful next to the candidate list it was derived from: position
    ``i`` in a minimized list describes candidate ``i``.
    """

    method: str
    url: str
    headers: dict[str, str]
    post_data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"method": self.method, "url": self.url, "headers": self.headers}
        if self.post_data is not None:
            out["postData"] = self.post_data
        return out


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` so that, marker included, it is at most ``limit`` characters."""
    if len(text) <= limit:
        return text
    keep = max(limit - len(TRUNCATION_MARKER), 0)
    return (text[:keep] + TRUNCATION_MARKER)[:limit]


def minimize(candidate: CandidateRequest, max_post_data_chars: int = MAX_POST_DATA_CHARS) -> MinimalCandidate:
    """Reduce a candidate to what the classifier needs to recognise it.

    The query string is dropped (the URL carries it), noise headers are
    removed and the rest collapsed into a name -> value mapping (last one
    wins), and post-data is cut down to its mime type and a bounded text.
    """
    headers: dict[str, str] = {}
    for header in candidate.headers:
        if header.name.lower() in NOISE_HEADERS:
            continue
        headers[header.name] = header.value

    post_data = None
    if candidate.post_data is not None and candidate.post_data.text is not None:
        post_data = {"text": truncate_text(candidate.post_data.text, max_post_data_chars)}
        if candidate.post_data.mime_type is not None:
            post_data = {"mimeType": candidate.post_data.mime_type, **post_data}

    return MinimalCandidate(method=candidate.method, url=candidate.url, headers=headers, post_data=post_data)


def minimize_all(
    candidates: Sequence[CandidateRequest], max_post_data_chars: int = MAX_POST_DATA_CHARS
) -> list[MinimalCandidate]:
    """Minimize every candidate, keeping positions aligned with the input."""
    return [minimize(c, max_post_data_chars=max_post_data_chars) for c in candidates]
