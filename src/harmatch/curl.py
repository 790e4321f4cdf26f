"""Render a candidate request as a curl command.

Rendering is local and deterministic: the same candidate always yields the
same command, whatever the classifier said about it.
"""

from __future__ import annotations

import shlex

from harmatch.har.reducer import CandidateRequest, strip_pseudo_headers


def to_curl(candidate: CandidateRequest) -> str:
    """Build a single-line, shell-quoted curl command for ``candidate``.

    The URL is used verbatim (it already carries the query string). Every
    header becomes one ``-H`` flag in capture order. When the request has a
    post-data text it is sent with ``--data-raw``, and the post-data mime type
    is added as ``Content-Type`` if no such header was captured.
    """
    parts = ["curl", "-X", shlex.quote(candidate.method), shlex.quote(candidate.url)]

    headers = strip_pseudo_headers(candidate.headers)
    for header in headers:
        parts += ["-H", shlex.quote(f"{header.name}: {header.value}")]

    post_data = candidate.post_data
    if post_data is not None and post_data.text is not None:
        has_content_type = any(h.name.lower() == "content-type" for h in headers)
        if post_data.mime_type and not has_content_type:
            parts += ["-H", shlex.quote(f"Content-Type: {post_data.mime_type}")]
        parts += ["--data-raw", shlex.quote(post_data.text)]

    return " ".join(parts)
