"""Shared builders and stubs for unit tests."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from typing import Any

import pytest

from harmatch.har.parser import HARHeader, HARPostData
from harmatch.har.reducer import CandidateRequest


def build_har_entry(
    url: str = "https://api.example.com/items",
    method: str = "GET",
    *,
    status: int = 200,
    request_headers: list[dict[str, str]] | None = None,
    response_headers: list[dict[str, str]] | None = None,
    mime_type: str | None = "application/json",
    query_string: list[dict[str, str]] | None = None,
    post_data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build one HAR entry in its raw JSON form."""
    request: dict[str, Any] = {
        "method": method,
        "url": url,
        "headers": request_headers if request_headers is not None else [],
        "queryString": query_string if query_string is not None else [],
    }
    if post_data is not None:
        request["postData"] = post_data
    content: dict[str, Any] = {}
    if mime_type is not None:
        content["mimeType"] = mime_type
    return {
        "request": request,
        "response": {
            "status": status,
            "headers": response_headers if response_headers is not None else [],
            "content": content,
        },
    }


class StubClassifier:
    """Deterministic classifier that replays canned answers and records every call.

    ``answers`` is either a list consumed in call order or a function of
    ``(system_prompt, user_message)``. An answer that is an exception is raised.
    """

    def __init__(self, answers: list[Any] | Callable[[str, str], Any]) -> None:
        self._answers = answers
        self._lock = threading.Lock()
        self.calls: list[tuple[str, str]] = []

    def classify(self, system_prompt: str, user_message: str) -> str:
        with self._lock:
            self.calls.append((system_prompt, user_message))
            if callable(self._answers):
                answer = self._answers(system_prompt, user_message)
            else:
                answer = self._answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        if isinstance(answer, dict):
            return json.dumps(answer)
        return answer


@pytest.fixture
def har_entry() -> Callable[..., dict[str, Any]]:
    """Factory for raw HAR entries."""
    return build_har_entry


@pytest.fixture
def har_doc() -> Callable[..., dict[str, Any]]:
    """Factory wrapping raw entries into a HAR document."""

    def _make(*entries: dict[str, Any]) -> dict[str, Any]:
        return {"log": {"version": "1.2", "entries": list(entries)}}

    return _make


@pytest.fixture
def make_candidate() -> Callable[..., CandidateRequest]:
    """Factory for CandidateRequest objects."""

    def _make(
        url: str = "https://api.example.com/items",
        method: str = "GET",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        body: str | None = None,
        mime_type: str | None = None,
        status: int | None = 200,
    ) -> CandidateRequest:
        pairs = list(headers.items()) if isinstance(headers, dict) else list(headers or [])
        post_data = HARPostData(mime_type=mime_type, text=body) if body is not None else None
        return CandidateRequest(
            method=method,
            url=url,
            headers=tuple(HARHeader(name=n, value=v) for n, v in pairs),
            post_data=post_data,
            status=status,
        )

    return _make


@pytest.fixture
def stub_classifier() -> Callable[..., StubClassifier]:
    """Factory for StubClassifier instances."""

    def _make(*answers: Any) -> StubClassifier:
        if len(answers) == 1 and callable(answers[0]) and not isinstance(answers[0], BaseException):
            return StubClassifier(answers[0])
        return StubClassifier(list(answers))

    return _make
