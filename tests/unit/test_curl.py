"""Tests for curl rendering."""

from __future__ import annotations

import shlex

from harmatch.curl import to_curl
from harmatch.har.parser import HARHeader, HARPostData
from harmatch.har.reducer import CandidateRequest


class TestToCurl:
    """Tests for to_curl."""

    def test_simple_get(self, make_candidate) -> None:
        assert to_curl(make_candidate(url="https://api.x.com/users")) == "curl -X GET https://api.x.com/users"

    def test_url_with_query_quoted(self, make_candidate) -> None:
        command = to_curl(make_candidate(url="https://api.x.com/s?q=lamp&page=1"))
        assert command == "curl -X GET 'https://api.x.com/s?q=lamp&page=1'"

    def test_one_flag_per_header_in_order(self, make_candidate) -> None:
        candidate = make_candidate(headers=[("Accept", "*/*"), ("Cookie", "a=1"), ("Cookie", "b=2")])

        argv = shlex.split(to_curl(candidate))

        assert argv[4:] == ["-H", "Accept: */*", "-H", "Cookie: a=1", "-H", "Cookie: b=2"]

    def test_pseudo_headers_never_rendered(self) -> None:
        candidate = CandidateRequest(
            method="GET",
            url="https://api.x.com/",
            headers=(HARHeader(":authority", "api.x.com"), HARHeader("Accept", "*/*")),
        )
        assert ":authority" not in to_curl(candidate)

    def test_body_with_existing_content_type(self, make_candidate) -> None:
        candidate = make_candidate(
            method="POST",
            url="https://api.x.com/cart",
            headers={"content-type": "application/json"},
            body='{"id": "it\'s"}',
            mime_type="application/json",
        )

        argv = shlex.split(to_curl(candidate))

        assert argv == [
            "curl",
            "-X",
            "POST",
            "https://api.x.com/cart",
            "-H",
            "content-type: application/json",
            "--data-raw",
            '{"id": "it\'s"}',
        ]

    def test_mime_type_added_when_header_missing(self, make_candidate) -> None:
        candidate = make_candidate(method="POST", body="a=1", mime_type="application/x-www-form-urlencoded")

        argv = shlex.split(to_curl(candidate))

        assert argv[-4:] == ["-H", "Content-Type: application/x-www-form-urlencoded", "--data-raw", "a=1"]

    def test_no_body_flag_without_text(self) -> None:
        candidate = CandidateRequest(
            method="POST",
            url="https://api.x.com/upload",
            post_data=HARPostData(mime_type="multipart/form-data", params=[{"name": "f"}]),
        )
        assert "--data-raw" not in to_curl(candidate)

    def test_shell_metacharacters_are_inert(self, make_candidate) -> None:
        candidate = make_candidate(url="https://api.x.com/$(rm -rf ~)", headers={"X-A": "`id`; echo"}, body="$HOME")

        argv = shlex.split(to_curl(candidate))

        assert argv[3] == "https://api.x.com/$(rm -rf ~)"
        assert "X-A: `id`; echo" in argv
        assert argv[-1] == "$HOME"

    def test_deterministic(self, make_candidate) -> None:
        candidate = make_candidate(method="PUT", headers={"A": "1"}, body="x")
        assert to_curl(candidate) == to_curl(candidate)
