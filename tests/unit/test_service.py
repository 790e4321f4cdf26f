"""Tests for the parse and match entry points."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from harmatch.config import HarmatchSettings
from harmatch.exceptions import HARParseError, InvalidInputError, OracleUnavailableError
from harmatch.service import load_candidates, match_request, parse_har


@pytest.fixture
def sample_har() -> dict:
    path = Path(__file__).parent.parent / "fixtures" / "sample.har"
    return json.loads(path.read_text())


class TestParseHar:
    """Tests for parse_har."""

    def test_count_and_entries(self, sample_har: dict) -> None:
        result = parse_har(sample_har)

        payload = result.to_dict()
        assert payload["count"] == 3
        assert [e["status"] for e in payload["entries"]] == [200, 201, 200]
        assert payload["entries"][0]["queryString"] == [{"name": "q", "value": "lamp"}, {"name": "page", "value": "1"}]

    def test_invalid_document(self) -> None:
        with pytest.raises(HARParseError):
            parse_har({"entries": []})

    def test_parse_errors_reported(self, har_entry, har_doc) -> None:
        result = parse_har(har_doc(har_entry(), 5))
        assert result.count == 1
        assert len(result.errors) == 1


class TestLoadCandidates:
    """Tests for accepting caller-supplied candidate lists."""

    def test_round_trip_through_json(self, sample_har: dict) -> None:
        parsed = parse_har(sample_har)
        wire = json.loads(json.dumps(parsed.to_dict()))

        assert load_candidates(wire["entries"]) == parsed.entries

    def test_round_trip_skips_unusable_entries(self, har_entry, har_doc) -> None:
        """Entries the parser cannot turn into candidates never reach the JSON form."""
        doc = har_doc(
            {"request": {"method": "GET"}, "response": {}},
            har_entry("https://api.x.com/q", query_string=["q"]),
            har_entry("https://api.x.com/cart", "POST", post_data={"text": 123}),
            har_entry("https://api.x.com/ok"),
        )
        parsed = parse_har(doc)
        wire = json.loads(json.dumps(parsed.to_dict()))

        assert len(parsed.errors) == 3
        assert [c.url for c in load_candidates(wire["entries"])] == ["https://api.x.com/ok"]

    def test_objects_pass_through(self, make_candidate) -> None:
        candidate = make_candidate()
        assert load_candidates([candidate]) == [candidate]

    def test_not_a_list(self) -> None:
        with pytest.raises(InvalidInputError, match="array"):
            load_candidates({"method": "GET"})


class TestMatchRequest:
    """Tests for match_request."""

    def test_parse_once_match_many(self, sample_har: dict, stub_classifier) -> None:
        entries = parse_har(sample_har).to_dict()["entries"]
        classifier = stub_classifier(
            {"matchedIndex": 1, "confidence": "high", "explanationBullets": ["POST to cart"]},
            {"matchedIndex": 0, "confidence": "medium", "explanationBullets": ["search endpoint"]},
        )

        cart = match_request("add item to cart", entries, classifier=classifier)
        search = match_request("search products", entries, classifier=classifier)

        assert cart.matched_index == 1
        assert "https://api.shop.example.com/v1/cart/items" in cart.curl
        assert "--data-raw" in cart.curl
        assert search.matched_index == 0
        assert search.to_dict()["explanationBullets"] == ["search endpoint"]

    @pytest.mark.parametrize("description", ["", "   ", None, 42])
    def test_description_required(self, description, stub_classifier) -> None:
        with pytest.raises(InvalidInputError, match="description"):
            match_request(description, [], classifier=stub_classifier())

    def test_entries_must_be_list(self, stub_classifier) -> None:
        with pytest.raises(InvalidInputError, match="entries"):
            match_request("x", "nope", classifier=stub_classifier())  # type: ignore[arg-type]

    def test_empty_entries_need_no_oracle(self) -> None:
        result = match_request("anything", [])
        assert result.curl == ""
        assert result.matched_index is None

    def test_missing_key_is_service_unavailable(self, make_candidate) -> None:
        with pytest.raises(OracleUnavailableError):
            match_request("x", [make_candidate()])

    def test_settings_limits_applied(self, make_candidate, stub_classifier) -> None:
        candidates = [make_candidate(url=f"https://api.x.com/{i}") for i in range(4)]
        classifier = stub_classifier(*([{"matchedIndex": -1}] * 4))
        settings = HarmatchSettings(max_payload_chars=1)

        match_request("x", candidates, classifier=classifier, settings=settings)

        assert len(classifier.calls) == 4

    def test_description_trimmed(self, make_candidate, stub_classifier) -> None:
        classifier = stub_classifier({"matchedIndex": 0})

        match_request("  list users \n", [make_candidate()], classifier=classifier)

        assert '"list users"' in classifier.calls[0][1]
