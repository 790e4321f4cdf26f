"""Prompts for the two classification phases."""

from __future__ import annotations

import json
from typing import Any

NO_MATCH_INDEX = -1

MATCH_SYSTEM_PROMPT = f"""You are a tool that helps reverse-engineer APIs from HAR (HTTP Archive) data.
Given a user description of the API they want to reverse-engineer and a JSON array of request objects (each with method, url, headers as object, and optionally postData with mimeType and text):
1. EXTRACT: Identify the SINGLE request from the array (by 0-based index) that best matches the user's description.
2. OUTPUT: Respond with a valid JSON object only, no markdown or extra text. Use this exact shape:
{{"matchedIndex": <number>, "confidence": "high"|"medium"|"low"|"none", "explanationBullets": ["reason 1", "reason 2"]}}
- matchedIndex: 0-based index into the array, or {NO_MATCH_INDEX} if no request in the array matches.
- confidence: how well the request matches the description ("none" when matchedIndex is {NO_MATCH_INDEX}).
- explanationBullets: 2-4 short bullet points explaining why this request matches (or why none does)."""

ARBITRATION_SYSTEM_PROMPT = """You are a tool that helps reverse-engineer APIs from HAR (HTTP Archive) data.
Several requests were each picked as the best match from a different part of a capture. Given the user's description and a JSON array of these finalists (each with index, method, url and the reasons it was picked), choose the SINGLE finalist that best matches the description.
Respond with a valid JSON object only, no markdown or extra text:
{"matchedIndex": <number>}
- matchedIndex: the finalist's index field (0-based position in the array)."""


def build_match_message(description: str, payload: str) -> str:
    """User message for a per-batch classification call."""
    return (
        f'The user wants to reverse-engineer this API: "{description.strip()}"\n\n'
        "Here are the HTTP requests (JSON array, 0-based indices). Pick the ONE request that best "
        f"matches the description, or use {NO_MATCH_INDEX} if none does. Output ONLY a JSON object "
        "with matchedIndex, confidence, and explanationBullets.\n\n"
        f"{payload}"
    )


def build_arbitration_message(description: str, finalists: list[dict[str, Any]]) -> str:
    """User message for the arbitration call over per-batch winners."""
    payload = json.dumps(finalists, separators=(",", ":"), ensure_ascii=False)
    return (
        f'The user wants to reverse-engineer this API: "{description.strip()}"\n\n'
        "Here are the finalists (JSON array, 0-based indices). Output ONLY a JSON object with "
        "matchedIndex.\n\n"
        f"{payload}"
    )
