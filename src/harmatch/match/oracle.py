"""Classifier oracle interface and the OpenAI-backed implementation.

The matching pipeline only ever sees a ``Classifier``: something that takes a
system instruction and a user message and returns free text. Tests swap in a
deterministic stub; production uses ``OpenAIClassifier``.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import openai
from openai import OpenAI

from harmatch.exceptions import OracleRequestError, OracleUnavailableError
from harmatch.logging import get_logger, log_duration

if TYPE_CHECKING:
    from harmatch.config import HarmatchSettings

LOG = get_logger(__name__)

DEFAULT_MODEL = "gpt-5-mini"

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


@runtime_checkable
class Classifier(Protocol):
    """Protocol for natural-language classifier oracles."""

    def classify(self, system_prompt: str, user_message: str) -> str:
        """Return the oracle's raw text answer.

        Raises:
            OracleUnavailableError: If the oracle is not configured.
            OracleRequestError: If the call itself fails.
        """
        ...


def extract_json_object(raw: str | None) -> dict[str, Any] | None:
    """Best-effort extraction of a JSON object from free-form oracle output.

    If the text contains a fenced code block (optionally tagged ``json``), only
    the block's contents are decoded.

    Returns:
        The decoded object, or None if the text is not a JSON object.
    """
    if not raw:
        return None
    text = raw.strip()
    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        text = fenced.group(1).strip()
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        LOG.debug("oracle_response_not_json", response_chars=len(raw))
        return None
    return value if isinstance(value, dict) else None


class OpenAIClassifier:
    """Classifier backed by the OpenAI chat completions API.

    The client is created on first use. Calls are made once: the SDK's own
    retries are disabled so that a failure surfaces to the caller immediately.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        temperature: float = 1.0,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._api_key = api_key
        self._client: OpenAI | None = None

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self._api_key or not self._api_key.strip():
                raise OracleUnavailableError("OpenAI API key is not configured. Set OPENAI_API_KEY.")
            self._client = OpenAI(api_key=self._api_key, max_retries=0)
        return self._client

    def classify(self, system_prompt: str, user_message: str) -> str:
        client = self._get_client()
        LOG.info("oracle_call_started", model=self.model, payload_chars=len(user_message))

        try:
            with log_duration(LOG, "oracle_call_finished", model=self.model) as ctx:
                completion = client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_message},
                    ],
                    temperature=self.temperature,
                )
                content = completion.choices[0].message.content if completion.choices else None
                ctx["response_chars"] = len(content or "")
        except openai.OpenAIError as exc:
            LOG.warning("oracle_call_failed", model=self.model, error=str(exc))
            raise OracleRequestError(f"OpenAI request failed. Please try again: {exc}") from exc

        if not isinstance(content, str) or not content:
            raise OracleRequestError("OpenAI returned no content.")
        return content


def classifier_from_settings(settings: HarmatchSettings) -> OpenAIClassifier:
    """Build the default classifier from settings.

    Raises:
        OracleUnavailableError: If no API key is configured.
    """
    return OpenAIClassifier(**settings.get_oracle_config())
