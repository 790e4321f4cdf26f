"""Split minimized candidates into batches that fit one classification call."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from harmatch.har.minimizer import MinimalCandidate
from harmatch.logging import get_logger

LOG = get_logger(__name__)

MAX_PAYLOAD_CHARS = 100_000


def serialize_payload(items: Sequence[MinimalCandidate]) -> str:
    """Serialize minimized candidates exactly as they are embedded in prompts."""
    return _dumps([item.to_dict() for item in items])


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


@dataclass
class Batch:
    """Contiguous slice ``[start, end)`` of the candidate list and its minimized items."""

    start: int
    end: int
    items: list[MinimalCandidate] = field(default_factory=list)

    @property
    def size(self) -> int:
        return self.end - self.start

    @property
    def payload(self) -> str:
        return serialize_payload(self.items)

    def to_global(self, local_index: int) -> int:
        """Map an index into this batch back to the full candidate list."""
        return self.start + local_index


def plan_batches(
    items: Sequence[MinimalCandidate], max_payload_chars: int = MAX_PAYLOAD_CHARS
) -> list[Batch]:
    """Greedily pack consecutive candidates into payload-bounded batches.

    Each batch grows one candidate at a time until adding the next would push
    its serialized JSON array past ``max_payload_chars``. A candidate that is
    too large on its own still gets a batch to itself, so every candidate lands
    in exactly one batch and order is preserved.

    The window length is tracked incrementally: a compact JSON array of ``k``
    items is ``2 + sum(item lengths) + (k - 1)`` characters long, which equals
    ``len(serialize_payload(window))``.

    Args:
        items: Minimized candidates, in candidate-list order.
        max_payload_chars: Budget per batch, in serialized characters.

    Returns:
        Batches covering ``items`` in order, or an empty list for no items.

    Raises:
        ValueError: If ``max_payload_chars`` is not positive.
    """
    if max_payload_chars < 1:
        raise ValueError("max_payload_chars must be positive")

    lengths = [len(_dumps(item.to_dict())) for item in items]
    batches: list[Batch] = []
    start = 0
    while start < len(items):
        end = start + 1
        window_chars = 2 + lengths[start]
        while end < len(items):
            grown = window_chars + 1 + lengths[end]
            if grown > max_payload_chars:
                break
            window_chars = grown
            end += 1
        if end - start == 1 and window_chars > max_payload_chars:
            LOG.warning("oversized_candidate_batched_alone", index=start, payload_chars=window_chars)
        batches.append(Batch(start=start, end=end, items=list(items[start:end])))
        start = end

    LOG.info(
        "batches_planned",
        candidates=len(items),
        batches=len(batches),
        max_payload_chars=max_payload_chars,
    )
    return batches
