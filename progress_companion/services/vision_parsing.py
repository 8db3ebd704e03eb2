"""Best-effort JSON extraction from vision-model replies.

Models wrap JSON in prose or markdown fences. We try the whole payload, then
each balanced {...} block in order, and give up with MalformedUpstreamResponse.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from progress_companion.core.errors import MalformedUpstreamResponse

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    return _FENCE_CLOSE.sub("", cleaned)


def iter_object_candidates(text: str) -> list[str]:
    """Balanced {...} blocks in order of appearance, respecting string literals."""
    candidates: list[str] = []
    in_str = False
    escaped = False
    depth = 0
    start_idx: int | None = None

    for i, ch in enumerate(text):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue

        if ch == "\"":
            in_str = True
            continue

        if ch == "{":
            if depth == 0:
                start_idx = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start_idx is not None:
                candidates.append(text[start_idx : i + 1])
                start_idx = None
    return candidates


def parse_model_json(content: Any) -> dict[str, Any]:
    """Parse the first JSON object in a model reply.

    Raises MalformedUpstreamResponse when the reply is not text or nothing
    in it parses to a dict.
    """
    if not isinstance(content, str):
        logger.warning("Vision response is not text: %s", type(content).__name__)
        raise MalformedUpstreamResponse("Vision response is not text", raw=repr(content))
    cleaned = _strip_fences(content)
    for attempt in (cleaned, *iter_object_candidates(cleaned)):
        try:
            parsed = json.loads(attempt)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed
    logger.warning("Unparseable vision response: %.200s", content)
    raise MalformedUpstreamResponse("Vision response contains no JSON object", raw=content)
