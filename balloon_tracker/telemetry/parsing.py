"""관대한 JSON 파서입니다. / Tolerant JSON parser for telemetry bodies.

Upstream hour files are meant to be a JSON array of ``[lat, lon, alt]``
arrays but arrive truncated or with non-standard tokens. Parsing runs a
fixed ladder of repair stages and stops at the first that yields JSON:

1. ``direct``: the body as-is (``NaN``/``Infinity`` are accepted).
2. ``normalized``: sentinel tokens (``nan``, ``-NaN``, ``undefined``) are
   rewritten to ``NaN``, dangling commas are dropped and brackets balanced.
3. ``truncated``: as stage 2, after cutting the body back to the last
   complete ``]``.

When no stage parses the body is unrecoverable and
``UnrecoverablePayloadError`` is raised.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, List, Tuple

LOGGER = logging.getLogger("telemetry.parsing")

_SENTINEL_TOKENS = re.compile(r"-?\b(?:nan|NaN|NAN|undefined)\b")
_DANGLING_COMMA = re.compile(r",\s*(?=[\]}])")
_TRAILING_COMMA = re.compile(r",\s*$")


class UnrecoverablePayloadError(ValueError):
    """복구 불가능한 페이로드입니다. / Payload could not be repaired."""


def _normalize_tokens(text: str) -> str:
    """센티널 토큰을 NaN으로 바꿉니다. / Rewrite sentinel tokens to NaN."""

    return _SENTINEL_TOKENS.sub("NaN", text)


def _balance(text: str) -> str:
    """구분자를 정리하고 괄호를 맞춥니다. / Fix delimiters and balance brackets."""

    cleaned = _DANGLING_COMMA.sub("", text.strip())
    cleaned = _TRAILING_COMMA.sub("", cleaned)
    if not cleaned.startswith("["):
        cleaned = "[" + cleaned
    missing = cleaned.count("[") - cleaned.count("]")
    if missing > 0:
        cleaned = cleaned + "]" * missing
    elif missing < 0:
        cleaned = "[" * -missing + cleaned
    return cleaned


def _truncate_to_last_element(text: str) -> str:
    """마지막 완전한 원소까지 자릅니다. / Cut back to the last closed element."""

    end = text.rfind("]")
    if end < 0:
        return text
    return text[: end + 1]


def _stage_direct(text: str) -> str:
    return text


def _stage_normalized(text: str) -> str:
    return _balance(_normalize_tokens(text))


def _stage_truncated(text: str) -> str:
    return _balance(_truncate_to_last_element(_normalize_tokens(text)))


REPAIR_STAGES: List[Tuple[str, Callable[[str], str]]] = [
    ("direct", _stage_direct),
    ("normalized", _stage_normalized),
    ("truncated", _stage_truncated),
]


def parse_snapshot_body(text: str) -> Any:
    """텔레메트리 본문을 파싱합니다. / Parse a telemetry body tolerantly."""

    errors: List[str] = []
    for stage, transform in REPAIR_STAGES:
        candidate = transform(text)
        try:
            parsed = json.loads(candidate)
        except ValueError as exc:
            errors.append(f"{stage}: {exc}")
            continue
        if stage != "direct":
            LOGGER.info("payload_repaired", extra={"stage": stage})
        return parsed
    raise UnrecoverablePayloadError("; ".join(errors))
