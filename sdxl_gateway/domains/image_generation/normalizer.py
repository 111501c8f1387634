from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Mapping

from sdxl_gateway.domains.image_generation.schemas import GenerationPayload, RawRequest

logger = logging.getLogger(__name__)

DEFAULT_CFG_SCALE = 7.0
DEFAULT_SEED = 0
DEFAULT_STEPS = 20
DEFAULT_WIDTH = 1024
DEFAULT_HEIGHT = 1024

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _parse_float(value: str | None, default: float) -> float:
    # float() tolerates padding and digit separators; treat those as non-numeric.
    if value is None or value != value.strip() or "_" in value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_int(value: str | None) -> int:
    # Unparsable integers fall back to 0 and are picked up by apply_defaults.
    if value is None or not _INT_RE.fullmatch(value):
        return 0
    return int(value)


def apply_defaults(payload: GenerationPayload) -> GenerationPayload:
    """Fill zero-valued fields with their defaults.

    ``cfg_scale`` and ``seed`` are left alone since 0 is a legal value for both.
    Applying this twice yields the same payload.
    """
    return replace(
        payload,
        steps=payload.steps or DEFAULT_STEPS,
        width=payload.width or DEFAULT_WIDTH,
        height=payload.height or DEFAULT_HEIGHT,
    )


def _log_request(raw: RawRequest) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("Body size = %d", len(raw.body))
    for key, value in raw.headers.items():
        logger.debug("header %s: %s", key, value)
    for key, value in (raw.query or {}).items():
        logger.debug("query %s: %s", key, value)


def normalize_request(raw: RawRequest) -> GenerationPayload:
    _log_request(raw)

    query: Mapping[str, str] | None = raw.query
    if query is None:
        logger.debug("no query string parameters, using default values")
        return GenerationPayload(
            prompt=raw.body,
            cfg_scale=DEFAULT_CFG_SCALE,
            steps=DEFAULT_STEPS,
            seed=DEFAULT_SEED,
            width=DEFAULT_WIDTH,
            height=DEFAULT_HEIGHT,
        )

    candidate = GenerationPayload(
        prompt=raw.body,
        cfg_scale=_parse_float(query.get("cfg_scale"), DEFAULT_CFG_SCALE),
        steps=_parse_int(query.get("steps")),
        seed=_parse_int(query.get("seed")),
        width=_parse_int(query.get("width")),
        height=_parse_int(query.get("height")),
    )
    return apply_defaults(candidate)
