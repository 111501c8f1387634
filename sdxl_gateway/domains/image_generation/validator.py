from __future__ import annotations

from typing import Callable

from sdxl_gateway.core.errors.exceptions import ValidationError
from sdxl_gateway.domains.image_generation.schemas import GenerationPayload

CFG_SCALE_MIN, CFG_SCALE_MAX = 0.0, 35.0
STEPS_MIN, STEPS_MAX = 10, 50
SEED_MIN, SEED_MAX = 0, 4294967295
MAX_PROMPT_TOKENS = 75

# (width, height) pairs accepted by SDXL 1.0.
ALLOWED_RESOLUTIONS: tuple[tuple[int, int], ...] = (
    (1024, 1024),
    (896, 1152),
    (832, 1216),
    (768, 1344),
    (640, 1536),
    (1536, 640),
    (1344, 768),
    (1216, 832),
    (1152, 896),
)
_ALLOWED_RESOLUTION_SET = frozenset(ALLOWED_RESOLUTIONS)


def _resolutions_text() -> str:
    return ", ".join(f"{w}x{h}" for w, h in ALLOWED_RESOLUTIONS)


def count_prompt_tokens(prompt: str) -> int:
    return len(prompt.split())


Check = tuple[str, Callable[[GenerationPayload], bool], str]

_CHECKS: tuple[Check, ...] = (
    (
        "CFG_SCALE_OUT_OF_RANGE",
        lambda p: CFG_SCALE_MIN <= p.cfg_scale <= CFG_SCALE_MAX,
        f"cfg_scale out of range: must be between {CFG_SCALE_MIN:g} and {CFG_SCALE_MAX:g}",
    ),
    (
        "STEPS_OUT_OF_RANGE",
        lambda p: STEPS_MIN <= p.steps <= STEPS_MAX,
        f"steps out of range: must be between {STEPS_MIN} and {STEPS_MAX}",
    ),
    (
        "SEED_OUT_OF_RANGE",
        lambda p: SEED_MIN <= p.seed <= SEED_MAX,
        f"seed out of range: must be between {SEED_MIN} and {SEED_MAX}",
    ),
    (
        "UNSUPPORTED_RESOLUTION",
        lambda p: (p.width, p.height) in _ALLOWED_RESOLUTION_SET,
        f"unsupported resolution: width and height must be one of {_resolutions_text()}",
    ),
)


def validate_payload(
    payload: GenerationPayload,
    *,
    max_prompt_tokens: int | None = MAX_PROMPT_TOKENS,
) -> GenerationPayload:
    """Return ``payload`` unchanged if it satisfies every constraint.

    Checks run in a fixed order and the first failure is raised as a
    ``ValidationError``. ``max_prompt_tokens`` of ``None`` or 0 skips the
    prompt-length check.
    """
    for code, ok, message in _CHECKS:
        if not ok(payload):
            raise ValidationError(code, message)

    if max_prompt_tokens:
        tokens = count_prompt_tokens(payload.prompt)
        if tokens > max_prompt_tokens:
            raise ValidationError(
                "PROMPT_TOO_LONG",
                f"prompt too long: must be at most {max_prompt_tokens} tokens",
                detail={"tokens": tokens, "max_tokens": max_prompt_tokens},
            )

    return payload
