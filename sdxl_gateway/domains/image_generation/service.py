from __future__ import annotations

import base64
import binascii
import logging
from functools import partial
from typing import Any

import anyio
import pydantic

from sdxl_gateway.core.bedrock.client import BedrockRuntime
from sdxl_gateway.core.config import Settings
from sdxl_gateway.core.errors.exceptions import BackendInvocationError, BackendTimeoutError, ValidationError
from sdxl_gateway.domains.image_generation.normalizer import normalize_request
from sdxl_gateway.domains.image_generation.schemas import (
    BedrockResponse,
    GenerationPayload,
    RawRequest,
    serialize_payload,
)
from sdxl_gateway.domains.image_generation.validator import validate_payload

logger = logging.getLogger(__name__)


def build_payload(raw: RawRequest, *, max_prompt_tokens: int | None) -> GenerationPayload:
    payload = normalize_request(raw)
    try:
        return validate_payload(payload, max_prompt_tokens=max_prompt_tokens)
    except ValidationError as exc:
        logger.info("Rejected payload: %s", exc.message)
        raise


async def _invoke_with_timeout(bedrock: BedrockRuntime, body: bytes, timeout_seconds: float) -> dict[str, Any]:
    try:
        with anyio.fail_after(timeout_seconds):
            # boto3 is sync; a timed-out call is abandoned in its worker thread.
            return await anyio.to_thread.run_sync(partial(bedrock.invoke, body), abandon_on_cancel=True)
    except TimeoutError as exc:
        logger.error("Model invocation timed out after %ss", timeout_seconds)
        raise BackendTimeoutError(timeout_seconds) from exc


def _first_image(decoded: dict[str, Any]) -> str:
    try:
        resp = BedrockResponse.model_validate(decoded)
    except pydantic.ValidationError as exc:
        raise BackendInvocationError(
            "Malformed model response",
            detail={"errors": exc.errors(include_url=False)},
            cause=exc,
        ) from exc

    if not resp.artifacts:
        raise BackendInvocationError("Model response contained no artifacts", detail={"result": resp.result})

    artifact = resp.artifacts[0]
    if artifact.finish_reason and artifact.finish_reason != "SUCCESS":
        logger.warning("Model returned finishReason=%s", artifact.finish_reason)
    return artifact.base64


async def generate_image_base64(raw: RawRequest, *, bedrock: BedrockRuntime, settings: Settings) -> str:
    payload = build_payload(raw, max_prompt_tokens=settings.max_prompt_tokens)
    body = serialize_payload(payload)

    logger.info(
        "Invoking %s: steps=%d cfg_scale=%g seed=%d size=%dx%d",
        bedrock.model_id,
        payload.steps,
        payload.cfg_scale,
        payload.seed,
        payload.width,
        payload.height,
    )
    decoded = await _invoke_with_timeout(bedrock, body, settings.timeout_seconds)
    return _first_image(decoded)


async def generate_image_png(raw: RawRequest, *, bedrock: BedrockRuntime, settings: Settings) -> bytes:
    image_b64 = await generate_image_base64(raw, bedrock=bedrock, settings=settings)
    try:
        return base64.b64decode(image_b64, validate=True)
    except binascii.Error as exc:
        raise BackendInvocationError("Model returned an invalid base64 image", cause=exc) from exc
