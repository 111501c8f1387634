from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from sdxl_gateway.core.bedrock.client import BedrockRuntime
from sdxl_gateway.core.config import Settings
from sdxl_gateway.core.errors.exceptions import AppError, BackendUnavailableError
from sdxl_gateway.domains.image_generation.schemas import RawRequest
from sdxl_gateway.domains.image_generation.service import generate_image_base64, generate_image_png

router = APIRouter(tags=["image-generation"])


def get_bedrock(request: Request) -> BedrockRuntime:
    bedrock = getattr(request.app.state, "bedrock", None)
    if bedrock is None:
        raise BackendUnavailableError("Bedrock client is not initialized")
    return bedrock


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def read_raw_request(request: Request) -> RawRequest:
    raw_body = await request.body()
    try:
        body = raw_body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise AppError(code="INVALID_BODY", message="Request body must be UTF-8 text", http_status=400) from exc

    # An empty query string means no parameters at all, not empty ones.
    query = dict(request.query_params) or None
    return RawRequest(body=body, query=query, headers=dict(request.headers))


@router.post(
    "/images/generate",
    response_class=PlainTextResponse,
    responses={200: {"content": {"text/plain": {}}, "description": "Base64-encoded PNG"}},
)
async def generate_image_endpoint(
    request: Request,
    bedrock: BedrockRuntime = Depends(get_bedrock),
    settings: Settings = Depends(get_settings),
):
    raw = await read_raw_request(request)
    image_b64 = await generate_image_base64(raw, bedrock=bedrock, settings=settings)
    return PlainTextResponse(image_b64)


@router.post(
    "/images/generate.png",
    responses={200: {"content": {"image/png": {}}}},
)
async def generate_image_png_endpoint(
    request: Request,
    bedrock: BedrockRuntime = Depends(get_bedrock),
    settings: Settings = Depends(get_settings),
):
    raw = await read_raw_request(request)
    png_bytes = await generate_image_png(raw, bedrock=bedrock, settings=settings)
    return Response(content=png_bytes, media_type="image/png")
