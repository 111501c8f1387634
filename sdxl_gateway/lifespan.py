from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI

from sdxl_gateway.core.bedrock.client import BedrockRuntime, BedrockSettings
from sdxl_gateway.core.config import Settings
from sdxl_gateway.core.errors.exceptions import BackendUnavailableError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings | None = getattr(app.state, "settings", None)
    if settings is None:
        settings = Settings.from_env()
        app.state.settings = settings

    logger.info(
        "Starting with region=%s model=%s timeout=%ss bucket=%s",
        settings.aws_region,
        settings.model_id,
        settings.timeout_seconds,
        settings.bucket_name or "-",
    )

    # One shared client for the process lifetime; tests may inject their own.
    if getattr(app.state, "bedrock", None) is None:
        try:
            bedrock_settings = BedrockSettings.from_settings(settings)
            app.state.bedrock = await anyio.to_thread.run_sync(
                lambda: BedrockRuntime(settings=bedrock_settings)
            )
            logger.info("Initialized Bedrock runtime client")
        except Exception as exc:
            raise BackendUnavailableError("Failed to initialize Bedrock client", cause=exc) from exc

    yield

    # botocore clients hold no resources that need explicit cleanup.
