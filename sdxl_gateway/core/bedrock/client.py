from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from sdxl_gateway.core.config import Settings
from sdxl_gateway.core.errors.exceptions import BackendInvocationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BedrockSettings:
    region: str
    model_id: str
    timeout_seconds: int
    endpoint_url: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "BedrockSettings":
        return cls(
            region=settings.aws_region,
            model_id=settings.model_id,
            timeout_seconds=settings.timeout_seconds,
            endpoint_url=settings.bedrock_endpoint_url,
        )


def _client_error_code(exc: ClientError) -> str:
    try:
        return str(exc.response.get("Error", {}).get("Code") or "Unknown")
    except AttributeError:
        return "Unknown"


class BedrockRuntime:
    """Thin wrapper around a shared ``bedrock-runtime`` client.

    boto3 clients are thread-safe, so one instance is created at startup and
    reused by every in-flight request. Retries are disabled; a failed call is
    reported to the caller as-is.
    """

    def __init__(self, *, settings: BedrockSettings, client: Any | None = None) -> None:
        self.settings = settings
        if client is None:
            client = boto3.client(
                "bedrock-runtime",
                region_name=settings.region,
                endpoint_url=settings.endpoint_url,
                config=Config(
                    connect_timeout=settings.timeout_seconds,
                    read_timeout=settings.timeout_seconds,
                    retries={"total_max_attempts": 1, "mode": "standard"},
                ),
            )
        self.client = client

    @property
    def model_id(self) -> str:
        return self.settings.model_id

    def invoke(self, body: bytes) -> dict[str, Any]:
        try:
            resp = self.client.invoke_model(
                modelId=self.model_id,
                body=body,
                contentType="application/json",
                accept="application/json",
            )
            raw = resp["body"].read()
        except ClientError as exc:
            code = _client_error_code(exc)
            logger.error("invoke_model failed: model=%s code=%s", self.model_id, code, exc_info=True)
            raise BackendInvocationError(
                f"Failed to invoke model: {code}",
                detail={"error": code},
                cause=exc,
            ) from exc
        except BotoCoreError as exc:
            logger.error("invoke_model failed: model=%s", self.model_id, exc_info=True)
            raise BackendInvocationError(f"Failed to invoke model: {exc}", cause=exc) from exc

        try:
            decoded = json.loads(raw)
        except ValueError as exc:
            raise BackendInvocationError(f"Failed to decode model response: {exc}", cause=exc) from exc

        if not isinstance(decoded, dict):
            raise BackendInvocationError("Failed to decode model response: expected a JSON object")
        return decoded
