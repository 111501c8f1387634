from __future__ import annotations

import base64
import time
from typing import Any

import pytest
from fastapi.testclient import TestClient

from sdxl_gateway.core.config import Settings
from sdxl_gateway.main import create_app

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")


def sdxl_response(image_b64: str = PNG_B64, finish_reason: str = "SUCCESS") -> dict[str, Any]:
    return {
        "result": "success",
        "artifacts": [{"seed": 0, "base64": image_b64, "finishReason": finish_reason}],
    }


class FakeBedrock:
    """Stands in for BedrockRuntime; records every body it is invoked with."""

    model_id = "stability.stable-diffusion-xl-v1"

    def __init__(
        self,
        response: dict[str, Any] | None = None,
        *,
        error: Exception | None = None,
        delay_seconds: float = 0.0,
    ) -> None:
        self.response = response if response is not None else sdxl_response()
        self.error = error
        self.delay_seconds = delay_seconds
        self.calls: list[bytes] = []

    def invoke(self, body: bytes) -> dict[str, Any]:
        self.calls.append(body)
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(timeout_seconds=10, max_prompt_tokens=75)


@pytest.fixture
def fake_bedrock() -> FakeBedrock:
    return FakeBedrock()


@pytest.fixture
def client(settings, fake_bedrock):
    app = create_app(settings=settings, bedrock=fake_bedrock)
    with TestClient(app) as c:
        yield c
