from __future__ import annotations

import json

from fastapi.testclient import TestClient

from sdxl_gateway.core.config import Settings
from sdxl_gateway.core.errors.exceptions import BackendInvocationError
from sdxl_gateway.main import create_app

from conftest import PNG_B64, PNG_BYTES, FakeBedrock


def test_generate_returns_base64_image(client, fake_bedrock):
    resp = client.post("/v1/images/generate", content="a red fox in snow")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text == PNG_B64
    assert json.loads(fake_bedrock.calls[0])["text_prompts"] == [{"text": "a red fox in snow"}]


def test_query_parameters_reach_the_payload(client, fake_bedrock):
    params = {"cfg_scale": "10", "seed": "1234", "steps": "40", "width": "640", "height": "1536"}
    resp = client.post("/v1/images/generate", params=params, content="a lighthouse at dusk")

    assert resp.status_code == 200
    sent = json.loads(fake_bedrock.calls[0])
    assert sent["cfg_scale"] == 10.0
    assert sent["seed"] == 1234
    assert sent["steps"] == 40
    assert (sent["width"], sent["height"]) == (640, 1536)


def test_non_numeric_cfg_scale_is_defaulted(client, fake_bedrock):
    resp = client.post("/v1/images/generate", params={"cfg_scale": "abc"}, content="fox")

    assert resp.status_code == 200
    assert json.loads(fake_bedrock.calls[0])["cfg_scale"] == 7.0


def test_unsupported_resolution_is_400_plain_text(client, fake_bedrock):
    resp = client.post("/v1/images/generate", params={"width": "1024", "height": "999"}, content="fox")

    assert resp.status_code == 400
    assert resp.headers["x-error-code"] == "UNSUPPORTED_RESOLUTION"
    assert resp.text.startswith("unsupported resolution")
    assert "1536x640" in resp.text
    assert fake_bedrock.calls == []


def test_prompt_too_long_is_400(client, fake_bedrock):
    resp = client.post("/v1/images/generate", content=" ".join(["token"] * 76))

    assert resp.status_code == 400
    assert resp.text.startswith("prompt too long")
    assert fake_bedrock.calls == []


def test_backend_failure_is_structured_response(settings):
    bedrock = FakeBedrock(error=BackendInvocationError("Failed to invoke model: ThrottlingException"))
    with TestClient(create_app(settings=settings, bedrock=bedrock)) as c:
        resp = c.post("/v1/images/generate", content="fox")

    assert resp.status_code == 502
    assert resp.headers["x-error-code"] == "BACKEND_INVOCATION_FAILED"
    assert resp.text == "Failed to invoke model: ThrottlingException"


def test_backend_timeout_is_504():
    bedrock = FakeBedrock(delay_seconds=2.0)
    with TestClient(create_app(settings=Settings(timeout_seconds=1), bedrock=bedrock)) as c:
        resp = c.post("/v1/images/generate", content="fox")

    assert resp.status_code == 504
    assert resp.headers["x-error-code"] == "BACKEND_TIMEOUT"
    assert len(bedrock.calls) == 1


def test_unexpected_error_is_500(settings):
    bedrock = FakeBedrock(error=RuntimeError("boom"))
    with TestClient(create_app(settings=settings, bedrock=bedrock), raise_server_exceptions=False) as c:
        resp = c.post("/v1/images/generate", content="fox")

    assert resp.status_code == 500
    assert resp.text == "Internal server error"
    assert "boom" not in resp.text


def test_png_endpoint_returns_image_bytes(client):
    resp = client.post("/v1/images/generate.png", content="fox")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content == PNG_BYTES


def test_invalid_utf8_body_is_rejected(client, fake_bedrock):
    resp = client.post("/v1/images/generate", content=b"\xff\xfe\xfa")

    assert resp.status_code == 400
    assert resp.headers["x-error-code"] == "INVALID_BODY"
    assert fake_bedrock.calls == []


def test_health_and_readiness(client):
    assert client.get("/healthz").json() == {"status": "ok"}
    ready = client.get("/readyz").json()
    assert ready["server_ready"] is True
    assert ready["model_id"] == "stability.stable-diffusion-xl-v1"
