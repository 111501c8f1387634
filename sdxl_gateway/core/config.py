from __future__ import annotations

import os

from pydantic import BaseModel

DEFAULT_REGION = "us-east-1"
DEFAULT_MODEL_ID = "stability.stable-diffusion-xl-v1"
DEFAULT_TIMEOUT_SECONDS = 10
DEFAULT_MAX_PROMPT_TOKENS = 75


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name, default) or "").strip()


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    try:
        return int(raw)
    except ValueError:
        return default


class Settings(BaseModel):
    aws_region: str = DEFAULT_REGION
    bedrock_endpoint_url: str | None = None
    model_id: str = DEFAULT_MODEL_ID
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    bucket_name: str | None = None
    max_prompt_tokens: int = DEFAULT_MAX_PROMPT_TOKENS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        timeout_seconds = _env_int("TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        if timeout_seconds < 1:
            timeout_seconds = DEFAULT_TIMEOUT_SECONDS

        max_prompt_tokens = _env_int("MAX_PROMPT_TOKENS", DEFAULT_MAX_PROMPT_TOKENS)
        if max_prompt_tokens < 0:
            max_prompt_tokens = DEFAULT_MAX_PROMPT_TOKENS

        return cls(
            aws_region=_env_str("AWS_REGION") or DEFAULT_REGION,
            bedrock_endpoint_url=_env_str("BEDROCK_ENDPOINT_URL") or None,
            model_id=_env_str("BEDROCK_MODEL_ID") or DEFAULT_MODEL_ID,
            timeout_seconds=timeout_seconds,
            bucket_name=_env_str("BUCKET_NAME") or None,
            max_prompt_tokens=max_prompt_tokens,
            log_level=(_env_str("LOG_LEVEL") or "INFO").upper(),
        )
