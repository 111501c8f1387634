from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from sdxl_gateway.core.errors.exceptions import SerializationError


@dataclass(frozen=True)
class RawRequest:
    body: str
    query: Mapping[str, str] | None = None
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GenerationPayload:
    prompt: str
    cfg_scale: float
    steps: int
    seed: int
    width: int
    height: int

    def to_wire(self) -> dict[str, Any]:
        return {
            "text_prompts": [{"text": self.prompt}],
            "cfg_scale": self.cfg_scale,
            "seed": self.seed,
            "steps": self.steps,
            "width": self.width,
            "height": self.height,
        }


def serialize_payload(payload: GenerationPayload) -> bytes:
    try:
        return json.dumps(payload.to_wire(), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"failed to marshal JSON: {exc}", cause=exc) from exc


class Artifact(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base64: str
    finish_reason: str | None = Field(default=None, alias="finishReason")


class BedrockResponse(BaseModel):
    result: str | None = None
    artifacts: list[Artifact] = Field(default_factory=list)
