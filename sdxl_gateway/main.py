from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

# Load project-root .env if present.
# Note: Uvicorn does not automatically load it unless started with --env-file.
_env_path = Path(__file__).resolve().parents[1] / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=_env_path, override=False)

from sdxl_gateway.core.bedrock.client import BedrockRuntime
from sdxl_gateway.core.config import Settings
from sdxl_gateway.core.errors.handlers import register_exception_handlers
from sdxl_gateway.core.log import configure_logging
from sdxl_gateway.domains.image_generation.router import router as image_router
from sdxl_gateway.lifespan import lifespan


def create_app(*, settings: Settings | None = None, bedrock: BedrockRuntime | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="SDXL Gateway", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.bedrock = bedrock

    register_exception_handlers(app)

    app.include_router(image_router, prefix="/v1")

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    async def readyz():
        bedrock_ready = getattr(app.state, "bedrock", None) is not None
        return {
            "server_ready": bedrock_ready,
            "bedrock_ready": bedrock_ready,
            "model_id": settings.model_id,
        }

    return app


app = create_app()
