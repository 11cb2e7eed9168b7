from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
import logging
from pydantic import BaseModel, Field

from config.settings import Settings, get_settings
from kairos.completion import CompletionClient
from kairos.dashboard import KairosDashboard
from kairos.storage import SupabaseStore


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("kairos")

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "Config: model=%s supabase_set=%s openai_key_set=%s",
        settings.openai_model,
        settings.supabase_configured,
        settings.openai_configured,
    )
    app.state.http_client = httpx.Client(timeout=settings.request_timeout)
    yield
    app.state.http_client.close()


app = FastAPI(title="Kairos Learning Dashboard", version="1.0.0", lifespan=lifespan)

# CORS: allow local frontend during development
settings = get_settings()
if settings.app_env.lower() in {"dev", "development", "local"}:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class LearnBody(BaseModel):
    question: str = Field("", description="Free-text question typed into the dashboard")


def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_http_client(request: Request) -> httpx.Client:
    return request.app.state.http_client


def get_dashboard(
    settings: Settings = Depends(get_settings),
    http_client: httpx.Client = Depends(get_http_client),
) -> KairosDashboard:
    completion = (
        CompletionClient.from_settings(settings, http_client)
        if settings.openai_configured
        else None
    )
    store = (
        SupabaseStore.from_settings(settings, http_client)
        if settings.supabase_configured
        else None
    )
    return KairosDashboard(settings, completion, store)


def _render(dashboard: KairosDashboard) -> Dict[str, Any]:
    body = dashboard.state.model_dump()
    body["greeting"] = dashboard.greeting
    return body


@app.get("/")
def index() -> FileResponse:
    return FileResponse(STATIC_DIR / "index.html")


@app.get("/api/user")
def current_user(
    dashboard: KairosDashboard = Depends(get_dashboard),
    access_token: Optional[str] = Depends(bearer_token),
) -> Dict[str, Any]:
    dashboard.mount(access_token)
    return _render(dashboard)


@app.post("/api/learn")
def learn(
    req: LearnBody,
    dashboard: KairosDashboard = Depends(get_dashboard),
    access_token: Optional[str] = Depends(bearer_token),
) -> Dict[str, Any]:
    dashboard.mount(access_token)
    logger.info(
        "Incoming learn request: user=%s question_len=%s",
        dashboard.state.user.id if dashboard.state.user else None,
        len(req.question),
    )
    dashboard.handle_learn(req.question)
    logger.info("Learn request finished: solution_len=%s", len(dashboard.state.solution))
    return _render(dashboard)


@app.get("/health")
def health():
    return {"status": "ok"}
