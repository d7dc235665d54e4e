import logging
import os
from contextlib import asynccontextmanager, contextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .call import CallClient, DailyCall
from .config import Capabilities, ClientConfig
from .models import RoomChoice, SessionConfig, SessionView
from .observability import setup_logging
from .orchestrator import Provisioner, SessionOrchestrator, TransitionError
from .provisioning import ProvisioningClient

logger = logging.getLogger("voice-client")


def create_app(
    config: Optional[ClientConfig] = None,
    room_url: Optional[str] = None,
    call: Optional[CallClient] = None,
    provisioning: Optional[Provisioner] = None,
) -> FastAPI:
    config = config or ClientConfig.from_env()
    if room_url is None:
        room_url = os.environ.get("ROOM_URL") or None
    capabilities = Capabilities.resolve(config, room_url)

    if provisioning is None and config.provisioning_configured:
        provisioning = ProvisioningClient(config.server_url, config.server_auth)

    orchestrator = SessionOrchestrator(
        config=config,
        capabilities=capabilities,
        call=call or DailyCall(),
        provisioning=provisioning,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "client ready state=%s auto_room_creation=%s",
            orchestrator.state.value,
            capabilities.auto_room_creation,
        )
        yield
        await orchestrator.shutdown()
        if isinstance(provisioning, ProvisioningClient):
            await provisioning.close()

    app = FastAPI(title=config.app_title or "Voice Client", lifespan=lifespan)
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/session", response_model=SessionView)
    def get_session(request: Request):
        return _orchestrator(request).view()

    @app.post("/session/room", response_model=SessionView)
    def confirm_room(choice: RoomChoice, request: Request):
        orch = _orchestrator(request)
        with _transition_guard():
            orch.confirm_room(choice.room_url)
        return orch.view()

    @app.put("/session/config", response_model=SessionView)
    def configure(session_config: SessionConfig, request: Request):
        orch = _orchestrator(request)
        with _transition_guard():
            orch.configure(session_config)
        return orch.view()

    @app.post("/session/start", response_model=SessionView, status_code=202)
    async def start(request: Request):
        orch = _orchestrator(request)
        with _transition_guard():
            orch.request_start()
        return orch.view()

    @app.post("/session/leave", response_model=SessionView)
    async def leave(request: Request):
        orch = _orchestrator(request)
        with _transition_guard():
            await orch.leave()
        return orch.view()

    return app


def _orchestrator(request: Request) -> SessionOrchestrator:
    return request.app.state.orchestrator


@contextmanager
def _transition_guard():
    try:
        yield
    except TransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


setup_logging(os.environ.get("LOG_LEVEL", "INFO"))
app = create_app()
