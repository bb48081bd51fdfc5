# Role: FastAPI app bootstrap. Loads environment config early, configures logging and CORS,
# registers the two chat transports, exposes health/info endpoints and optional static files.

import logging
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

import expo_agent.config as config
config.load_env()

from expo_agent.api.chat_stream import router as chat_stream_router
from expo_agent.api.chat_ws import router as chat_ws_router
from expo_agent.api.deps import get_controller
from expo_agent.core.flow_controller import RelayController

logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else logging.INFO,
    format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("expo_agent")

app = FastAPI(title="Expo Chat Agent", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(chat_stream_router)
app.include_router(chat_ws_router)


@app.get("/api")
def api_root() -> dict:
    # Role: quick discoverability for clients (where are the transports/health).
    return {
        "name": "Expo Chat Agent",
        "version": "0.1.0",
        "websocket": "/ws",
        "stream": "/api/chat-stream",
        "health": "/health",
    }


@app.get("/health")
def health(controller: RelayController = Depends(get_controller)) -> dict:
    return {
        "status": "ok",
        "active_sessions": len(controller.sessions),
        "model": controller.completion_client.model_name,
        "api_key_configured": controller.completion_client.has_credential(),
    }


# Static front-end last, so API routes take precedence over files at "/".
if Path(config.STATIC_DIR).is_dir():
    app.mount("/", StaticFiles(directory=config.STATIC_DIR, html=True), name="static")


def run() -> None:
    logger.info("Server running at http://localhost:%s", config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
