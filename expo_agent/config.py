# Role: Central configuration module. Loads .env into environment variables and computes runtime settings
# (DEBUG, port, upstream model/key/base URL, timeout, CORS, static dir).
# Importers read expo_agent.config.<NAME> at construction time instead of threading settings through every call.

from __future__ import annotations

import os
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
DEFAULT_MODEL = "qwen-plus"

DEBUG: bool = False
HOST: str = "0.0.0.0"
PORT: int = 3000
TONGYI_MODEL: str = DEFAULT_MODEL
DASHSCOPE_API_KEY: Optional[str] = None
DASHSCOPE_BASE_URL: str = DEFAULT_BASE_URL
LLM_TIMEOUT_SECONDS: float = 120.0
CORS_ORIGINS: List[str] = ["*"]
STATIC_DIR: str = "public"


def _truthy(value: str) -> bool:
    # Key line: accept common truthy values.
    return value.lower() in {"1", "true", "yes"}


def _split_origins(value: str) -> List[str]:
    origins = [o.strip() for o in value.split(",") if o.strip()]
    return origins or ["*"]


def load_env() -> None:
    """
    Load .env into os.environ, then recompute every setting.
    This makes settings correct even if load_env() is called after import.
    """
    global DEBUG, HOST, PORT, TONGYI_MODEL, DASHSCOPE_API_KEY, DASHSCOPE_BASE_URL
    global LLM_TIMEOUT_SECONDS, CORS_ORIGINS, STATIC_DIR
    load_dotenv()

    DEBUG = _truthy(os.getenv("DEBUG", "0"))
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "3000"))
    TONGYI_MODEL = os.getenv("TONGYI_MODEL") or DEFAULT_MODEL
    DASHSCOPE_API_KEY = os.getenv("DASHSCOPE_API_KEY") or None
    DASHSCOPE_BASE_URL = os.getenv("DASHSCOPE_BASE_URL") or DEFAULT_BASE_URL
    LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "120"))
    CORS_ORIGINS = _split_origins(os.getenv("CORS_ORIGINS", "*"))
    STATIC_DIR = os.getenv("STATIC_DIR", "public")
