"""
Shared service instances across the application.

Routes receive the store and the LLM client through these FastAPI
dependencies, so tests can swap either with `app.dependency_overrides`.
"""

from functools import lru_cache

from config import Config
from data.db_wrapper import get_db
from data.store import Store
from integrations.anthropic_client import LLMClient
from utils.errors import ConfigurationError


def get_store() -> Store:
    return get_db()


@lru_cache(maxsize=1)
def _shared_llm() -> LLMClient:
    return LLMClient()


def get_llm() -> LLMClient:
    return _shared_llm()


def require_credentials(require_llm: bool = True):
    """
    Dependency factory that fails fast with a presence map of missing secrets.

    Runs before any store or model client is built, so an operator sees
    exactly which variable is absent instead of a downstream failure.
    """
    def check():
        status = Config.credential_status(require_llm=require_llm)
        if not all(status.values()):
            raise ConfigurationError(status)
        return status
    return check
