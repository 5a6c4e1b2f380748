from __future__ import annotations  # Bind gateway registry keys to configured LLM routes

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Type

from pydantic import BaseModel

from config.registry import GATEWAY_KEYS, bind_model
from config.routes import AppConfig, LlmRoute, load_config, resolve_registry
from llm_gateway import call

logger = logging.getLogger(__name__)


def _route_caller(route: LlmRoute) -> Callable[..., Any]:  # Adapt llm_gateway.call to the registry signature
    def _call(*, prompt: str, schema: Type[BaseModel], **_: Any) -> BaseModel:
        return call(prompt, schema, cfg=route)

    return _call


def bind_llm_routes(cfg: AppConfig) -> Dict[str, LlmRoute]:  # Bind every gateway key to its route
    routes = resolve_registry(cfg, GATEWAY_KEYS)
    for key, route in routes.items():
        bind_model(key, _route_caller(route))
        logger.info("Bound %s to route=%s model=%s", key, route.name, route.model)
    return routes


def bind_from_file(path: Path) -> bool:  # Load routes from disk when a config file is present
    if not path.exists():
        logger.warning("LLM config %s not found; gateway will serve fallback content", path)
        return False
    bind_llm_routes(load_config(path))
    return True


__all__ = ["bind_from_file", "bind_llm_routes"]
