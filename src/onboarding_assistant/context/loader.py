"""Load route contexts from a directory of JSON files (one file per route)."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import ValidationError

from ..schemas import RouteContext
from .base import normalize_route

logger = logging.getLogger(__name__)


def load_route_contexts(directory: str | Path) -> Mapping[str, RouteContext]:
    """
    Read every ``*.json`` file in ``directory`` into a ``RouteContext``.

    The result is keyed by normalized route and is read-only. A missing
    directory yields an empty mapping. Files that are not valid JSON, do
    not match the context shape, or carry no route are skipped with a
    warning. When two files declare the same route the later file (by name)
    wins.
    """
    path = Path(directory)
    contexts: dict[str, RouteContext] = {}

    if not path.is_dir():
        logger.warning("[CONTEXT] Data directory not found: %s", path)
        return MappingProxyType(contexts)

    for file in sorted(path.glob("*.json")):
        try:
            payload = json.loads(file.read_text(encoding="utf-8"))
            context = RouteContext.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("[CONTEXT] Skipping %s: %s", file.name, e)
            continue

        route = normalize_route(context.route)
        if not route:
            logger.warning("[CONTEXT] Skipping %s: no route declared", file.name)
            continue

        contexts[route] = context.model_copy(update={"route": route})

    logger.info("[CONTEXT] Loaded %d route contexts from %s", len(contexts), path)
    return MappingProxyType(contexts)
