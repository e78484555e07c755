"""
Serialization - GameState and Action to and from JSON-safe documents.

pydantic's TypeAdapter understands the frozen dataclasses directly, so the
engine types stay plain dataclasses and there is no parallel schema to
keep in sync.
"""

from __future__ import annotations
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter

from .action import Action
from .state import GameState


@lru_cache(maxsize=None)
def _state_adapter() -> TypeAdapter:
    return TypeAdapter(GameState)


@lru_cache(maxsize=None)
def _action_adapter() -> TypeAdapter:
    return TypeAdapter(Action)


def state_to_document(state: GameState) -> dict[str, Any]:
    """Dump a state to a dict that json.dumps accepts."""
    return _state_adapter().dump_python(state, mode="json")


def state_from_document(document: dict[str, Any]) -> GameState:
    """Rebuild a state from state_to_document output."""
    return _state_adapter().validate_python(document)


def action_to_document(action: Action) -> dict[str, Any]:
    return _action_adapter().dump_python(action, mode="json")


def action_from_document(document: dict[str, Any]) -> Action:
    return _action_adapter().validate_python(document)
