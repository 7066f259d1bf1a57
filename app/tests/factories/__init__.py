"""Test data factories for deterministic test data generation."""

from tests.factories.commands import (
    make_argument,
    make_command_context,
    make_definition,
    make_responder,
    make_settings,
    make_tree,
)

__all__ = [
    "make_argument",
    "make_command_context",
    "make_definition",
    "make_responder",
    "make_settings",
    "make_tree",
]
