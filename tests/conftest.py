"""Shared fixtures for the tessera test suite."""

import os

import pytest

from tessera.core.config import reset_config
from tessera.templates.views import ViewRegistry


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts from defaults, without TESSERA_* variables."""
    for key in list(os.environ):
        if key.startswith("TESSERA_"):
            monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def views():
    """Registry with a card view that declares attributes and arrays."""
    registry = ViewRegistry()
    registry.register(
        "card",
        "<div class=\"card\">{{@heading}}{{@content}}</div>",
        element="card",
        attributes="heading footer",
        arrays="item/items",
    )
    registry.register("app:button", "<button>{{@content}}</button>")
    return registry
