"""
Breeze view templates.

Compiles templates with ``{{ }}`` interpolation, ``@if``/``@unless``
conditionals and ``@foreach`` loops into immutable trees, caches them by
content fingerprint and renders them against JSON-like data.

Usage::

    from breeze import ViewEngine, EngineConfig

    engine = ViewEngine(EngineConfig(views_path=Path("resources/views")))
    html = engine.render("home", {"user": {"name": "Ada"}})
"""

from .config import EngineConfig, load_config
from .context import Context
from .engine import ViewEngine
from .errors import BreezeUserError, ConfigError, EvaluationError, ExpressionError
from .template import parse_template, render

__all__ = [
    "ViewEngine",
    "EngineConfig",
    "load_config",
    "Context",
    "parse_template",
    "render",
    "BreezeUserError",
    "ConfigError",
    "EvaluationError",
    "ExpressionError",
]
