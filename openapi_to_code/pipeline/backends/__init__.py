"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from .base import CodeBackend
from .go_backend import GoBackend
from .python_backend import PythonBackend
from .typescript_backend import TypeScriptBackend

BACKENDS: dict[str, type[CodeBackend]] = {
    "go": GoBackend,
    "python": PythonBackend,
    "typescript": TypeScriptBackend,
}

__all__ = [
    "BACKENDS",
    "CodeBackend",
    "GoBackend",
    "PythonBackend",
    "TypeScriptBackend",
]
