"""Ecosystem metadata extractors and their fixed priority order."""

from __future__ import annotations

from typing import Callable, List, Sequence

from .base import Extractor, safe_extract
from .docker import DockerExtractor
from .make import MakeExtractor
from .node import NodeExtractor
from .python import PythonExtractor
from .rust import RustExtractor

# Insertion order is the priority order used to pick the project type.
_BUILTIN_FACTORIES: dict[str, Callable[[], Extractor]] = {
    "node": NodeExtractor,
    "python": PythonExtractor,
    "rust": RustExtractor,
    "make": MakeExtractor,
    "docker": DockerExtractor,
}


def default_extractors(enabled: Sequence[str] | None = None) -> List[Extractor]:
    """Return extractor instances in priority order, optionally limited to ``enabled``."""
    if enabled is None:
        return [factory() for factory in _BUILTIN_FACTORIES.values()]

    requested = {name.lower() for name in enabled}
    unknown = requested.difference(_BUILTIN_FACTORIES)
    if unknown:
        raise ValueError(f"Unknown extractors requested: {', '.join(sorted(unknown))}")
    return [factory() for name, factory in _BUILTIN_FACTORIES.items() if name in requested]


__all__ = [
    "DockerExtractor",
    "Extractor",
    "MakeExtractor",
    "NodeExtractor",
    "PythonExtractor",
    "RustExtractor",
    "default_extractors",
    "safe_extract",
]
