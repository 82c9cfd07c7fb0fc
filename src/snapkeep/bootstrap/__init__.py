"""Bootstrap (composition root) for SNAPKEEP.

Assembles the application at runtime: reads configuration, picks a store
backend and wires comparators and synchronizers to it.

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces/domain).
- This package may import: `snapkeep.adapters`, `snapkeep.service_layer`,
  `snapkeep.interfaces`, `snapkeep.domain`, and `snapkeep.config`.
- Inner layers must not import `snapkeep.bootstrap`.
"""

from .bootstrap import (
    AppContainer,
    bootstrap,
    build_comparator,
    build_store,
    build_synchronizer,
)

__all__ = [
    "AppContainer",
    "bootstrap",
    "build_comparator",
    "build_store",
    "build_synchronizer",
]
