"""Adapters (infrastructure) for SNAPKEEP.

Provide concrete implementations of the interfaces: the markdown snapshot
codec, filesystem and in-memory snapshot stores, and built-in transforms.

Dependency rule: may import `snapkeep.domain` and `snapkeep.interfaces`; the
domain must not import this package.
"""
