"""
Core utilities shared across the Claudia API.

This package hosts configuration helpers (env vars, storage paths) and
cross-cutting concerns such as logging. Routers and services depend on these
primitives instead of reading os.environ directly.
"""
