"""
High-level use cases for the Claudia API.

Each service module orchestrates the JSON repositories to implement the
record, settings and project operations. Routers call these services instead
of touching the JSON documents directly.
"""
