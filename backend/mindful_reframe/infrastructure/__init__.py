"""Infrastructure Layer — model client, database access and logging setup.

Invariants:
    - Infrastructure depends on core types and errors, never on services/ or api/
    - All external calls wrapped with retry/timeout/error mapping

Design Decisions:
    - Resilient wrappers over raw clients: callers see ReframeError subclasses only
    - Stores map ORM rows to core dataclasses at the boundary
"""
