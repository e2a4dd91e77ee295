"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure depends on core types, never on services/
    - All external calls wrapped with timeout and error mapping (no retry)
"""
