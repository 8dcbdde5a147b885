"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from api/ (no upward dependencies)
    - All outbound calls carry an explicit timeout

Design Decisions:
    - Database, logging and the error-report client live side by side: each wraps
      one external collaborator behind a small surface
"""
