"""API Layer — FastAPI routes, error handlers and the error Guard middleware.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON (or an empty 204)

Design Decisions:
    - Thin routes delegate to services/
"""
