"""Services Layer — data access used by the route handlers.

Invariants:
    - Services receive an AsyncSession; they never create engines or sessions
"""
