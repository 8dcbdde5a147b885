"""Core Layer — pure logic with no I/O.

Invariants:
    - Nothing here opens sockets, touches the database, or reads os.environ
    - Every function is unit-testable with plain values

Design Decisions:
    - Request-derived values arrive as plain mappings, not Starlette objects,
      so extraction rules are testable without an ASGI app
"""
