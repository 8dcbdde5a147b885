"""Diagnostics — operational endpoints for checking error-reporting wiring.

Invariants:
    - debug-env reads os.environ at call time: it reports what the process sees,
      not what Settings resolved
    - test-error always raises; the error Guard produces the 500 and the report

Design Decisions:
    - boardId is a route parameter on test-error so the Guard's route-param
      extraction is exercised end-to-end
"""

import os

from fastapi import APIRouter

router = APIRouter(tags=["diagnostics"])

ENV_NAME_MARKERS = ("RUNTIME", "ERROR", "DATABASE", "PORT")


@router.get("/debug-env")
async def debug_env():
    """Snapshot of environment variables relevant to error reporting."""
    endpoint_url = os.environ.get("RUNTIME_ERROR_ENDPOINT_URL")
    variables = {
        key: value
        for key, value in os.environ.items()
        if any(marker in key for marker in ENV_NAME_MARKERS)
    }
    return {
        "RUNTIME_ERROR_ENDPOINT_URL": endpoint_url or "NOT SET",
        "EnvironmentVariables": variables,
        "Message": "Use this endpoint to verify RUNTIME_ERROR_ENDPOINT_URL is set correctly",
    }


@router.get("/test-error/{boardId}")
async def test_error(boardId: str):  # noqa: N803
    raise RuntimeError(
        f"Test exception for middleware debugging (BoardId: {boardId}) - "
        "this should be caught by the error reporting middleware",
    )
