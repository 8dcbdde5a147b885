"""Root conftest — shared test configuration."""

import os

# Ensure tests never post reports to a real endpoint or read a real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["RUNTIME_ERROR_ENDPOINT_URL"] = ""
os.environ["API_BASE_URL"] = ""
