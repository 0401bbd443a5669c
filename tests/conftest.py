# tests/conftest.py
"""
Global test bootstrap
- Pins a test JWT secret, 4 bcrypt rounds and a throwaway SQLite URL
- Keeps log output on the console only (no file sink)
- Pulls in the fixtures (repos, app, auth, db)

NOTE: env is set BEFORE anything imports `moviemeter`, so `settings` picks it up.
"""

from __future__ import annotations

import os

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("ENV", "development")
os.environ.setdefault("JWT_SECRET_KEY", "moviemeter-test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_TO_FILE", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_CREATE_ALL", "false")

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Fixtures
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *          # noqa: F401,F403,E402
from tests.fixtures.repos import *       # noqa: F401,F403,E402
from tests.fixtures.app import *         # noqa: F401,F403,E402
from tests.fixtures.auth import *        # noqa: F401,F403,E402
