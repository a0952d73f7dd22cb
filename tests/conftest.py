"""
Test environment.

Runs before any test module imports the application, so the settings cache
picks up a throwaway SQLite database and data directory.
"""

import os
import tempfile
from pathlib import Path

TEST_ROOT = Path(tempfile.mkdtemp(prefix="tableorder-tests-"))
TEST_DB_PATH = TEST_ROOT / "test.db"

os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["DATA_DIRECTORY"] = str(TEST_ROOT / "data")
os.environ["ADMIN_PASSWORD"] = "letmein"
os.environ["AI_BASE_DELAY_SECONDS"] = "0"
os.environ.pop("DEBUG", None)
