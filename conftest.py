import os

# Settings are read at import time by the DI container.
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///./test_ledger.db")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
