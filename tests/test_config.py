import os
import tempfile
from typing import Dict

# Values the application settings must see before any app module is imported
TEST_ENVIRONMENT: Dict[str, str] = {
    "ENVIRONMENT": "testing",
    "APP_NAME": "SlotSwap Test Application",
    "LOG_LEVEL": "warning",
    "LOG_DIR": os.path.join(tempfile.gettempdir(), "slotswap-test-logs"),
    "JWT_SECRET": "test-secret-key-with-enough-length-for-hs256",
    "JWT_ISSUER": "slotswap-test",
    "JWT_AUDIENCE": "slotswap-test-clients",
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
}


def apply_test_environment() -> None:
    """Force the test values into os.environ (overriding any .env file)."""
    os.environ.update(TEST_ENVIRONMENT)


def sqlite_url(directory: str) -> str:
    """File-backed SQLite URL so each session gets its own connection."""
    return f"sqlite+aiosqlite:///{os.path.join(directory, 'slotswap_test.db')}"
