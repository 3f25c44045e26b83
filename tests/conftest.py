"""Root pytest configuration.

Test Structure:
    tests/
    ├── fintrax/
    │   └── unit/
    │       ├── domain/          # Money, calendar, entities
    │       ├── application/     # Aggregates, observables, commands, engine
    │       ├── infrastructure/  # In-memory and SQLite-backed stores
    │       └── presentation/    # CLI
    └── shared/                  # Shared fixtures and helpers
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from fintrax_config import clear_settings_cache

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Load .env.dev for tests (same as local development)
CONFIG_DIR = PROJECT_ROOT / "config"
if (CONFIG_DIR / ".env.dev").exists():
    load_dotenv(CONFIG_DIR / ".env.dev")
elif (CONFIG_DIR / ".env").exists():
    load_dotenv(CONFIG_DIR / ".env")


@pytest.fixture(scope="session", autouse=True)
def configure_app_settings():
    """Start and finish the session with freshly loaded settings."""
    clear_settings_cache()
    yield
    clear_settings_cache()
