"""Pytest configuration and shared fixtures."""

# Load environment variables from .env file at test startup
# so CPQ_* settings are visible before fixtures are created
from dotenv import load_dotenv
load_dotenv()

# Import all fixtures from the fixture modules
pytest_plugins = [
    "tests.fixtures.catalog",
    "tests.fixtures.sessions",
    "tests.fixtures.api",
]
