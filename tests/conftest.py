"""Shared fixtures: the manifest variants and a quiet console."""
import pytest

from betterdeploy.ui.console import Console, set_console

REDIS_URL = "git://github.com/Tim-Smart/node-redis.git"
TEST_LOG_LINE = "Function test done."


def run_tests(done):
    print(TEST_LOG_LINE)
    done()


@pytest.fixture(autouse=True)
def console():
    c = Console(debug=False)
    set_console(c)
    return c


@pytest.fixture
def variant_a():
    """Single callable `command`."""
    return {
        "id3": {"type": "npm"},
        "node-redis": {"type": "git", "path": REDIS_URL},
        "run tests": {"type": "command", "command": run_tests},
    }


@pytest.fixture
def variant_b():
    """`commands` list: callable, then shell text."""
    return {
        "id3": {"type": "npm"},
        "node-redis": {"type": "git", "path": REDIS_URL},
        "run tests": {"type": "command", "commands": [run_tests, "rm -rf .deploy"]},
    }


@pytest.fixture
def mixture():
    """Variant A plus a separate textual cleanup step."""
    return {
        "id3": {"type": "npm"},
        "node-redis": {"type": "git", "path": REDIS_URL},
        "run tests": {"type": "command", "command": run_tests},
        "echo": {"type": "command", "command": "rm -rf .deploy"},
    }
