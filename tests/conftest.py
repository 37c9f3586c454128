"""
Pytest configuration for listmaker tests.

Makes the package importable from a source checkout and resets the global
settings and performance registry around every test.
"""

import sys
from pathlib import Path

# Add the project root to the Python path
project_dir = Path(__file__).parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

import pytest

from listmaker import utils
from listmaker.models import FluentSettings


@pytest.fixture(autouse=True)
def reset_state():
    """Start every test from default settings and an empty metrics registry"""
    utils.configure(FluentSettings())
    utils.clear_performance_metrics()
    yield
    utils.configure(FluentSettings())
    utils.clear_performance_metrics()


@pytest.fixture
def strict_mode():
    """Raise on re-iteration of single-pass sources"""
    return utils.configure(strict_single_pass=True)


@pytest.fixture
def words():
    return ["1", "22", "333", "4444"]


def natural(left, right):
    return (left > right) - (left < right)


@pytest.fixture
def natural_order():
    """cmp-style natural ordering"""
    return natural
