"""
Pytest Configuration - Shared Fixtures

This file contains shared fixtures used across all test modules.
"""

import copy
import pytest
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def motion_config():
    """Default motion configuration snapshot."""
    from motion_comfort.utils.config import MotionConfig
    return MotionConfig()


@pytest.fixture
def full_config():
    """Full nested configuration, detached from the module defaults."""
    from motion_comfort.utils.config import DEFAULT_CONFIG
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def origin():
    from motion_comfort.shared.types import Vector3
    return Vector3(0.0, 0.0, 0.0)


@pytest.fixture
def identity():
    from motion_comfort.shared.types import Quaternion
    return Quaternion.identity()


@pytest.fixture
def up_axis():
    from motion_comfort.shared.types import Vector3
    return Vector3(0.0, 1.0, 0.0)
