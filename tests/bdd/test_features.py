"""
Run every scenario in the packaged features directory.

The step definitions come from the ``harness.bdd`` plugin, loaded
through ``addopts``.
"""

import pytest
from pytest_bdd import scenarios

pytestmark = pytest.mark.bdd

scenarios(".")
