"""
Scenario module collected by the suite runner.

Generates one test per scenario in the features directory, which comes
from the ``bdd_features_base_dir`` ini option.  The step definitions
live in :mod:`harness.bdd`.
"""

import pytest
from pytest_bdd import scenarios

pytestmark = pytest.mark.bdd

scenarios(".")
