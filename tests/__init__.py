"""
Test suite for the scenario performance harness.

This package contains:
- unit/: Tests of single harness components with a fake clock
- integration/: Whole scenarios driven through the step orchestrator
- bdd/: The feature files run through pytest-bdd
"""
