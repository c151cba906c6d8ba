"""
Scenario-level tests for the harness.

Scenarios run through the orchestrator and the game step bindings with
a fake clock, so timing verdicts are exact.
"""
