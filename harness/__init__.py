"""
Scenario-driven performance acceptance harness.

Binds Given/When/Then step text to workload benchmarks and timing
assertions.  The pieces, leaves first:

- :mod:`harness.state`: immutable scenario state
- :mod:`harness.workload`: the contract a benchmarked action satisfies
- :mod:`harness.aggregator`: bounded error collection
- :mod:`harness.benchmark`: adaptive doubling benchmark loop
- :mod:`harness.thresholds`: per-item / per-operation verdicts
- :mod:`harness.orchestrator` and :mod:`harness.steps`: step binding
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Configure root logging the same way for the CLI and ad hoc runs."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(__name__).debug("Logging configured at level %s", logging.getLevelName(level))
