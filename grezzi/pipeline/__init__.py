"""
grezzi/pipeline: Per-group orchestration and the batch run.
"""

from .orchestrator import RunResult, cluster_all, run

__all__ = [
    "RunResult",
    "cluster_all",
    "run",
]
