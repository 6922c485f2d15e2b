"""
TaskFlow - dependency-aware task orchestration.

Turns a flat task plan into a validated DAG, a critical path, parallel groups
and priority/workload advice.
"""

__version__ = "0.1.0"
__author__ = "TaskFlow Team"

from taskflow.orchestration.engine import OrchestrationEngine

__all__ = ["OrchestrationEngine", "__version__"]
