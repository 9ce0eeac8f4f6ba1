"""Target graph: declaration, planning and execution."""

from shipit.graph.executor import GraphExecutor, RunReport, TargetResult, TargetStatus
from shipit.graph.planner import plan
from shipit.graph.registry import TargetGraph
from shipit.graph.target import Predicate, Requirement, Target, TargetContext, branch_is, required

__all__ = [
    "GraphExecutor",
    "Predicate",
    "Requirement",
    "RunReport",
    "Target",
    "TargetContext",
    "TargetGraph",
    "TargetResult",
    "TargetStatus",
    "branch_is",
    "plan",
    "required",
]
