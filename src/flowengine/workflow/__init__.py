# src/flowengine/workflow/__init__.py
"""Corpo do workflow por split, continuação e agregação de métricas."""

from .aggregate import aggregate_results
from .orchestrator import WorkflowOutput, continue_workflow, resume_workflow, run_workflow
from .single import build_eval_data, run_workflow_single

__all__ = [
    "aggregate_results",
    "build_eval_data",
    "run_workflow_single",
    "run_workflow",
    "continue_workflow",
    "resume_workflow",
    "WorkflowOutput",
]
