"""Remote correction workflow client."""

from workflow.client import WorkflowClient

__all__ = ["WorkflowClient"]
