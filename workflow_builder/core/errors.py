"""
Exception taxonomy for workflow construction, lowering and translation.

Every error also derives from the closest built-in exception so callers may
catch either the library type or the built-in one.
"""

from typing import Optional


class WorkflowBuilderError(Exception):
    """Base class for all workflow builder errors."""


class BuilderStateError(WorkflowBuilderError, RuntimeError):
    """Raised when a write-once builder field is set a second time."""
    
    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message)


class BuilderArgumentError(WorkflowBuilderError, ValueError):
    """Raised when a builder is given an argument it cannot accept."""


class GraphStructureError(WorkflowBuilderError, RuntimeError):
    """Raised when a graph mutation or lowering would break a structural rule."""
    
    def __init__(self, message: str, node_name: Optional[str] = None, code: Optional[str] = None):
        self.node_name = node_name
        self.code = code
        super().__init__(message)


class WorkflowValidationError(WorkflowBuilderError, ValueError):
    """Raised when the nodes of a workflow do not have pairwise distinct names."""
    
    def __init__(self, node_name: str, workflow_name: Optional[str]):
        self.node_name = node_name
        self.workflow_name = workflow_name
        super().__init__(
            f"Duplicate name '{node_name}' found in workflow '{workflow_name}'"
        )


class UnrecognizedActionError(WorkflowBuilderError, TypeError):
    """Raised when a node's type is not among the registered action kinds."""
    
    def __init__(self, node_name: str, node_type: type):
        self.node_name = node_name
        self.node_type = node_type
        super().__init__(
            f"Node '{node_name}' has unrecognized action kind {node_type.__name__}"
        )


class ActionMappingError(WorkflowBuilderError, RuntimeError):
    """Raised when a registered action kind does not yield an action payload."""
    
    def __init__(self, node_name: str, message: str):
        self.node_name = node_name
        super().__init__(f"Mapping node '{node_name}' failed: {message}")
