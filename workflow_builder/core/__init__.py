"""Core domain models: nodes, builders, actions and workflows."""

from workflow_builder.core.actions import (
    Action,
    Chmod,
    Delete,
    EmailAction,
    EmailActionBuilder,
    FSAction,
    FSActionBuilder,
    MapReduceAction,
    MapReduceActionBuilder,
    Mkdir,
    Move,
    Prepare,
    ShellAction,
    ShellActionBuilder,
    SubWorkflowAction,
    SubWorkflowActionBuilder,
    Touchz,
)
from workflow_builder.core.builder import ActionBuilderBase, NodeBuilderBase
from workflow_builder.core.dag import ValidationResult, WorkflowValidator
from workflow_builder.core.errors import (
    ActionMappingError,
    BuilderArgumentError,
    BuilderStateError,
    GraphStructureError,
    UnrecognizedActionError,
    WorkflowBuilderError,
    WorkflowValidationError,
)
from workflow_builder.core.modify_once import ModifyOnce
from workflow_builder.core.node import Condition, ErrorHandler, Node, NodeWithCondition
from workflow_builder.core.workflow import (
    Credential,
    Global,
    Parameter,
    Workflow,
    WorkflowBuilder,
)

__all__ = [
    "Action",
    "ActionBuilderBase",
    "ActionMappingError",
    "BuilderArgumentError",
    "BuilderStateError",
    "Chmod",
    "Condition",
    "Credential",
    "Delete",
    "EmailAction",
    "EmailActionBuilder",
    "ErrorHandler",
    "FSAction",
    "FSActionBuilder",
    "Global",
    "GraphStructureError",
    "MapReduceAction",
    "MapReduceActionBuilder",
    "Mkdir",
    "ModifyOnce",
    "Move",
    "Node",
    "NodeBuilderBase",
    "NodeWithCondition",
    "Parameter",
    "Prepare",
    "ShellAction",
    "ShellActionBuilder",
    "SubWorkflowAction",
    "SubWorkflowActionBuilder",
    "Touchz",
    "UnrecognizedActionError",
    "ValidationResult",
    "Workflow",
    "WorkflowBuilder",
    "WorkflowBuilderError",
    "WorkflowValidationError",
    "WorkflowValidator",
]
