"""Workflow document model and the translator that produces it."""

from workflow_builder.mapping.converter import (
    ACTION_ELEMENTS,
    PAYLOAD_FIELDS,
    GraphToDocumentConverter,
    convert_graph,
    map_action_payload,
)
from workflow_builder.mapping.document import (
    ActionElement,
    ActionTransition,
    DecisionElement,
    DocumentElement,
    EndElement,
    ForkElement,
    JoinElement,
    KillElement,
    StartElement,
    WorkflowApp,
)

__all__ = [
    "ACTION_ELEMENTS",
    "PAYLOAD_FIELDS",
    "ActionElement",
    "ActionTransition",
    "DecisionElement",
    "DocumentElement",
    "EndElement",
    "ForkElement",
    "GraphToDocumentConverter",
    "JoinElement",
    "KillElement",
    "StartElement",
    "WorkflowApp",
    "convert_graph",
    "map_action_payload",
]
