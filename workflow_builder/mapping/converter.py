"""
Translation of an intermediate graph into the workflow document.

Every graph node becomes one document element, in graph order. Actions get
``ok``/``error`` transitions by name: ``ok`` leads to the node's child (or
the end element), ``error`` leads to the node's error handler or to the one
shared kill element.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from workflow_builder.config import Settings, get_settings
from workflow_builder.core.actions import (
    EmailAction,
    FSAction,
    MapReduceAction,
    ShellAction,
    SubWorkflowAction,
)
from workflow_builder.core.errors import (
    ActionMappingError,
    GraphStructureError,
    UnrecognizedActionError,
)
from workflow_builder.core.node import Node
from workflow_builder.core.workflow import Workflow
from workflow_builder.graph.nodes import GraphNode, IntermediateGraph, NodeKind
from workflow_builder.mapping.document import (
    ActionElement,
    ActionTransition,
    CaseElement,
    CredentialElement,
    DecisionElement,
    DefaultElement,
    DocumentElement,
    EmailElement,
    EndElement,
    ForkElement,
    ForkPathElement,
    FSElement,
    GlobalElement,
    JoinElement,
    KillElement,
    MapReduceElement,
    ParameterElement,
    ShellElement,
    StartElement,
    SubWorkflowElement,
    SwitchElement,
    WorkflowApp,
)

logger = logging.getLogger(__name__)


# Action kind -> payload element it maps onto
ACTION_ELEMENTS: dict[type, type[DocumentElement]] = {
    EmailAction: EmailElement,
    FSAction: FSElement,
    MapReduceAction: MapReduceElement,
    ShellAction: ShellElement,
    SubWorkflowAction: SubWorkflowElement,
}

# Payload element -> ActionElement field holding it
PAYLOAD_FIELDS: dict[type[DocumentElement], str] = {
    EmailElement: "email",
    FSElement: "fs",
    MapReduceElement: "map_reduce",
    ShellElement: "shell",
    SubWorkflowElement: "sub_workflow",
}


def map_action_payload(node: Node) -> tuple[str, DocumentElement]:
    """
    Map an action onto its payload element.
    
    Returns:
        The ActionElement field name and the payload
    
    Raises:
        UnrecognizedActionError: If the node's kind is not registered
        ActionMappingError: If the registered kind yields no payload
    """
    element_type = None
    for cls in type(node).__mro__:
        element_type = ACTION_ELEMENTS.get(cls)
        if element_type is not None:
            break
    
    if element_type is None:
        raise UnrecognizedActionError(node.name, type(node))
    
    try:
        payload = element_type.model_validate(node, from_attributes=True)
    except ValidationError as e:
        raise ActionMappingError(node.name, str(e)) from e
    
    field_name = PAYLOAD_FIELDS.get(element_type)
    if field_name is None:
        raise ActionMappingError(
            node.name, f"no action element field accepts {element_type.__name__}"
        )
    
    return field_name, payload


class GraphToDocumentConverter:
    """Converts an IntermediateGraph into a WorkflowApp document."""
    
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
    
    def convert(self, graph: IntermediateGraph, workflow: Optional[Workflow] = None) -> WorkflowApp:
        """
        Build the document for a lowered graph.
        
        The workflow, when given, contributes its parameters, global section
        and credentials.
        
        Raises:
            UnrecognizedActionError: If an action kind is not registered
            ActionMappingError: If an action cannot be mapped to its payload
            GraphStructureError: If the graph is not fully connected
        """
        kill = KillElement(name=graph.kill.name, message=self.settings.document.kill_message)
        end_name = graph.end.name
        
        if graph.start.child is None:
            raise GraphStructureError(
                f"Start node of graph '{graph.name}' has no child",
                node_name=graph.start.name,
            )
        
        nodes: list = [kill]
        handlers: dict[str, Node] = {}
        
        for graph_node in graph:
            if graph_node.kind == NodeKind.ACTION:
                handler = self._convert_error_handler(graph_node, graph, kill, handlers)
                if handler is not None:
                    nodes.append(handler)
                nodes.append(self._convert_action(graph_node, end_name, kill))
            elif graph_node.kind == NodeKind.DECISION:
                nodes.append(self._convert_decision(graph_node))
            elif graph_node.kind == NodeKind.FORK:
                nodes.append(ForkElement(
                    name=graph_node.name,
                    paths=[ForkPathElement(start=child) for child in graph_node.children],
                ))
            elif graph_node.kind == NodeKind.JOIN:
                nodes.append(JoinElement(name=graph_node.name, to=graph_node.child or end_name))
        
        document = WorkflowApp(
            name=graph.name,
            start=StartElement(to=graph.start.child),
            nodes=nodes,
            end=EndElement(name=end_name),
            **self._workflow_sections(workflow),
        )
        
        logger.info(f"Converted graph '{graph.name}' into a document with {len(nodes)} elements")
        return document
    
    def _convert_action(self, graph_node: GraphNode, end_name: str, kill: KillElement) -> ActionElement:
        real_node = graph_node.real_node
        field_name, payload = map_action_payload(real_node)
        
        if real_node.error_handler is not None:
            error_to = real_node.error_handler.name
        else:
            error_to = kill.name
        
        return ActionElement(
            name=graph_node.name,
            ok=ActionTransition(to=graph_node.child or end_name),
            error=ActionTransition(to=error_to),
            **{field_name: payload},
        )
    
    def _convert_error_handler(
        self,
        graph_node: GraphNode,
        graph: IntermediateGraph,
        kill: KillElement,
        handlers: dict[str, Node],
    ) -> Optional[ActionElement]:
        """Create the handler element the first time a handler is seen."""
        error_handler = graph_node.real_node.error_handler
        if error_handler is None:
            return None
        
        handler_node = error_handler.handler_node
        known = handlers.get(handler_node.name)
        if known is handler_node:
            return None
        if known is not None or handler_node.name in graph:
            raise ActionMappingError(
                handler_node.name,
                "error handler name collides with another element of the document",
            )
        
        handlers[handler_node.name] = handler_node
        field_name, payload = map_action_payload(handler_node)
        
        # The handler's own edges are not followed: success and failure both kill
        return ActionElement(
            name=handler_node.name,
            ok=ActionTransition(to=kill.name),
            error=ActionTransition(to=kill.name),
            **{field_name: payload},
        )
    
    @staticmethod
    def _convert_decision(graph_node: GraphNode) -> DecisionElement:
        default = graph_node.default_child
        if default is None:
            raise GraphStructureError(
                f"Decision node '{graph_node.name}' has no default child",
                node_name=graph_node.name,
                code="MISSING_DEFAULT_BRANCH",
            )
        
        cases = [
            CaseElement(to=child, condition=condition.value)
            for child, condition in graph_node.conditional_children
            if not condition.is_default
        ]
        return DecisionElement(
            name=graph_node.name,
            switch=SwitchElement(cases=cases, default=DefaultElement(to=default)),
        )
    
    @staticmethod
    def _workflow_sections(workflow: Optional[Workflow]) -> dict:
        if workflow is None:
            return {}
        
        sections: dict = {
            "parameters": [
                ParameterElement.model_validate(parameter, from_attributes=True)
                for parameter in workflow.parameters
            ],
            "credentials": [
                CredentialElement.model_validate(credential, from_attributes=True)
                for credential in workflow.credentials
            ],
        }
        if workflow.global_ is not None:
            sections["global_"] = GlobalElement.model_validate(workflow.global_, from_attributes=True)
        return sections


def convert_graph(
    graph: IntermediateGraph,
    workflow: Optional[Workflow] = None,
    settings: Optional[Settings] = None,
) -> WorkflowApp:
    """Convert a lowered graph into its workflow document."""
    return GraphToDocumentConverter(settings).convert(graph, workflow)
