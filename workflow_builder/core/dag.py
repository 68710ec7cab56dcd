"""
Structural validation of a workflow's DAG.

Implements cycle detection using Kahn's algorithm and checks the rules the
lowering step relies on.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Optional

from workflow_builder.core.errors import GraphStructureError
from workflow_builder.core.node import Node
from workflow_builder.core.workflow import Workflow


@dataclass
class ValidationIssue:
    """Represents a single validation error or warning."""
    
    code: str
    message: str
    node_name: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationResult:
    """Result of workflow validation."""
    
    is_valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    
    # Populated on successful validation
    topological_order: list[Node] = field(default_factory=list)
    
    def add_error(
        self,
        code: str,
        message: str,
        node_name: Optional[str] = None,
        **details: Any,
    ) -> None:
        """Add a validation error."""
        self.errors.append(ValidationIssue(code, message, node_name, details))
        self.is_valid = False
    
    def add_warning(
        self,
        code: str,
        message: str,
        node_name: Optional[str] = None,
        **details: Any,
    ) -> None:
        """Add a validation warning."""
        self.warnings.append(ValidationIssue(code, message, node_name, details))
    
    def raise_if_invalid(self) -> None:
        """
        Raise the first error, listing all of them in the message.
        
        Raises:
            GraphStructureError: If any error was recorded
        """
        if self.is_valid:
            return
        
        first = self.errors[0]
        raise GraphStructureError(
            "; ".join(error.message for error in self.errors),
            node_name=first.node_name,
            code=first.code,
        )


class WorkflowValidator:
    """
    Validates the structure of a workflow before it is lowered.
    
    Uses Kahn's algorithm for topological sorting and cycle detection.
    """
    
    def __init__(self, workflow: Workflow):
        self.workflow = workflow
        self._in_degree: dict[Node, int] = {}
        self._adjacency_list: dict[Node, list[Node]] = defaultdict(list)
        
        self._build_graph()
    
    def _build_graph(self) -> None:
        """Build internal graph representation."""
        members = set(self.workflow.nodes)
        
        for node in self.workflow.nodes:
            self._in_degree[node] = 0
        
        # Edges leaving the workflow's node set are ignored
        for node in self.workflow.nodes:
            for child in node.get_all_children():
                if child in members:
                    self._adjacency_list[node].append(child)
                    self._in_degree[child] += 1
    
    def validate(self) -> ValidationResult:
        """
        Perform full validation of the workflow.
        
        Returns:
            ValidationResult with errors, warnings and the topological order
        """
        result = ValidationResult(is_valid=True)
        
        self._validate_decisions(result)
        self._validate_error_handlers(result)
        self._detect_cycles_and_compute_order(result)
        
        return result
    
    def _validate_decisions(self, result: ValidationResult) -> None:
        """Every node with conditional children needs exactly one default child."""
        for node in self.workflow.nodes:
            conditional = node.get_children_with_conditions()
            if not conditional:
                continue
            
            if node.get_default_child() is None:
                result.add_error(
                    code="MISSING_DEFAULT_BRANCH",
                    message=f"Node '{node.name}' has conditional children but no default child",
                    node_name=node.name,
                )
            elif len(conditional) == 1:
                result.add_warning(
                    code="DEFAULT_ONLY_DECISION",
                    message=f"Node '{node.name}' branches on a decision with only a default child",
                    node_name=node.name,
                )
    
    def _validate_error_handlers(self, result: ValidationResult) -> None:
        """Error handler nodes must stay outside the DAG."""
        members = set(self.workflow.nodes)
        
        for node in self.workflow.nodes:
            handler = node.error_handler
            if handler is not None and handler.handler_node in members:
                result.add_error(
                    code="ERROR_HANDLER_IN_DAG",
                    message=f"Error handler '{handler.name}' of node '{node.name}' "
                            "is also part of the workflow DAG",
                    node_name=node.name,
                    handler=handler.name,
                )
    
    def _detect_cycles_and_compute_order(self, result: ValidationResult) -> None:
        """
        Detect cycles using Kahn's algorithm and compute topological order.
        
        Kahn's Algorithm:
        1. Find all nodes with in-degree 0
        2. Remove them and their outgoing edges
        3. Repeat until no nodes left
        4. If nodes remain, there's a cycle
        """
        in_degree = self._in_degree.copy()
        
        queue = deque([
            node for node, degree in in_degree.items()
            if degree == 0
        ])
        
        topological_order: list[Node] = []
        
        while queue:
            node = queue.popleft()
            topological_order.append(node)
            
            for neighbor in self._adjacency_list[node]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)
        
        if len(topological_order) != len(in_degree):
            remaining = [node.name for node in in_degree if node not in topological_order]
            result.add_error(
                code="CYCLE_DETECTED",
                message=f"Workflow contains circular dependencies involving nodes: {remaining}",
                cycle_nodes=remaining,
            )
        else:
            result.topological_order = topological_order
