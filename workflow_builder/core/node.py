"""
User-facing graph vertices.

A node knows its parents from construction time on and learns its children
as later nodes declare it as a parent. Conditional edges carry a Condition,
which is either a labelled case or the default branch.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from workflow_builder.core.errors import (
    BuilderArgumentError,
    BuilderStateError,
    GraphStructureError,
)


@dataclass(frozen=True)
class Condition:
    """Label of a conditional edge. The default branch carries no label."""
    
    value: Optional[str] = None
    is_default: bool = False
    
    @classmethod
    def actual(cls, value: str) -> "Condition":
        """Create a labelled condition."""
        if not value:
            raise BuilderArgumentError(
                "Empty condition labels are reserved for the default branch"
            )
        return cls(value=value)
    
    @classmethod
    def default(cls) -> "Condition":
        """Create the default-branch condition."""
        return cls(is_default=True)
    
    def __str__(self) -> str:
        return "<default>" if self.is_default else str(self.value)


@dataclass(frozen=True)
class NodeWithCondition:
    """A node paired with the condition of the edge leading to or from it."""
    
    node: "Node"
    condition: Condition


class ErrorHandler:
    """Wraps the node that runs when an action fails."""
    
    def __init__(self, handler_node: "Node"):
        self._handler_node = handler_node
    
    @classmethod
    def build_error_handler(cls, handler_node: "Node") -> "ErrorHandler":
        """
        Create an error handler for the given node.
        
        Raises:
            BuilderArgumentError: If the handler node has parents
        """
        if handler_node.get_parents():
            raise BuilderArgumentError(
                f"Error handler node '{handler_node.name}' cannot have parents"
            )
        return cls(handler_node)
    
    @property
    def handler_node(self) -> "Node":
        return self._handler_node
    
    @property
    def name(self) -> str:
        return self._handler_node.name


class Node:
    """
    Base class of every buildable graph vertex.
    
    Parents are declared at construction and children are learned when a
    newly built node names this one as a parent. Edges only grow, and every
    child edge has a matching parent edge on the other node. A node holds
    either unconditional or conditional children, never both.
    
    Concurrency: building a node mutates the child lists of its parents, so
    sharing a parent between builders on different threads needs external
    synchronization by the caller.
    """
    
    def __init__(
        self,
        name: Optional[str],
        parents_without_conditions: Sequence["Node"] = (),
        parents_with_conditions: Sequence[NodeWithCondition] = (),
        error_handler: Optional[ErrorHandler] = None,
    ):
        if not name:
            raise BuilderStateError(
                f"Cannot build a {type(self).__name__} without a name",
                field_name="name",
            )
        
        self._name = name
        self._parents_without_conditions = tuple(parents_without_conditions)
        self._parents_with_conditions = tuple(parents_with_conditions)
        self._error_handler = error_handler
        
        self._children_without_conditions: list[Node] = []
        self._children_with_conditions: list[NodeWithCondition] = []
        
        self._link_to_parents()
    
    @property
    def name(self) -> str:
        return self._name
    
    @property
    def error_handler(self) -> Optional[ErrorHandler]:
        return self._error_handler
    
    @property
    def parents_without_conditions(self) -> tuple["Node", ...]:
        return self._parents_without_conditions
    
    @property
    def parents_with_conditions(self) -> tuple[NodeWithCondition, ...]:
        return self._parents_with_conditions
    
    def get_parents(self) -> tuple["Node", ...]:
        """Get unconditional parents followed by conditional parents."""
        return self._parents_without_conditions + tuple(
            parent.node for parent in self._parents_with_conditions
        )
    
    def get_all_children(self) -> tuple["Node", ...]:
        """Get unconditional children followed by conditional children."""
        return tuple(self._children_without_conditions) + tuple(
            child.node for child in self._children_with_conditions
        )
    
    def get_children_without_conditions(self) -> tuple["Node", ...]:
        return tuple(self._children_without_conditions)
    
    def get_children_with_conditions(self) -> tuple[NodeWithCondition, ...]:
        return tuple(self._children_with_conditions)
    
    def get_default_child(self) -> Optional["Node"]:
        """Get the child registered as the default branch, if any."""
        for child in self._children_with_conditions:
            if child.condition.is_default:
                return child.node
        return None
    
    def add_child(self, child: "Node") -> None:
        """
        Register an unconditional child and record this node as its parent.
        
        Raises:
            BuilderArgumentError: If the nodes are already connected
            GraphStructureError: If the node already has conditional children
        """
        self._check_not_connected(child)
        self._check_can_add_child(None)
        self._children_without_conditions.append(child)
        child._parents_without_conditions += (self,)
    
    def add_child_with_condition(self, child: "Node", condition: str) -> None:
        """
        Register a conditional child and record this node as its parent.
        
        Raises:
            BuilderArgumentError: If the nodes are already connected
            GraphStructureError: If the node already has unconditional children
        """
        self._add_conditional_child(child, Condition.actual(condition))
    
    def add_child_as_default_conditional(self, child: "Node") -> None:
        """
        Register the default-branch child and record this node as its parent.
        
        Raises:
            BuilderArgumentError: If the nodes are already connected
            GraphStructureError: If the node has unconditional children or
                already has a default child
        """
        self._add_conditional_child(child, Condition.default())
    
    def _add_conditional_child(self, child: "Node", condition: Condition) -> None:
        self._check_not_connected(child)
        self._check_can_add_child(condition)
        self._children_with_conditions.append(NodeWithCondition(child, condition))
        child._parents_with_conditions += (NodeWithCondition(self, condition),)
    
    def _check_not_connected(self, child: "Node") -> None:
        if any(parent is self for parent in child.get_parents()):
            raise BuilderArgumentError(
                f"'{self._name}' is already a parent of '{child.name}'"
            )
    
    def _check_can_add_child(self, condition: Optional[Condition]) -> None:
        if condition is None:
            if self._children_with_conditions:
                raise GraphStructureError(
                    f"Cannot add an unconditional child to '{self._name}': "
                    "it already has at least one child with a condition",
                    node_name=self._name,
                )
            return
        
        if self._children_without_conditions:
            raise GraphStructureError(
                f"Cannot add a conditional child to '{self._name}': "
                "it already has at least one child without a condition",
                node_name=self._name,
            )
        if condition.is_default and self.get_default_child() is not None:
            raise GraphStructureError(
                f"Node '{self._name}' already has a default child",
                node_name=self._name,
            )
    
    def _link_to_parents(self) -> None:
        """Register this node as a child of every declared parent."""
        # Check every parent first so a failure leaves no half-linked edges
        for parent in self._parents_without_conditions:
            parent._check_can_add_child(None)
        for parent in self._parents_with_conditions:
            parent.node._check_can_add_child(parent.condition)
        
        for parent in self._parents_without_conditions:
            parent._children_without_conditions.append(self)
        for parent in self._parents_with_conditions:
            parent.node._children_with_conditions.append(
                NodeWithCondition(self, parent.condition)
            )
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"
