"""
Intermediate graph model.

A lowered graph is an arena: an IntermediateGraph owns every GraphNode and
edges refer to nodes by name. Each node carries a NodeKind tag, and the
kind decides how many parents and children of each sort the node accepts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Collection, Iterator, Optional

from workflow_builder.core.errors import GraphStructureError
from workflow_builder.core.node import Condition, Node


class NodeKind(str, Enum):
    """Kinds of intermediate graph nodes."""
    
    START = "start"
    END = "end"
    KILL = "kill"
    DECISION = "decision"
    FORK = "fork"
    JOIN = "join"
    ACTION = "action"


@dataclass
class GraphNode:
    """
    A vertex of the intermediate graph.
    
    Only decisions hold conditional children; every other kind holds plain
    children. ACTION nodes wrap the user node they were lowered from.
    """
    
    kind: NodeKind
    name: str
    real_node: Optional[Node] = None
    parents: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)
    conditional_children: list[tuple[str, Condition]] = field(default_factory=list)
    
    # Maximum number of parents per kind; None means unbounded
    MAX_PARENTS: ClassVar[dict[NodeKind, Optional[int]]] = {
        NodeKind.START: 0,
        NodeKind.END: 1,
        NodeKind.KILL: 0,
        NodeKind.DECISION: 1,
        NodeKind.FORK: 1,
        NodeKind.JOIN: None,
        NodeKind.ACTION: None,
    }
    
    # Maximum number of unconditional children per kind
    MAX_CHILDREN: ClassVar[dict[NodeKind, Optional[int]]] = {
        NodeKind.START: 1,
        NodeKind.END: 0,
        NodeKind.KILL: 0,
        NodeKind.DECISION: 0,
        NodeKind.FORK: None,
        NodeKind.JOIN: 1,
        NodeKind.ACTION: 1,
    }
    
    @property
    def child(self) -> Optional[str]:
        """The single unconditional child, if any."""
        return self.children[0] if self.children else None
    
    @property
    def default_child(self) -> Optional[str]:
        for child, condition in self.conditional_children:
            if condition.is_default:
                return child
        return None
    
    def all_children(self) -> list[str]:
        return self.children + [child for child, _ in self.conditional_children]
    
    def check_can_add_parent(self) -> None:
        limit = self.MAX_PARENTS[self.kind]
        if limit is not None and len(self.parents) >= limit:
            quantity = "any" if limit == 0 else "multiple"
            raise GraphStructureError(
                f"{self.kind.value.capitalize()} node '{self.name}' cannot have {quantity} parents",
                node_name=self.name,
            )
    
    def check_can_add_child(self) -> None:
        if self.conditional_children:
            raise GraphStructureError(
                f"Node '{self.name}' already has conditional children",
                node_name=self.name,
            )
        
        limit = self.MAX_CHILDREN[self.kind]
        if limit is not None and len(self.children) >= limit:
            if limit == 0:
                detail = "cannot have unconditional children"
            else:
                detail = f"cannot have more than {limit} child"
            raise GraphStructureError(
                f"{self.kind.value.capitalize()} node '{self.name}' {detail}",
                node_name=self.name,
            )
    
    def check_can_add_conditional_child(self, condition: Condition) -> None:
        if self.kind != NodeKind.DECISION:
            raise GraphStructureError(
                f"Only decision nodes can have conditional children, '{self.name}' "
                f"is a {self.kind.value} node",
                node_name=self.name,
            )
        if condition.is_default and self.default_child is not None:
            raise GraphStructureError(
                f"Decision node '{self.name}' already has a default child",
                node_name=self.name,
            )


class IntermediateGraph:
    """
    Arena holding the nodes of one lowered workflow.
    
    Every graph has exactly one start, one end and one kill node. Nodes
    iterate in insertion order.
    """
    
    def __init__(
        self,
        name: Optional[str],
        start_name: str = "start",
        end_name: str = "end",
        kill_name: str = "kill",
    ):
        self.name = name
        self._nodes: dict[str, GraphNode] = {}
        
        self.start = self.add_node(NodeKind.START, start_name)
        self.end = self.add_node(NodeKind.END, end_name)
        self.kill = self.add_node(NodeKind.KILL, kill_name)
    
    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self._nodes.values())
    
    def __len__(self) -> int:
        return len(self._nodes)
    
    def __contains__(self, name: object) -> bool:
        return name in self._nodes
    
    def get(self, name: str) -> GraphNode:
        """
        Get a node by name.
        
        Raises:
            KeyError: If the graph holds no such node
        """
        return self._nodes[name]
    
    def nodes_of_kind(self, kind: NodeKind) -> list[GraphNode]:
        return [node for node in self._nodes.values() if node.kind == kind]
    
    def add_node(
        self,
        kind: NodeKind,
        name: str,
        real_node: Optional[Node] = None,
    ) -> GraphNode:
        """
        Add a node to the arena.
        
        Raises:
            GraphStructureError: If the name is already taken
        """
        if name in self._nodes:
            raise GraphStructureError(
                f"Graph '{self.name}' already contains a node named '{name}'",
                node_name=name,
            )
        
        node = GraphNode(kind=kind, name=name, real_node=real_node)
        self._nodes[name] = node
        return node
    
    def unique_name(self, base: str, reserved: Collection[str] = ()) -> str:
        """Return base, or base with the lowest free numeric suffix."""
        name = base
        suffix = 2
        while name in self._nodes or name in reserved:
            name = f"{base}_{suffix}"
            suffix += 1
        return name
    
    def add_edge(self, parent: str, child: str) -> None:
        """
        Add an unconditional edge.
        
        Raises:
            GraphStructureError: If either end does not accept the edge
        """
        parent_node, child_node = self._nodes[parent], self._nodes[child]
        
        parent_node.check_can_add_child()
        child_node.check_can_add_parent()
        
        parent_node.children.append(child)
        child_node.parents.append(parent)
    
    def add_conditional_edge(self, parent: str, child: str, condition: Condition) -> None:
        """
        Add a conditional edge out of a decision node.
        
        Raises:
            GraphStructureError: If either end does not accept the edge
        """
        parent_node, child_node = self._nodes[parent], self._nodes[child]
        
        parent_node.check_can_add_conditional_child(condition)
        child_node.check_can_add_parent()
        
        parent_node.conditional_children.append((child, condition))
        child_node.parents.append(parent)
    
    def add_default_edge(self, parent: str, child: str) -> None:
        """Add the default edge out of a decision node."""
        self.add_conditional_edge(parent, child, Condition.default())
