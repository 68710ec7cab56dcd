"""
Fluent builder bases for nodes and actions.

Scalar properties of a builder can be set only once; a builder created from
an existing node starts with that node's values as defaults, each of which
may be overridden once. List properties can be appended to, removed from and
cleared freely.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, TypeVar

from workflow_builder.core.errors import BuilderArgumentError
from workflow_builder.core.modify_once import ModifyOnce
from workflow_builder.core.node import Condition, ErrorHandler, Node, NodeWithCondition

B = TypeVar("B", bound="NodeBuilderBase")
A = TypeVar("A", bound="ActionBuilderBase")


@dataclass(frozen=True)
class NodeConstructionData:
    """Everything a node needs from its builder."""
    
    name: Optional[str]
    parents: tuple[Node, ...]
    parents_with_conditions: tuple[NodeWithCondition, ...]
    error_handler: Optional[ErrorHandler]


@dataclass(frozen=True)
class ActionConstructionData(NodeConstructionData):
    """Node construction data plus the action's configuration and fields."""
    
    configuration: dict[str, str] = field(default_factory=dict)
    fields: dict[str, Any] = field(default_factory=dict)


class NodeBuilderBase(ABC):
    """
    Base class of every node builder.
    
    Every `with_*` method returns the builder itself so calls can be chained.
    Parents are compared by identity: registering the same node twice, in
    either parent list, raises BuilderArgumentError.
    """
    
    def __init__(self, node: Optional[Node] = None):
        if node is None:
            self._name: ModifyOnce[str] = ModifyOnce(field_name="name")
            self._parents: list[Node] = []
            self._parents_with_conditions: list[NodeWithCondition] = []
            self._error_handler: ModifyOnce[ErrorHandler] = ModifyOnce(field_name="error_handler")
        else:
            self._name = ModifyOnce(node.name, field_name="name")
            self._parents = list(node.parents_without_conditions)
            self._parents_with_conditions = list(node.parents_with_conditions)
            self._error_handler = ModifyOnce(node.error_handler, field_name="error_handler")
    
    def with_name(self: B, name: str) -> B:
        """Set the name of the node to build."""
        self._name.set(name)
        return self
    
    def with_error_handler(self: B, error_handler: ErrorHandler) -> B:
        """Register the error handler of the node to build."""
        self._error_handler.set(error_handler)
        return self
    
    def without_error_handler(self: B) -> B:
        """Remove the error handler; this uses up the single modification."""
        self._error_handler.set(None)
        return self
    
    def with_parent(self: B, parent: Node) -> B:
        """
        Register an unconditional parent.
        
        Raises:
            BuilderArgumentError: If the node is already a parent
        """
        self._check_no_duplicate_parent(parent)
        self._parents.append(parent)
        return self
    
    def with_parent_with_condition(self: B, parent: Node, condition: str) -> B:
        """
        Register a conditional parent; the label is stored verbatim.
        
        Raises:
            BuilderArgumentError: If the node is already a parent or the
                label is empty
        """
        self._check_no_duplicate_parent(parent)
        self._parents_with_conditions.append(
            NodeWithCondition(parent, Condition.actual(condition))
        )
        return self
    
    def with_parent_default_conditional(self: B, parent: Node) -> B:
        """
        Register a conditional parent for which the built node is the default branch.
        
        Raises:
            BuilderArgumentError: If the node is already a parent
        """
        self._check_no_duplicate_parent(parent)
        self._parents_with_conditions.append(NodeWithCondition(parent, Condition.default()))
        return self
    
    def without_parent(self: B, parent: Node) -> B:
        """
        Remove a registered parent.
        
        Raises:
            BuilderArgumentError: If the node is not a registered parent
        """
        index = self._index_of(parent, self._parents)
        if index >= 0:
            del self._parents[index]
            return self
        
        index = self._index_of(parent, [p.node for p in self._parents_with_conditions])
        if index < 0:
            raise BuilderArgumentError(
                f"Trying to remove '{parent.name}', which is not a parent of this node"
            )
        
        del self._parents_with_conditions[index]
        return self
    
    def clear_parents(self: B) -> B:
        """Remove all registered parents."""
        self._parents.clear()
        self._parents_with_conditions.clear()
        return self
    
    def get_construction_data(self) -> NodeConstructionData:
        """Snapshot the builder state. Does not modify the builder."""
        return NodeConstructionData(
            name=self._name.get(),
            parents=tuple(self._parents),
            parents_with_conditions=tuple(self._parents_with_conditions),
            error_handler=self._error_handler.get(),
        )
    
    @abstractmethod
    def build(self) -> Node:
        """Build the node and register it as a child of its parents."""
    
    def _check_no_duplicate_parent(self, parent: Node) -> None:
        in_parents = self._index_of(parent, self._parents) >= 0
        in_conditional = self._index_of(
            parent, [p.node for p in self._parents_with_conditions]
        ) >= 0
        
        if in_parents or in_conditional:
            raise BuilderArgumentError(
                f"Trying to add '{parent.name}', which is already a parent of this node"
            )
    
    @staticmethod
    def _index_of(node: Node, nodes: list[Node]) -> int:
        for i, candidate in enumerate(nodes):
            if candidate is node:
                return i
        return -1


class ActionBuilderBase(NodeBuilderBase):
    """
    Base class of action builders.
    
    Subclasses list their write-once fields in SCALAR_FIELDS and their list
    fields in LIST_FIELDS; a builder created from an existing action copies
    the current values of both.
    """
    
    SCALAR_FIELDS: tuple[str, ...] = ()
    LIST_FIELDS: tuple[str, ...] = ()
    
    def __init__(self, action: Optional[Node] = None):
        super().__init__(action)
        
        self._configuration: dict[str, ModifyOnce[str]] = {}
        self._scalars: dict[str, ModifyOnce[Any]] = {}
        self._lists: dict[str, list[Any]] = {}
        
        for name in self.SCALAR_FIELDS:
            default = getattr(action, name) if action is not None else None
            self._scalars[name] = ModifyOnce(default, field_name=name)
        
        for name in self.LIST_FIELDS:
            self._lists[name] = list(getattr(action, name)) if action is not None else []
        
        if action is not None:
            for key, value in action.configuration.items():
                self._configuration[key] = ModifyOnce(value, field_name=key)
    
    def with_config_property(self: A, key: str, value: Optional[str]) -> A:
        """
        Set a configuration property. Setting a key to None deletes it.
        
        Raises:
            BuilderStateError: If the key was already set on this builder
        """
        mapped = self._configuration.get(key)
        if mapped is None:
            mapped = ModifyOnce(field_name=key)
            self._configuration[key] = mapped
        
        mapped.set(value)
        return self
    
    def get_construction_data(self) -> ActionConstructionData:
        node_data = super().get_construction_data()
        
        configuration = {
            key: value.get()
            for key, value in self._configuration.items()
            if value.get() is not None
        }
        fields: dict[str, Any] = {name: value.get() for name, value in self._scalars.items()}
        fields.update({name: list(values) for name, values in self._lists.items()})
        
        return ActionConstructionData(
            name=node_data.name,
            parents=node_data.parents,
            parents_with_conditions=node_data.parents_with_conditions,
            error_handler=node_data.error_handler,
            configuration=configuration,
            fields=fields,
        )
    
    def _set_field(self: A, name: str, value: Any) -> A:
        self._scalars[name].set(value)
        return self
    
    def _add_to_list(self: A, name: str, value: Any) -> A:
        self._lists[name].append(value)
        return self
    
    def _remove_from_list(self: A, name: str, value: Any) -> A:
        try:
            self._lists[name].remove(value)
        except ValueError:
            raise BuilderArgumentError(f"'{value}' is not among the {name} of this action") from None
        return self
    
    def _clear_list(self: A, name: str) -> A:
        self._lists[name].clear()
        return self
