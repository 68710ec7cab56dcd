"""
Workflows: named, validated sets of nodes.

A WorkflowBuilder collects entry points into a possibly disjoint DAG and
discovers every node connected to them by walking parent and child edges.
"""

import logging
from collections import deque
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from workflow_builder.core.errors import BuilderArgumentError, WorkflowValidationError
from workflow_builder.core.modify_once import ModifyOnce
from workflow_builder.core.node import Node

logger = logging.getLogger(__name__)


class Parameter(BaseModel):
    """A workflow parameter with an optional default value."""
    
    model_config = ConfigDict(frozen=True)
    
    name: str = Field(..., min_length=1, description="Parameter name")
    value: Optional[str] = Field(default=None, description="Default value")
    description: Optional[str] = Field(default=None, description="Human readable description")


class Global(BaseModel):
    """Defaults applied to every action of the workflow."""
    
    model_config = ConfigDict(frozen=True)
    
    job_tracker: Optional[str] = Field(default=None)
    name_node: Optional[str] = Field(default=None)
    configuration: dict[str, str] = Field(default_factory=dict)


class Credential(BaseModel):
    """A credential declaration that actions can refer to by name."""
    
    model_config = ConfigDict(frozen=True)
    
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    properties: dict[str, str] = Field(default_factory=dict)


class Workflow:
    """
    An immutable set of uniquely named nodes with its derived roots.
    
    Raises:
        WorkflowValidationError: If two nodes share a name
    """
    
    def __init__(
        self,
        name: Optional[str],
        nodes: Iterable[Node],
        parameters: Iterable[Parameter] = (),
        global_: Optional[Global] = None,
        credentials: Iterable[Credential] = (),
    ):
        self._name = name
        self._nodes = tuple(nodes)
        
        self._check_unique_names()
        
        self._roots = tuple(node for node in self._nodes if not node.get_parents())
        self._parameters = tuple(parameters)
        self._global = global_
        self._credentials = tuple(credentials)
    
    @property
    def name(self) -> Optional[str]:
        return self._name
    
    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._nodes
    
    @property
    def roots(self) -> tuple[Node, ...]:
        return self._roots
    
    @property
    def parameters(self) -> tuple[Parameter, ...]:
        return self._parameters
    
    @property
    def global_(self) -> Optional[Global]:
        return self._global
    
    @property
    def credentials(self) -> tuple[Credential, ...]:
        return self._credentials
    
    def get_roots(self) -> tuple[Node, ...]:
        """Get nodes with no parents of either kind (entry points)."""
        return self._roots
    
    def get_leaves(self) -> tuple[Node, ...]:
        """Get nodes with no children of either kind (exit points)."""
        return tuple(node for node in self._nodes if not node.get_all_children())
    
    def get_node(self, name: str) -> Optional[Node]:
        """Get node by name."""
        for node in self._nodes:
            if node.name == name:
                return node
        return None
    
    def _check_unique_names(self) -> None:
        names: set[Optional[str]] = set()
        
        for node in self._nodes:
            if node.name in names:
                raise WorkflowValidationError(node.name, self._name)
            names.add(node.name)


class WorkflowBuilder:
    """Fluent builder for Workflow instances."""
    
    def __init__(self):
        self._name: ModifyOnce[str] = ModifyOnce(field_name="name")
        self._global: ModifyOnce[Global] = ModifyOnce(field_name="global")
        self._added_nodes: list[Node] = []
        self._parameters: dict[str, Parameter] = {}
        self._credentials: dict[str, Credential] = {}
    
    def with_name(self, name: str) -> "WorkflowBuilder":
        self._name.set(name)
        return self
    
    def with_dag_containing_node(self, node: Node) -> "WorkflowBuilder":
        """Queue an entry point; everything connected to it joins the workflow."""
        self._added_nodes.append(node)
        return self
    
    def with_parameter(
        self,
        name: str,
        value: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "WorkflowBuilder":
        """
        Declare a workflow parameter.
        
        Raises:
            BuilderArgumentError: If the parameter is already declared
        """
        if name in self._parameters:
            raise BuilderArgumentError(f"Parameter '{name}' is already declared")
        self._parameters[name] = Parameter(name=name, value=value, description=description)
        return self
    
    def with_global(self, global_: Global) -> "WorkflowBuilder":
        self._global.set(global_)
        return self
    
    def with_credential(self, credential: Credential) -> "WorkflowBuilder":
        """
        Declare a credential.
        
        Raises:
            BuilderArgumentError: If a credential with the same name is declared
        """
        if credential.name in self._credentials:
            raise BuilderArgumentError(f"Credential '{credential.name}' is already declared")
        self._credentials[credential.name] = credential
        return self
    
    def build(self) -> Workflow:
        """Discover the connected components of all entry points and freeze them."""
        # dict keys keep insertion order, so discovery order is deterministic
        nodes: dict[Node, None] = {}
        for node in self._added_nodes:
            if node not in nodes:
                nodes.update(dict.fromkeys(self._get_nodes_in_dag(node)))
        
        workflow = Workflow(
            name=self._name.get(),
            nodes=nodes.keys(),
            parameters=self._parameters.values(),
            global_=self._global.get(),
            credentials=self._credentials.values(),
        )
        
        logger.info(
            f"Built workflow '{workflow.name}' with {len(workflow.nodes)} nodes "
            f"and {len(workflow.roots)} roots"
        )
        return workflow
    
    @staticmethod
    def _get_nodes_in_dag(start: Node) -> list[Node]:
        """Breadth-first search over parent and child edges."""
        visited: dict[Node, None] = {start: None}
        queue = deque([start])
        
        while queue:
            current = queue.popleft()
            for neighbor in current.get_parents() + current.get_all_children():
                if neighbor not in visited:
                    visited[neighbor] = None
                    queue.append(neighbor)
        
        return list(visited)
