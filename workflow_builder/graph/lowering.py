"""
Lowering of a user workflow into an intermediate graph.

Inserts the structural nodes the workflow engine needs: a start and end,
a fork after every node with several unconditional children, a decision
after every node with conditional children, and a join wherever the
branches of a fork reconverge.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from workflow_builder.config import Settings, get_settings
from workflow_builder.core.dag import WorkflowValidator
from workflow_builder.core.errors import GraphStructureError
from workflow_builder.core.node import Condition, Node, NodeWithCondition
from workflow_builder.core.workflow import Workflow
from workflow_builder.graph.nodes import IntermediateGraph, NodeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Branch:
    """
    One step into a fork or decision: the split node and the branches taken.
    
    A path holds several indices once branches of a decision have met
    without covering all of them.
    """
    
    split: str
    indices: frozenset[int]


# The open branches a path is inside of, outermost first
Signature = tuple[_Branch, ...]


@dataclass(frozen=True)
class _Source:
    """
    The graph node an edge starts from.
    
    Edges leaving a decision also carry their condition and the position of
    their branch among the decision's cases.
    """
    
    node: str
    condition: Optional[Condition] = None
    branch: int = 0


@dataclass
class _Incoming:
    """Paths arriving at a node together with the branches they are inside of."""
    
    signature: Signature
    sources: list[_Source]


class GraphLowerer:
    """
    Lowers a Workflow into an IntermediateGraph.
    
    Nodes are visited in topological order. Each node's incoming paths are
    merged innermost branch first: the branches of a fork must all meet and
    are closed by a new join, while the branches of a decision point at the
    meeting node and stay inside the decision until every branch has met.
    Shapes that cannot be closed that way (paths leaving a fork early, paths
    meeting without a common split) raise GraphStructureError.
    
    Decision edges are added once every node is placed, so that each
    decision lists its cases in the order they were registered.
    """
    
    def __init__(self, workflow: Workflow, settings: Optional[Settings] = None):
        self.workflow = workflow
        self.settings = settings or get_settings()
        
        naming = self.settings.naming
        self.graph = IntermediateGraph(
            workflow.name,
            start_name=naming.start_node_name,
            end_name=naming.end_node_name,
            kill_name=naming.kill_node_name,
        )
        
        self._reserved_names = {node.name for node in workflow.nodes}
        self._signatures: dict[str, Signature] = {}
        self._splits: dict[str, str] = {}
        self._branch_counts: dict[str, int] = {}
        self._decision_edges: list[tuple[_Source, str]] = []
        self._start_fork: Optional[str] = None
    
    def lower(self) -> IntermediateGraph:
        """
        Build the intermediate graph.
        
        Raises:
            GraphStructureError: If the workflow is structurally invalid or
                cannot be expressed with nested forks and decisions
        """
        result = WorkflowValidator(self.workflow).validate()
        for warning in result.warnings:
            logger.warning(f"[{warning.code}] {warning.message}")
        result.raise_if_invalid()
        
        order = result.topological_order
        roots = [node for node in order if not node.get_parents()]
        self._open_start(len(roots))
        
        root_index = {node: i for i, node in enumerate(roots)}
        for node in order:
            if node in root_index:
                incoming = self._start_incoming(root_index[node])
                sources, signature = incoming.sources, incoming.signature
            else:
                sources, signature = self._merge(node.name, self._incoming_edges(node))
            
            self.graph.add_node(NodeKind.ACTION, node.name, real_node=node)
            for source in sources:
                self._connect(source, node.name)
            
            self._signatures[node.name] = signature
            self._open_split(node)
        
        self._connect_end(order)
        
        for source, target in sorted(self._decision_edges, key=lambda edge: edge[0].branch):
            self.graph.add_conditional_edge(source.node, target, source.condition)
        
        logger.info(
            f"Lowered workflow '{self.workflow.name}' into {len(self.graph)} graph nodes "
            f"({len(self.graph.nodes_of_kind(NodeKind.FORK))} forks, "
            f"{len(self.graph.nodes_of_kind(NodeKind.JOIN))} joins, "
            f"{len(self.graph.nodes_of_kind(NodeKind.DECISION))} decisions)"
        )
        return self.graph
    
    def _open_start(self, root_count: int) -> None:
        """With several roots, start forks into all of them."""
        if root_count <= 1:
            return
        
        fork = self._add_structural_node(
            NodeKind.FORK,
            f"{self.settings.naming.fork_prefix}_{self.graph.start.name}",
        )
        self.graph.add_edge(self.graph.start.name, fork)
        self._branch_counts[fork] = root_count
        self._start_fork = fork
    
    def _start_incoming(self, index: int) -> _Incoming:
        if self._start_fork is None:
            return _Incoming((), [_Source(self.graph.start.name)])
        return _Incoming(
            (_Branch(self._start_fork, frozenset({index})),),
            [_Source(self._start_fork)],
        )
    
    def _open_split(self, node: Node) -> None:
        """Insert the fork or decision that follows a branching node."""
        unconditional = node.get_children_without_conditions()
        conditional = node.get_children_with_conditions()
        
        if len(unconditional) > 1:
            kind, prefix, count = NodeKind.FORK, self.settings.naming.fork_prefix, len(unconditional)
        elif conditional:
            kind, prefix, count = NodeKind.DECISION, self.settings.naming.decision_prefix, len(conditional)
        else:
            return
        
        split = self._add_structural_node(kind, f"{prefix}_{node.name}")
        self.graph.add_edge(node.name, split)
        self._splits[node.name] = split
        self._branch_counts[split] = count
        
        logger.debug(f"Inserted {kind.value} '{split}' with {count} branches after '{node.name}'")
    
    def _incoming_edges(self, node: Node) -> list[_Incoming]:
        incoming = [self._incoming(parent, node) for parent in node.parents_without_conditions]
        incoming.extend(
            self._incoming(parent.node, node) for parent in node.parents_with_conditions
        )
        return incoming
    
    def _incoming(self, parent: Node, child: Node) -> _Incoming:
        """Describe the edge from a user parent to a child in graph terms."""
        if parent.name not in self._signatures:
            raise GraphStructureError(
                f"Parent '{parent.name}' of '{child.name}' is not part of workflow "
                f"'{self.workflow.name}'",
                node_name=child.name,
            )
        
        signature = self._signatures[parent.name]
        split = self._splits.get(parent.name)
        
        if split is None:
            return _Incoming(signature, [_Source(parent.name)])
        
        if self.graph.get(split).kind == NodeKind.FORK:
            index = _index_of(child, parent.get_children_without_conditions())
            return _Incoming(
                signature + (_Branch(split, frozenset({index})),),
                [_Source(split)],
            )
        
        branches = _decision_branches(parent)
        index = _index_of(child, [branch.node for branch in branches])
        return _Incoming(
            signature + (_Branch(split, frozenset({index})),),
            [_Source(split, branches[index].condition, index)],
        )
    
    def _merge(self, target: str, entries: list[_Incoming]) -> tuple[list[_Source], Signature]:
        """
        Close the branches between the incoming paths of target.
        
        Returns:
            The sources that connect directly to target and target's signature
        """
        entries = list(entries)
        
        while len(entries) > 1:
            depth = max(len(entry.signature) for entry in entries)
            if depth == 0:
                raise GraphStructureError(
                    f"Paths meeting at '{target}' do not diverge at a fork or decision",
                    node_name=target,
                    code="UNNESTED_MERGE",
                )
            
            groups = _group_by_split(entries, depth)
            group = next((group for group in groups if self._can_close(group)), None)
            if group is None:
                split = groups[0][0].signature[-1].split
                raise GraphStructureError(
                    f"Only some branches of decision '{split}' reach '{target}', "
                    f"where they meet paths from outside it",
                    node_name=target,
                    code="UNNESTED_MERGE",
                )
            
            rest = [entry for entry in entries if not any(entry is member for member in group)]
            rest.append(self._close(target, group))
            entries = rest
        
        return entries[0].sources, entries[0].signature
    
    def _can_close(self, group: list[_Incoming]) -> bool:
        """A lone path can leave its innermost decision only once it covers every branch."""
        split = group[0].signature[-1].split
        if len(group) > 1 or self.graph.get(split).kind == NodeKind.FORK:
            return True
        return len(group[0].signature[-1].indices) == self._branch_counts[split]
    
    def _close(self, target: str, group: list[_Incoming]) -> _Incoming:
        """
        Merge paths that share their innermost split.
        
        A fork is closed by a join. A decision is left once its branches are
        all covered; until then the merged path keeps the branches it covers.
        """
        prefix, split = group[0].signature[:-1], group[0].signature[-1].split
        
        indices: set[int] = set()
        for entry in group:
            if indices & entry.signature[-1].indices:
                raise GraphStructureError(
                    f"A branch of '{split}' reaches '{target}' along more than one path",
                    node_name=target,
                    code="UNNESTED_MERGE",
                )
            indices |= entry.signature[-1].indices
        
        sources = [source for entry in group for source in entry.sources]
        expected = self._branch_counts[split]
        
        if self.graph.get(split).kind == NodeKind.FORK:
            if len(indices) != expected:
                raise GraphStructureError(
                    f"Only {len(indices)} of {expected} branches of fork '{split}' "
                    f"reconverge at '{target}'",
                    node_name=target,
                    code="INCOMPLETE_JOIN",
                )
            
            join = self._add_structural_node(
                NodeKind.JOIN,
                f"{self.settings.naming.join_prefix}_{target}",
            )
            for source in sources:
                self._connect(source, join)
            
            logger.debug(f"Inserted join '{join}' closing fork '{split}' before '{target}'")
            return _Incoming(prefix, [_Source(join)])
        
        if len(indices) == expected:
            return _Incoming(prefix, sources)
        
        logger.debug(
            f"{len(indices)} of {expected} branches of decision '{split}' meet at '{target}'"
        )
        return _Incoming(prefix + (_Branch(split, frozenset(indices)),), sources)
    
    def _connect_end(self, order: list[Node]) -> None:
        """Route every leaf to the end node."""
        end = self.graph.end.name
        
        if not order:
            self.graph.add_edge(self.graph.start.name, end)
            return
        
        leaves = [node for node in order if not node.get_all_children()]
        entries = [
            _Incoming(self._signatures[leaf.name], [_Source(leaf.name)])
            for leaf in leaves
        ]
        sources, _ = self._merge(end, entries)
        
        if len(sources) == 1:
            self._connect(sources[0], end)
        else:
            # Exclusive decision branches end here; nodes without a child
            # transition to the end node
            logger.debug(
                f"{len(sources)} exclusive branches terminate at '{end}': "
                f"{[source.node for source in sources]}"
            )
    
    def _connect(self, source: _Source, target: str) -> None:
        if source.condition is None:
            self.graph.add_edge(source.node, target)
        else:
            self._decision_edges.append((source, target))
    
    def _add_structural_node(self, kind: NodeKind, base: str) -> str:
        name = self.graph.unique_name(base, reserved=self._reserved_names)
        self.graph.add_node(kind, name)
        return name


def _group_by_split(entries: list[_Incoming], depth: int) -> list[list[_Incoming]]:
    """Group the paths at the given depth by their innermost split."""
    groups: dict[tuple, list[_Incoming]] = {}
    for entry in entries:
        if len(entry.signature) == depth:
            key = (entry.signature[:-1], entry.signature[-1].split)
            groups.setdefault(key, []).append(entry)
    return list(groups.values())


def _decision_branches(node: Node) -> list[NodeWithCondition]:
    """Conditional children with the default branch last."""
    return sorted(node.get_children_with_conditions(), key=lambda child: child.condition.is_default)


def _index_of(node: Node, nodes) -> int:
    for i, candidate in enumerate(nodes):
        if candidate is node:
            return i
    raise GraphStructureError(f"Node '{node.name}' is not a child of its parent", node_name=node.name)


def lower_workflow(workflow: Workflow, settings: Optional[Settings] = None) -> IntermediateGraph:
    """Lower a workflow into an intermediate graph."""
    return GraphLowerer(workflow, settings).lower()
