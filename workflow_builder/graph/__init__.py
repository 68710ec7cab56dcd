"""Intermediate graph and the lowering of workflows into it."""

from workflow_builder.graph.lowering import GraphLowerer, lower_workflow
from workflow_builder.graph.nodes import GraphNode, IntermediateGraph, NodeKind

__all__ = [
    "GraphLowerer",
    "GraphNode",
    "IntermediateGraph",
    "NodeKind",
    "lower_workflow",
]
