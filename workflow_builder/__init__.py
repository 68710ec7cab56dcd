"""
Workflow Builder

A fluent API for describing job DAGs with conditional branching, and a
translator that lowers them into workflow documents for an external
workflow execution engine.
"""

__version__ = "1.0.0"
