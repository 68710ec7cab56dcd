"""
Unit tests for workflow DAG validation.
"""

import pytest

from workflow_builder.core import GraphStructureError, Node, Workflow, WorkflowValidator


class TestWorkflowValidator:
    """Tests for DAG validation logic."""
    
    def test_valid_linear_dag(self, linear_workflow):
        """Test validation of a valid linear DAG."""
        result = WorkflowValidator(linear_workflow).validate()
        
        assert result.is_valid
        assert len(result.errors) == 0
        assert [node.name for node in result.topological_order] == ["A", "B", "C"]
    
    def test_valid_fanout_fanin_dag(self, fork_workflow):
        """Test validation of a valid fan-out/fan-in DAG."""
        result = WorkflowValidator(fork_workflow).validate()
        
        assert result.is_valid
        order = [node.name for node in result.topological_order]
        assert order[0] == "A"
        assert order[-1] == "D"
    
    def test_cycle_detection(self):
        """Test that cycles are detected and rejected."""
        a = Node("A")
        b = Node("B", parents_without_conditions=[a])
        # Builders cannot express a back edge
        b.add_child(a)
        
        assert a.get_parents() == (b,)
        
        result = WorkflowValidator(Workflow("cyclic", [a, b])).validate()
        
        assert not result.is_valid
        assert any(e.code == "CYCLE_DETECTED" for e in result.errors)
        assert result.topological_order == []
    
    def test_missing_default_branch(self, make_action, make_workflow):
        a = make_action("A")
        make_action("B", conditional=[(a, "x")])
        
        result = WorkflowValidator(make_workflow("wf", a)).validate()
        
        assert not result.is_valid
        assert result.errors[0].code == "MISSING_DEFAULT_BRANCH"
        assert result.errors[0].node_name == "A"
    
    def test_default_only_decision_warns(self, make_action, make_workflow):
        a = make_action("A")
        make_action("B", conditional=[(a, None)])
        
        result = WorkflowValidator(make_workflow("wf", a)).validate()
        
        assert result.is_valid
        assert [w.code for w in result.warnings] == ["DEFAULT_ONLY_DECISION"]
    
    def test_error_handler_inside_dag(self, make_action, make_workflow):
        cleanup = make_action("cleanup")
        a = make_action("A", error_handler=cleanup)
        
        result = WorkflowValidator(make_workflow("wf", a, cleanup)).validate()
        
        assert not result.is_valid
        assert any(e.code == "ERROR_HANDLER_IN_DAG" for e in result.errors)
    
    def test_raise_if_invalid(self, make_action, make_workflow):
        a = make_action("A")
        make_action("B", conditional=[(a, "x")])
        result = WorkflowValidator(make_workflow("wf", a)).validate()
        
        with pytest.raises(GraphStructureError) as exc_info:
            result.raise_if_invalid()
        
        assert exc_info.value.code == "MISSING_DEFAULT_BRANCH"
        assert exc_info.value.node_name == "A"
    
    def test_raise_if_invalid_passes_for_valid(self, linear_workflow):
        WorkflowValidator(linear_workflow).validate().raise_if_invalid()
    
    # Edge cases
    def test_single_node_workflow(self, make_action, make_workflow):
        """Test DAG with single node (minimum valid workflow)."""
        result = WorkflowValidator(make_workflow("wf", make_action("only"))).validate()
        
        assert result.is_valid
        assert [node.name for node in result.topological_order] == ["only"]
    
    def test_empty_workflow(self):
        result = WorkflowValidator(Workflow("empty", [])).validate()
        
        assert result.is_valid
        assert result.topological_order == []
