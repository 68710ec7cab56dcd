"""
Unit tests for XML and JSON rendering.
"""

import json
import xml.etree.ElementTree as ET

import pytest

from workflow_builder.core import (
    Chmod,
    Delete,
    Global,
    MapReduceActionBuilder,
    FSActionBuilder,
    GraphStructureError,
    ShellActionBuilder,
    WorkflowBuilder,
)
from workflow_builder.serialization import build_document, serialize, to_json, to_xml

NS = {"w": "uri:oozie:workflow:1.0", "shell": "uri:oozie:shell-action:1.0"}


class TestSerialize:
    """Tests for the full workflow -> XML pipeline."""
    
    def test_root_element(self, linear_workflow, test_settings):
        root = ET.fromstring(serialize(linear_workflow, test_settings))
        
        assert root.tag == "{uri:oozie:workflow:1.0}workflow-app"
        assert root.get("name") == "linear"
        assert root.find("w:start", NS).get("to") == "A"
        assert root.find("w:end", NS).get("name") == "end"
    
    def test_fork_and_join(self, fork_workflow, test_settings):
        root = ET.fromstring(serialize(fork_workflow, test_settings))
        
        fork = root.find("w:fork[@name='fork_A']", NS)
        assert [path.get("start") for path in fork.findall("w:path", NS)] == ["B", "C"]
        assert root.find("w:join[@name='join_D']", NS).get("to") == "D"
    
    def test_decision(self, decision_workflow, test_settings):
        root = ET.fromstring(serialize(decision_workflow, test_settings))
        
        switch = root.find("w:decision[@name='decision_A']/w:switch", NS)
        cases = switch.findall("w:case", NS)
        
        assert [(case.get("to"), case.text) for case in cases] == [("B", "x")]
        assert switch.find("w:default", NS).get("to") == "C"
    
    def test_action_transitions_and_payload(self, linear_workflow, test_settings):
        root = ET.fromstring(serialize(linear_workflow, test_settings))
        
        action = root.find("w:action[@name='A']", NS)
        
        assert action.find("w:ok", NS).get("to") == "B"
        assert action.find("w:error", NS).get("to") == "kill"
        assert action.find("shell:shell/shell:exec", NS).text == "A.sh"
    
    def test_kill_message(self, linear_workflow, test_settings):
        root = ET.fromstring(serialize(linear_workflow, test_settings))
        
        kill = root.find("w:kill", NS)
        assert kill.get("name") == "kill"
        assert kill.find("w:message", NS).text.startswith("Action failed")
    
    def test_invalid_workflow_produces_no_document(self, make_action, make_workflow, test_settings):
        a = make_action("A")
        make_action("B", conditional=[(a, "x")])
        
        with pytest.raises(GraphStructureError):
            serialize(make_workflow("wf", a), test_settings)


class TestToXml:
    """Tests for element layout details."""
    
    def test_flags_and_lists(self, test_settings):
        action = (
            ShellActionBuilder.create()
            .with_name("sh")
            .with_executable("run.sh")
            .with_argument("a")
            .with_argument("b")
            .with_capture_output(True)
            .with_config_property("queue", "default")
            .build()
        )
        workflow = WorkflowBuilder().with_name("wf").with_dag_containing_node(action).build()
        
        root = ET.fromstring(to_xml(build_document(workflow, test_settings), test_settings))
        shell = root.find("w:action/shell:shell", NS)
        
        assert [arg.text for arg in shell.findall("shell:argument", NS)] == ["a", "b"]
        assert shell.find("shell:capture-output", NS) is not None
        assert shell.find("shell:configuration/shell:property/shell:name", NS).text == "queue"
    
    def test_fs_operations(self, test_settings):
        action = (
            FSActionBuilder.create()
            .with_name("fs")
            .with_delete(Delete(path="/tmp/out", skip_trash=True))
            .with_chmod(Chmod(path="/data", permissions="755"))
            .build()
        )
        workflow = WorkflowBuilder().with_name("wf").with_dag_containing_node(action).build()
        
        root = ET.fromstring(serialize(workflow, test_settings))
        fs = root.find("w:action/w:fs", NS)
        
        assert fs.find("w:delete", NS).attrib == {"path": "/tmp/out", "skip-trash": "true"}
        chmod = fs.find("w:chmod", NS)
        assert chmod.get("dir-files") == "true"
        assert chmod.find("w:recursive", NS) is None
    
    def test_parameters_wrapped(self, make_action, test_settings):
        workflow = (
            WorkflowBuilder()
            .with_name("wf")
            .with_parameter("date", "2024-01-01")
            .with_dag_containing_node(make_action("A"))
            .build()
        )
        
        root = ET.fromstring(serialize(workflow, test_settings))
        
        assert root.find("w:parameters/w:property/w:name", NS).text == "date"
        # Parameters precede the start element
        assert [child.tag.split("}")[1] for child in root][:2] == ["parameters", "start"]


class TestToJson:
    def test_round_trips_through_json(self, decision_workflow, test_settings):
        document = build_document(decision_workflow, test_settings)
        
        data = json.loads(to_json(document, test_settings))
        
        assert data["name"] == "decision"
        assert data["start"] == {"to": "A"}
        assert [node["element_type"] for node in data["nodes"]] == [
            "kill", "action", "decision", "action", "action",
        ]
    
    def test_unset_fields_left_out(self, linear_workflow, test_settings):
        data = json.loads(to_json(build_document(linear_workflow, test_settings), test_settings))
        
        action = data["nodes"][1]
        assert "email" not in action
        assert action["shell"]["exec"] == "A.sh"
    
    def test_keys_follow_xml_names(self, test_settings):
        """Test that JSON keys use the same names as the XML tags."""
        action = (
            MapReduceActionBuilder.create()
            .with_name("mr")
            .with_job_tracker("jt:8032")
            .with_config_class("org.example.Job")
            .build()
        )
        workflow = (
            WorkflowBuilder()
            .with_name("wf")
            .with_global(Global(job_tracker="jt:8032"))
            .with_dag_containing_node(action)
            .build()
        )
        
        data = json.loads(to_json(build_document(workflow, test_settings), test_settings))
        
        assert data["global"]["job-tracker"] == "jt:8032"
        assert "global_" not in data
        payload = data["nodes"][1]["map-reduce"]
        assert payload["job-tracker"] == "jt:8032"
        assert payload["config-class"] == "org.example.Job"
