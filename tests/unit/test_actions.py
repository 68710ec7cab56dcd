"""
Unit tests for action kinds and their builders.
"""

import pytest

from workflow_builder.core import (
    BuilderStateError,
    Chmod,
    Delete,
    EmailActionBuilder,
    ErrorHandler,
    FSActionBuilder,
    MapReduceActionBuilder,
    Mkdir,
    Move,
    Prepare,
    ShellActionBuilder,
    SubWorkflowActionBuilder,
    Touchz,
)


class TestEmailAction:
    """Tests for e-mail actions."""
    
    def test_build(self):
        action = (
            EmailActionBuilder.create()
            .with_name("notify")
            .with_recipient("ops@example.com")
            .with_recipient("dev@example.com")
            .with_cc("lead@example.com")
            .with_subject("Done")
            .with_body("The job finished")
            .with_content_type("text/plain")
            .build()
        )
        
        assert action.name == "notify"
        assert action.to == ["ops@example.com", "dev@example.com"]
        assert action.cc == ["lead@example.com"]
        assert action.bcc == []
        assert action.subject == "Done"
        assert action.content_type == "text/plain"
    
    def test_remove_recipient(self):
        action = (
            EmailActionBuilder.create()
            .with_recipient("a@example.com")
            .with_recipient("b@example.com")
            .without_recipient("a@example.com")
            .build()
        )
        
        assert action.to == ["b@example.com"]
    
    def test_returned_lists_are_copies(self):
        action = EmailActionBuilder.create().with_recipient("a@example.com").build()
        
        action.to.append("b@example.com")
        
        assert action.to == ["a@example.com"]


class TestFSAction:
    """Tests for file system actions."""
    
    def test_build(self):
        action = (
            FSActionBuilder.create()
            .with_name("fs")
            .with_name_node("hdfs://nn:8020")
            .with_delete(Delete(path="/tmp/out", skip_trash=True))
            .with_mkdir(Mkdir(path="/tmp/in"))
            .with_move(Move(source="/a", target="/b"))
            .with_chmod(Chmod(path="/b", permissions="755", recursive=True))
            .with_touchz(Touchz(path="/b/_SUCCESS"))
            .build()
        )
        
        assert action.name_node == "hdfs://nn:8020"
        assert action.deletes == [Delete(path="/tmp/out", skip_trash=True)]
        assert action.mkdirs == [Mkdir(path="/tmp/in")]
        assert action.moves[0].target == "/b"
        assert action.chmods[0].recursive
        assert action.touchzs == [Touchz(path="/b/_SUCCESS")]
    
    def test_clear_deletes(self):
        action = (
            FSActionBuilder.create()
            .with_delete(Delete(path="/a"))
            .with_delete(Delete(path="/b"))
            .clear_deletes()
            .build()
        )
        
        assert action.deletes == []


class TestMapReduceAction:
    def test_build(self):
        prepare = Prepare(deletes=(Delete(path="/out"),), mkdirs=(Mkdir(path="/tmp"),))
        action = (
            MapReduceActionBuilder.create()
            .with_name("mr")
            .with_job_tracker("jt:8032")
            .with_name_node("hdfs://nn:8020")
            .with_prepare(prepare)
            .with_config_class("com.example.JobConfig")
            .with_file("lib.jar")
            .with_archive("deps.zip")
            .build()
        )
        
        assert action.job_tracker == "jt:8032"
        assert action.prepare == prepare
        assert action.config_class == "com.example.JobConfig"
        assert action.files == ["lib.jar"]
        assert action.archives == ["deps.zip"]


class TestShellAction:
    def test_build(self):
        action = (
            ShellActionBuilder.create()
            .with_name("sh")
            .with_executable("run.sh")
            .with_argument("--date")
            .with_argument("2024-01-01")
            .with_environment_variable("MODE=batch")
            .with_capture_output(True)
            .build()
        )
        
        assert action.executable == "run.sh"
        assert action.arguments == ["--date", "2024-01-01"]
        assert action.environment_variables == ["MODE=batch"]
        assert action.capture_output is True
    
    def test_capture_output_defaults_to_false(self):
        action = ShellActionBuilder.create().with_executable("run.sh").build()
        
        assert action.capture_output is False
    
    def test_executable_set_once(self):
        builder = ShellActionBuilder.create().with_executable("run.sh")
        
        with pytest.raises(BuilderStateError):
            builder.with_executable("other.sh")


class TestSubWorkflowAction:
    def test_propagating_configuration(self):
        action = (
            SubWorkflowActionBuilder.create()
            .with_name("child")
            .with_app_path("/apps/child")
            .with_propagating_configuration()
            .build()
        )
        
        assert action.app_path == "/apps/child"
        assert action.propagate_configuration is True
    
    def test_without_propagating_configuration(self):
        action = SubWorkflowActionBuilder.create().without_propagating_configuration().build()
        
        assert action.propagate_configuration is False


class TestCreateFromExistingAction:
    """Tests for deriving builders from built actions."""
    
    def test_round_trip_preserves_fields(self, make_action):
        """Test that rebuilding an unmodified builder preserves every field."""
        parent = make_action("P")
        handler = ErrorHandler.build_error_handler(make_action("cleanup"))
        original = (
            ShellActionBuilder.create()
            .with_name("A")
            .with_parent(parent)
            .with_error_handler(handler)
            .with_executable("run.sh")
            .with_argument("--fast")
            .with_file("script.py")
            .with_capture_output(True)
            .with_config_property("queue", "default")
            .build()
        )
        
        copy = ShellActionBuilder.create_from_existing_action(original).build()
        
        assert copy is not original
        assert copy.name == original.name
        assert copy.get_parents() == original.get_parents()
        assert copy.error_handler is original.error_handler
        assert copy.executable == original.executable
        assert copy.arguments == original.arguments
        assert copy.files == original.files
        assert copy.capture_output == original.capture_output
        assert copy.configuration == original.configuration
    
    def test_existing_values_can_be_overridden_once(self):
        original = ShellActionBuilder.create().with_name("A").with_executable("run.sh").build()
        
        builder = ShellActionBuilder.create_from_existing_action(original).with_name("B")
        
        assert builder.build().name == "B"
        with pytest.raises(BuilderStateError):
            builder.with_name("C")
    
    def test_list_fields_can_be_extended(self):
        original = (
            EmailActionBuilder.create()
            .with_name("notify")
            .with_recipient("a@example.com")
            .build()
        )
        
        copy = (
            EmailActionBuilder.create_from_existing_action(original)
            .with_name("notify_all")
            .with_recipient("b@example.com")
            .build()
        )
        
        assert copy.to == ["a@example.com", "b@example.com"]
        assert original.to == ["a@example.com"]
