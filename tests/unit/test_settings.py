"""
Unit tests for configuration settings.
"""

import logging

import pytest
from pydantic import ValidationError

from workflow_builder.config import Settings, configure_logging, get_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        
        assert settings.naming.start_node_name == "start"
        assert settings.naming.fork_prefix == "fork"
        assert settings.document.schema_namespace == "uri:oozie:workflow:1.0"
        assert settings.effective_log_level == logging.INFO
    
    def test_log_level_is_case_insensitive(self):
        settings = Settings(log_level="warning")
        
        assert settings.log_level == "WARNING"
        assert settings.effective_log_level == logging.WARNING
    
    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")
    
    def test_debug_overrides_log_level(self):
        settings = Settings(debug=True, log_level="ERROR")
        
        assert settings.effective_log_level == logging.DEBUG
    
    def test_naming_from_environment(self, monkeypatch):
        monkeypatch.setenv("WORKFLOW_NAMING_KILL_NODE_NAME", "fail")
        
        assert Settings().naming.kill_node_name == "fail"
    
    def test_document_from_environment(self, monkeypatch):
        monkeypatch.setenv("WORKFLOW_DOCUMENT_JSON_INDENT", "4")
        
        assert Settings().document.json_indent == 4
    
    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
    
    def test_configure_logging(self, test_settings, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        
        configure_logging(test_settings)
        
        assert calls[0]["level"] == logging.DEBUG
