"""
Configuration settings for the workflow builder, read from the environment.

Controls the names of the structural nodes inserted during lowering and the
shape of the generated workflow document.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NamingSettings(BaseSettings):
    """Names given to the structural nodes of a lowered graph."""
    
    model_config = SettingsConfigDict(env_prefix="WORKFLOW_NAMING_")
    
    start_node_name: str = Field(default="start", description="Name of the start node")
    end_node_name: str = Field(default="end", description="Name of the end node")
    kill_node_name: str = Field(default="kill", description="Name of the shared kill node")
    
    # Inserted nodes are named <prefix>_<anchor node name>
    fork_prefix: str = Field(default="fork", description="Prefix for fork node names")
    join_prefix: str = Field(default="join", description="Prefix for join node names")
    decision_prefix: str = Field(default="decision", description="Prefix for decision node names")


class DocumentSettings(BaseSettings):
    """Settings for the generated workflow document."""
    
    model_config = SettingsConfigDict(env_prefix="WORKFLOW_DOCUMENT_")
    
    kill_message: str = Field(
        default="Action failed, error message[${wf:errorMessage(wf:lastErrorNode())}]",
        description="Diagnostic message carried by the kill element",
    )
    schema_namespace: str = Field(
        default="uri:oozie:workflow:1.0",
        description="XML namespace of the workflow-app element",
    )
    xml_indent: str = Field(default="  ", description="Indentation used when rendering XML")
    json_indent: Optional[int] = Field(default=2, description="Indentation used when rendering JSON")


class Settings(BaseSettings):
    """Main application settings."""
    
    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )
    
    # Logging
    debug: bool = Field(default=False, description="Log at DEBUG level regardless of log_level")
    log_level: str = Field(default="INFO")
    
    # Sub-settings
    naming: NamingSettings = Field(default_factory=NamingSettings)
    document: DocumentSettings = Field(default_factory=DocumentSettings)
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level
    
    @property
    def effective_log_level(self) -> int:
        """Level handed to the logging configuration."""
        return logging.DEBUG if self.debug else getattr(logging, self.log_level)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings. Never called on import."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.effective_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
