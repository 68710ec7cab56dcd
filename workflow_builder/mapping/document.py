"""
Target document model.

Each model is one element of the workflow definition document consumed by
the execution engine. Action payload models are filled from action objects
by attribute name (``model_validate(action, from_attributes=True)``), so
their field names follow the action properties; ``serialization_alias``
carries the tag name used in the XML rendering.

XML layout is declared on the class: ``XML_TAG`` names the element,
``XML_ATTRIBUTES`` lists fields rendered as attributes and ``XML_TEXT`` the
field rendered as element text. Every other field becomes a child element.
"""

from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentElement(BaseModel):
    """Base class of document elements."""
    
    model_config = ConfigDict(from_attributes=True, frozen=True)
    
    XML_TAG: ClassVar[str] = ""
    XML_ATTRIBUTES: ClassVar[tuple[str, ...]] = ()
    XML_TEXT: ClassVar[Optional[str]] = None
    XML_NAMESPACE: ClassVar[Optional[str]] = None


def _properties_from_mapping(value: Any) -> Any:
    if isinstance(value, dict):
        return [{"name": key, "value": item} for key, item in value.items()]
    return value


class PropertyElement(DocumentElement):
    XML_TAG = "property"
    
    name: str
    value: str


class ParameterElement(DocumentElement):
    """A declared workflow parameter."""
    
    XML_TAG = "property"
    
    name: str
    value: Optional[str] = None
    description: Optional[str] = None


class GlobalElement(DocumentElement):
    XML_TAG = "global"
    
    job_tracker: Optional[str] = Field(default=None, serialization_alias="job-tracker")
    name_node: Optional[str] = Field(default=None, serialization_alias="name-node")
    configuration: list[PropertyElement] = Field(default_factory=list, serialization_alias="configuration")
    
    convert_configuration = field_validator("configuration", mode="before")(_properties_from_mapping)


class CredentialElement(DocumentElement):
    XML_TAG = "credential"
    XML_ATTRIBUTES = ("name", "type")
    
    name: str
    type: str
    properties: list[PropertyElement] = Field(default_factory=list)
    
    convert_properties = field_validator("properties", mode="before")(_properties_from_mapping)


# File system operations

class DeleteElement(DocumentElement):
    XML_TAG = "delete"
    XML_ATTRIBUTES = ("path", "skip_trash")
    
    path: str
    skip_trash: Optional[bool] = Field(default=None, serialization_alias="skip-trash")


class MkdirElement(DocumentElement):
    XML_TAG = "mkdir"
    XML_ATTRIBUTES = ("path",)
    
    path: str


class MoveElement(DocumentElement):
    XML_TAG = "move"
    XML_ATTRIBUTES = ("source", "target")
    
    source: str
    target: str


class ChmodElement(DocumentElement):
    XML_TAG = "chmod"
    XML_ATTRIBUTES = ("path", "permissions", "dir_files")
    
    path: str
    permissions: str
    dir_files: bool = Field(default=True, serialization_alias="dir-files")
    recursive: bool = False


class TouchzElement(DocumentElement):
    XML_TAG = "touchz"
    XML_ATTRIBUTES = ("path",)
    
    path: str


class PrepareElement(DocumentElement):
    XML_TAG = "prepare"
    
    deletes: list[DeleteElement] = Field(default_factory=list)
    mkdirs: list[MkdirElement] = Field(default_factory=list)


# Action payloads

class EmailElement(DocumentElement):
    """E-mail payload. Address lists are comma separated."""
    
    XML_TAG = "email"
    XML_NAMESPACE = "uri:oozie:email-action:0.2"
    
    to: str
    cc: Optional[str] = None
    bcc: Optional[str] = None
    subject: str
    body: str
    content_type: Optional[str] = None
    attachments: Optional[str] = Field(default=None, serialization_alias="attachment")
    
    @field_validator("to", "cc", "bcc", "attachments", mode="before")
    @classmethod
    def join_lists(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return ",".join(value) if value else None
        return value


class FSElement(DocumentElement):
    XML_TAG = "fs"
    
    name_node: Optional[str] = Field(default=None, serialization_alias="name-node")
    configuration: list[PropertyElement] = Field(default_factory=list, serialization_alias="configuration")
    deletes: list[DeleteElement] = Field(default_factory=list)
    mkdirs: list[MkdirElement] = Field(default_factory=list)
    moves: list[MoveElement] = Field(default_factory=list)
    chmods: list[ChmodElement] = Field(default_factory=list)
    touchzs: list[TouchzElement] = Field(default_factory=list)
    
    convert_configuration = field_validator("configuration", mode="before")(_properties_from_mapping)


class MapReduceElement(DocumentElement):
    XML_TAG = "map-reduce"
    
    job_tracker: Optional[str] = Field(default=None, serialization_alias="job-tracker")
    name_node: Optional[str] = Field(default=None, serialization_alias="name-node")
    prepare: Optional[PrepareElement] = None
    configuration: list[PropertyElement] = Field(default_factory=list, serialization_alias="configuration")
    config_class: Optional[str] = Field(default=None, serialization_alias="config-class")
    files: list[str] = Field(default_factory=list, serialization_alias="file")
    archives: list[str] = Field(default_factory=list, serialization_alias="archive")
    
    convert_configuration = field_validator("configuration", mode="before")(_properties_from_mapping)


class ShellElement(DocumentElement):
    XML_TAG = "shell"
    XML_NAMESPACE = "uri:oozie:shell-action:1.0"
    
    job_tracker: Optional[str] = Field(default=None, serialization_alias="job-tracker")
    name_node: Optional[str] = Field(default=None, serialization_alias="name-node")
    prepare: Optional[PrepareElement] = None
    configuration: list[PropertyElement] = Field(default_factory=list, serialization_alias="configuration")
    executable: str = Field(..., serialization_alias="exec")
    arguments: list[str] = Field(default_factory=list, serialization_alias="argument")
    environment_variables: list[str] = Field(default_factory=list, serialization_alias="env-var")
    files: list[str] = Field(default_factory=list, serialization_alias="file")
    archives: list[str] = Field(default_factory=list, serialization_alias="archive")
    capture_output: bool = Field(default=False, serialization_alias="capture-output")
    
    convert_configuration = field_validator("configuration", mode="before")(_properties_from_mapping)


class SubWorkflowElement(DocumentElement):
    XML_TAG = "sub-workflow"
    
    app_path: str = Field(..., serialization_alias="app-path")
    propagate_configuration: bool = Field(default=False, serialization_alias="propagate-configuration")
    configuration: list[PropertyElement] = Field(default_factory=list, serialization_alias="configuration")
    
    convert_configuration = field_validator("configuration", mode="before")(_properties_from_mapping)


# Control flow

class ActionTransition(DocumentElement):
    XML_ATTRIBUTES = ("to",)
    
    to: str


class StartElement(DocumentElement):
    XML_TAG = "start"
    XML_ATTRIBUTES = ("to",)
    
    to: str


class EndElement(DocumentElement):
    XML_TAG = "end"
    XML_ATTRIBUTES = ("name",)
    
    name: str


class KillElement(DocumentElement):
    XML_TAG = "kill"
    XML_ATTRIBUTES = ("name",)
    
    element_type: Literal["kill"] = "kill"
    name: str
    message: str


class ActionElement(DocumentElement):
    """
    An action with its payload and transitions.
    
    Exactly one of the payload fields is set.
    """
    
    XML_TAG = "action"
    XML_ATTRIBUTES = ("name",)
    
    element_type: Literal["action"] = "action"
    name: str
    email: Optional[EmailElement] = None
    fs: Optional[FSElement] = None
    map_reduce: Optional[MapReduceElement] = Field(default=None, serialization_alias="map-reduce")
    shell: Optional[ShellElement] = None
    sub_workflow: Optional[SubWorkflowElement] = Field(default=None, serialization_alias="sub-workflow")
    ok: ActionTransition = Field(..., serialization_alias="ok")
    error: ActionTransition = Field(..., serialization_alias="error")
    
    @property
    def payload(self) -> Optional[DocumentElement]:
        for value in (self.email, self.fs, self.map_reduce, self.shell, self.sub_workflow):
            if value is not None:
                return value
        return None


class CaseElement(DocumentElement):
    XML_TAG = "case"
    XML_ATTRIBUTES = ("to",)
    XML_TEXT = "condition"
    
    to: str
    condition: str


class DefaultElement(DocumentElement):
    XML_TAG = "default"
    XML_ATTRIBUTES = ("to",)
    
    to: str


class SwitchElement(DocumentElement):
    XML_TAG = "switch"
    
    cases: list[CaseElement] = Field(default_factory=list)
    default: DefaultElement


class DecisionElement(DocumentElement):
    XML_TAG = "decision"
    XML_ATTRIBUTES = ("name",)
    
    element_type: Literal["decision"] = "decision"
    name: str
    switch: SwitchElement


class ForkPathElement(DocumentElement):
    XML_TAG = "path"
    XML_ATTRIBUTES = ("start",)
    
    start: str


class ForkElement(DocumentElement):
    XML_TAG = "fork"
    XML_ATTRIBUTES = ("name",)
    
    element_type: Literal["fork"] = "fork"
    name: str
    paths: list[ForkPathElement] = Field(default_factory=list)


class JoinElement(DocumentElement):
    XML_TAG = "join"
    XML_ATTRIBUTES = ("name", "to")
    
    element_type: Literal["join"] = "join"
    name: str
    to: str


DocumentNode = Annotated[
    Union[ActionElement, DecisionElement, ForkElement, JoinElement, KillElement],
    Field(discriminator="element_type"),
]


class WorkflowApp(DocumentElement):
    """
    The workflow definition document.
    
    Holds one start and one end element; every other element sits in
    ``nodes`` in document order.
    """
    
    XML_TAG = "workflow-app"
    XML_ATTRIBUTES = ("name",)
    
    name: Optional[str] = None
    parameters: list[ParameterElement] = Field(default_factory=list, serialization_alias="parameters")
    global_: Optional[GlobalElement] = Field(default=None, serialization_alias="global")
    credentials: list[CredentialElement] = Field(default_factory=list, serialization_alias="credentials")
    start: StartElement
    nodes: list[DocumentNode] = Field(default_factory=list)
    end: EndElement
    
    def get_node(self, name: str) -> Optional[BaseModel]:
        """Find an element of ``nodes`` by name."""
        for node in self.nodes:
            if node.name == name:
                return node
        return None
