"""
The closed set of action kinds and their builders.

Each action is a plain holder of the fields the workflow document needs;
the document translator copies those fields onto the matching document
element by attribute name.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from workflow_builder.core.builder import ActionBuilderBase, ActionConstructionData
from workflow_builder.core.node import Node


class _ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True)


class Delete(_ValueObject):
    """Delete a path on the file system."""
    
    path: str
    skip_trash: Optional[bool] = None


class Mkdir(_ValueObject):
    path: str


class Move(_ValueObject):
    source: str
    target: str


class Chmod(_ValueObject):
    path: str
    permissions: str
    dir_files: bool = True
    recursive: bool = False


class Touchz(_ValueObject):
    path: str


class Prepare(_ValueObject):
    """File system preparation run before a job starts."""
    
    deletes: tuple[Delete, ...] = Field(default_factory=tuple)
    mkdirs: tuple[Mkdir, ...] = Field(default_factory=tuple)


class Action(Node):
    """
    A node that does work.
    
    Holds a configuration map and the kind-specific fields collected by its
    builder. Accessors return copies, so a built action cannot be changed.
    """
    
    def __init__(self, data: ActionConstructionData):
        super().__init__(
            data.name,
            data.parents,
            data.parents_with_conditions,
            data.error_handler,
        )
        self._configuration = dict(data.configuration)
        self._fields = dict(data.fields)
    
    @property
    def configuration(self) -> dict[str, str]:
        return dict(self._configuration)
    
    def get_config_property(self, key: str) -> Optional[str]:
        return self._configuration.get(key)
    
    def _field(self, name: str) -> Any:
        value = self._fields.get(name)
        if isinstance(value, list):
            return list(value)
        return value


class EmailAction(Action):
    """Sends an e-mail."""
    
    to = property(lambda self: self._field("to"))
    cc = property(lambda self: self._field("cc"))
    bcc = property(lambda self: self._field("bcc"))
    subject = property(lambda self: self._field("subject"))
    body = property(lambda self: self._field("body"))
    content_type = property(lambda self: self._field("content_type"))
    attachments = property(lambda self: self._field("attachments"))


class FSAction(Action):
    """Runs file system operations."""
    
    name_node = property(lambda self: self._field("name_node"))
    deletes = property(lambda self: self._field("deletes"))
    mkdirs = property(lambda self: self._field("mkdirs"))
    moves = property(lambda self: self._field("moves"))
    chmods = property(lambda self: self._field("chmods"))
    touchzs = property(lambda self: self._field("touchzs"))


class MapReduceAction(Action):
    """Runs a map-reduce job."""
    
    job_tracker = property(lambda self: self._field("job_tracker"))
    name_node = property(lambda self: self._field("name_node"))
    prepare = property(lambda self: self._field("prepare"))
    config_class = property(lambda self: self._field("config_class"))
    files = property(lambda self: self._field("files"))
    archives = property(lambda self: self._field("archives"))


class ShellAction(Action):
    """Runs a shell command on a cluster node."""
    
    job_tracker = property(lambda self: self._field("job_tracker"))
    name_node = property(lambda self: self._field("name_node"))
    prepare = property(lambda self: self._field("prepare"))
    executable = property(lambda self: self._field("executable"))
    arguments = property(lambda self: self._field("arguments"))
    environment_variables = property(lambda self: self._field("environment_variables"))
    files = property(lambda self: self._field("files"))
    archives = property(lambda self: self._field("archives"))
    capture_output = property(lambda self: bool(self._field("capture_output")))


class SubWorkflowAction(Action):
    """Starts a child workflow."""
    
    app_path = property(lambda self: self._field("app_path"))
    propagate_configuration = property(
        lambda self: bool(self._field("propagate_configuration"))
    )


class EmailActionBuilder(ActionBuilderBase):
    SCALAR_FIELDS = ("subject", "body", "content_type")
    LIST_FIELDS = ("to", "cc", "bcc", "attachments")
    
    @classmethod
    def create(cls) -> "EmailActionBuilder":
        return cls()
    
    @classmethod
    def create_from_existing_action(cls, action: EmailAction) -> "EmailActionBuilder":
        return cls(action)
    
    def with_recipient(self, recipient: str) -> "EmailActionBuilder":
        return self._add_to_list("to", recipient)
    
    def without_recipient(self, recipient: str) -> "EmailActionBuilder":
        return self._remove_from_list("to", recipient)
    
    def clear_recipients(self) -> "EmailActionBuilder":
        return self._clear_list("to")
    
    def with_cc(self, cc: str) -> "EmailActionBuilder":
        return self._add_to_list("cc", cc)
    
    def without_cc(self, cc: str) -> "EmailActionBuilder":
        return self._remove_from_list("cc", cc)
    
    def with_bcc(self, bcc: str) -> "EmailActionBuilder":
        return self._add_to_list("bcc", bcc)
    
    def without_bcc(self, bcc: str) -> "EmailActionBuilder":
        return self._remove_from_list("bcc", bcc)
    
    def with_subject(self, subject: str) -> "EmailActionBuilder":
        return self._set_field("subject", subject)
    
    def with_body(self, body: str) -> "EmailActionBuilder":
        return self._set_field("body", body)
    
    def with_content_type(self, content_type: str) -> "EmailActionBuilder":
        return self._set_field("content_type", content_type)
    
    def with_attachment(self, attachment: str) -> "EmailActionBuilder":
        return self._add_to_list("attachments", attachment)
    
    def without_attachment(self, attachment: str) -> "EmailActionBuilder":
        return self._remove_from_list("attachments", attachment)
    
    def build(self) -> EmailAction:
        return EmailAction(self.get_construction_data())


class FSActionBuilder(ActionBuilderBase):
    SCALAR_FIELDS = ("name_node",)
    LIST_FIELDS = ("deletes", "mkdirs", "moves", "chmods", "touchzs")
    
    @classmethod
    def create(cls) -> "FSActionBuilder":
        return cls()
    
    @classmethod
    def create_from_existing_action(cls, action: FSAction) -> "FSActionBuilder":
        return cls(action)
    
    def with_name_node(self, name_node: str) -> "FSActionBuilder":
        return self._set_field("name_node", name_node)
    
    def with_delete(self, delete: Delete) -> "FSActionBuilder":
        return self._add_to_list("deletes", delete)
    
    def without_delete(self, delete: Delete) -> "FSActionBuilder":
        return self._remove_from_list("deletes", delete)
    
    def clear_deletes(self) -> "FSActionBuilder":
        return self._clear_list("deletes")
    
    def with_mkdir(self, mkdir: Mkdir) -> "FSActionBuilder":
        return self._add_to_list("mkdirs", mkdir)
    
    def without_mkdir(self, mkdir: Mkdir) -> "FSActionBuilder":
        return self._remove_from_list("mkdirs", mkdir)
    
    def clear_mkdirs(self) -> "FSActionBuilder":
        return self._clear_list("mkdirs")
    
    def with_move(self, move: Move) -> "FSActionBuilder":
        return self._add_to_list("moves", move)
    
    def without_move(self, move: Move) -> "FSActionBuilder":
        return self._remove_from_list("moves", move)
    
    def with_chmod(self, chmod: Chmod) -> "FSActionBuilder":
        return self._add_to_list("chmods", chmod)
    
    def without_chmod(self, chmod: Chmod) -> "FSActionBuilder":
        return self._remove_from_list("chmods", chmod)
    
    def with_touchz(self, touchz: Touchz) -> "FSActionBuilder":
        return self._add_to_list("touchzs", touchz)
    
    def without_touchz(self, touchz: Touchz) -> "FSActionBuilder":
        return self._remove_from_list("touchzs", touchz)
    
    def build(self) -> FSAction:
        return FSAction(self.get_construction_data())


class MapReduceActionBuilder(ActionBuilderBase):
    SCALAR_FIELDS = ("job_tracker", "name_node", "prepare", "config_class")
    LIST_FIELDS = ("files", "archives")
    
    @classmethod
    def create(cls) -> "MapReduceActionBuilder":
        return cls()
    
    @classmethod
    def create_from_existing_action(cls, action: MapReduceAction) -> "MapReduceActionBuilder":
        return cls(action)
    
    def with_job_tracker(self, job_tracker: str) -> "MapReduceActionBuilder":
        return self._set_field("job_tracker", job_tracker)
    
    def with_name_node(self, name_node: str) -> "MapReduceActionBuilder":
        return self._set_field("name_node", name_node)
    
    def with_prepare(self, prepare: Prepare) -> "MapReduceActionBuilder":
        return self._set_field("prepare", prepare)
    
    def with_config_class(self, config_class: str) -> "MapReduceActionBuilder":
        return self._set_field("config_class", config_class)
    
    def with_file(self, file: str) -> "MapReduceActionBuilder":
        return self._add_to_list("files", file)
    
    def without_file(self, file: str) -> "MapReduceActionBuilder":
        return self._remove_from_list("files", file)
    
    def clear_files(self) -> "MapReduceActionBuilder":
        return self._clear_list("files")
    
    def with_archive(self, archive: str) -> "MapReduceActionBuilder":
        return self._add_to_list("archives", archive)
    
    def without_archive(self, archive: str) -> "MapReduceActionBuilder":
        return self._remove_from_list("archives", archive)
    
    def clear_archives(self) -> "MapReduceActionBuilder":
        return self._clear_list("archives")
    
    def build(self) -> MapReduceAction:
        return MapReduceAction(self.get_construction_data())


class ShellActionBuilder(ActionBuilderBase):
    SCALAR_FIELDS = ("job_tracker", "name_node", "prepare", "executable", "capture_output")
    LIST_FIELDS = ("arguments", "environment_variables", "files", "archives")
    
    @classmethod
    def create(cls) -> "ShellActionBuilder":
        return cls()
    
    @classmethod
    def create_from_existing_action(cls, action: ShellAction) -> "ShellActionBuilder":
        return cls(action)
    
    def with_job_tracker(self, job_tracker: str) -> "ShellActionBuilder":
        return self._set_field("job_tracker", job_tracker)
    
    def with_name_node(self, name_node: str) -> "ShellActionBuilder":
        return self._set_field("name_node", name_node)
    
    def with_prepare(self, prepare: Prepare) -> "ShellActionBuilder":
        return self._set_field("prepare", prepare)
    
    def with_executable(self, executable: str) -> "ShellActionBuilder":
        return self._set_field("executable", executable)
    
    def with_capture_output(self, capture_output: bool) -> "ShellActionBuilder":
        return self._set_field("capture_output", capture_output)
    
    def with_argument(self, argument: str) -> "ShellActionBuilder":
        return self._add_to_list("arguments", argument)
    
    def without_argument(self, argument: str) -> "ShellActionBuilder":
        return self._remove_from_list("arguments", argument)
    
    def clear_arguments(self) -> "ShellActionBuilder":
        return self._clear_list("arguments")
    
    def with_environment_variable(self, variable: str) -> "ShellActionBuilder":
        return self._add_to_list("environment_variables", variable)
    
    def without_environment_variable(self, variable: str) -> "ShellActionBuilder":
        return self._remove_from_list("environment_variables", variable)
    
    def clear_environment_variables(self) -> "ShellActionBuilder":
        return self._clear_list("environment_variables")
    
    def with_file(self, file: str) -> "ShellActionBuilder":
        return self._add_to_list("files", file)
    
    def without_file(self, file: str) -> "ShellActionBuilder":
        return self._remove_from_list("files", file)
    
    def with_archive(self, archive: str) -> "ShellActionBuilder":
        return self._add_to_list("archives", archive)
    
    def without_archive(self, archive: str) -> "ShellActionBuilder":
        return self._remove_from_list("archives", archive)
    
    def build(self) -> ShellAction:
        return ShellAction(self.get_construction_data())


class SubWorkflowActionBuilder(ActionBuilderBase):
    SCALAR_FIELDS = ("app_path", "propagate_configuration")
    
    @classmethod
    def create(cls) -> "SubWorkflowActionBuilder":
        return cls()
    
    @classmethod
    def create_from_existing_action(cls, action: SubWorkflowAction) -> "SubWorkflowActionBuilder":
        return cls(action)
    
    def with_app_path(self, app_path: str) -> "SubWorkflowActionBuilder":
        return self._set_field("app_path", app_path)
    
    def with_propagating_configuration(self) -> "SubWorkflowActionBuilder":
        return self._set_field("propagate_configuration", True)
    
    def without_propagating_configuration(self) -> "SubWorkflowActionBuilder":
        return self._set_field("propagate_configuration", False)
    
    def build(self) -> SubWorkflowAction:
        return SubWorkflowAction(self.get_construction_data())
