"""
Rendering of workflow documents.

XML follows the layout each document model declares (see
``workflow_builder.mapping.document``); JSON is the pydantic dump of the
same models.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Optional

from pydantic import BaseModel

from workflow_builder.config import Settings, get_settings
from workflow_builder.core.workflow import Workflow
from workflow_builder.graph.lowering import lower_workflow
from workflow_builder.mapping.converter import convert_graph
from workflow_builder.mapping.document import DocumentElement, WorkflowApp

logger = logging.getLogger(__name__)

# Fields used to discriminate elements in JSON only
_SKIPPED_FIELDS = frozenset({"element_type"})


def build_document(workflow: Workflow, settings: Optional[Settings] = None) -> WorkflowApp:
    """Lower a workflow and translate it into its document."""
    settings = settings or get_settings()
    graph = lower_workflow(workflow, settings)
    return convert_graph(graph, workflow, settings)


def serialize(workflow: Workflow, settings: Optional[Settings] = None) -> str:
    """
    Render a workflow as an XML workflow definition.
    
    Raises:
        WorkflowBuilderError: If the workflow cannot be lowered or translated;
            nothing is rendered in that case
    """
    settings = settings or get_settings()
    return to_xml(build_document(workflow, settings), settings)


def to_xml(document: WorkflowApp, settings: Optional[Settings] = None) -> str:
    """Render a document as indented XML."""
    settings = settings or get_settings()
    
    root = _to_element(document, document.XML_TAG)
    root.set("xmlns", settings.document.schema_namespace)
    ET.indent(root, space=settings.document.xml_indent)
    
    xml = ET.tostring(root, encoding="unicode")
    logger.debug(f"Rendered workflow '{document.name}' as {len(xml)} characters of XML")
    return xml


def to_json(document: WorkflowApp, settings: Optional[Settings] = None) -> str:
    """Render a document as JSON keyed like the XML tags, leaving out unset optional fields."""
    settings = settings or get_settings()
    return document.model_dump_json(
        indent=settings.document.json_indent,
        by_alias=True,
        exclude_none=True,
    )


def _to_element(model: DocumentElement, tag: str) -> ET.Element:
    element = ET.Element(tag)
    if model.XML_NAMESPACE:
        element.set("xmlns", model.XML_NAMESPACE)
    
    for name, info in type(model).model_fields.items():
        if name in _SKIPPED_FIELDS:
            continue
        
        value = getattr(model, name)
        if value is None:
            continue
        
        alias = info.serialization_alias
        if name in model.XML_ATTRIBUTES:
            element.set(alias or name, _to_text(value))
        elif name == model.XML_TEXT:
            element.text = _to_text(value)
        else:
            _append_child(element, name, alias, value)
    
    return element


def _append_child(element: ET.Element, name: str, alias: Optional[str], value: Any) -> None:
    """
    Append a field value below element.
    
    A single model becomes one child element. A list of models becomes one
    child per item, wrapped in an element named by the alias if there is
    one. A list of scalars repeats the alias tag. True flags become empty
    elements; false flags are left out.
    """
    tag = alias or name
    
    if isinstance(value, BaseModel):
        element.append(_to_element(value, alias or value.XML_TAG))
    elif isinstance(value, list):
        if not value:
            return
        if isinstance(value[0], BaseModel):
            parent = ET.SubElement(element, alias) if alias else element
            for item in value:
                parent.append(_to_element(item, item.XML_TAG))
        else:
            for item in value:
                ET.SubElement(element, tag).text = _to_text(item)
    elif isinstance(value, bool):
        if value:
            ET.SubElement(element, tag)
    else:
        ET.SubElement(element, tag).text = _to_text(value)


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
