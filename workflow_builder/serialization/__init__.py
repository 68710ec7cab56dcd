"""Rendering of workflow documents as XML and JSON."""

from workflow_builder.serialization.serializer import build_document, serialize, to_json, to_xml

__all__ = ["build_document", "serialize", "to_json", "to_xml"]
