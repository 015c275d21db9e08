"""AsyncAPI document loading."""

from scs_template.document.parser import load_document, parse_document, parse_document_yaml

__all__ = ["load_document", "parse_document", "parse_document_yaml"]
