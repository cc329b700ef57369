"""Utility modules for the Flotilla reconciler."""

from .codec import to_json_string, to_yaml_string, to_yaml_documents

__all__ = ["to_json_string", "to_yaml_string", "to_yaml_documents"]
