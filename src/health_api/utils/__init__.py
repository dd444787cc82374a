"""Utility functions for the health API server."""

from health_api.utils.model_converter import to_response_list, to_response_model
from health_api.utils.version import VersionInfo, get_version

__all__ = [
    "to_response_model",
    "to_response_list",
    "VersionInfo",
    "get_version",
]
