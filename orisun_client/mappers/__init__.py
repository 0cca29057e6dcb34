"""Mapping of transport failures onto the client error hierarchy."""
from .errors import extract_version_numbers, translate_rpc_error

__all__ = ["extract_version_numbers", "translate_rpc_error"]
