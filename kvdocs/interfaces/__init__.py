"""
Abstract base classes for the document layer's collaborators.
"""

from kvdocs.interfaces.kv_connection import KVConnection

__all__ = ["KVConnection"]
