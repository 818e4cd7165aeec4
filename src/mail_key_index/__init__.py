"""Mail Key Index - Cassandra-backed index of mail repository keys.

This package stores, lists and removes the mail keys that belong to a named
mail repository. Mail content lives elsewhere; only the keys are kept here.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from mail_key_index.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__", "__author__"]
