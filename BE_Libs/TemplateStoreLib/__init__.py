"""
TemplateStoreLib - Coordinate template persistence

Saves named field coordinates so they can be reapplied to banners that share
a layout.
"""

from BE_Libs.TemplateStoreLib.key_value_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from BE_Libs.TemplateStoreLib.template_store import CoordinateTemplate, TemplateManager

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "CoordinateTemplate",
    "TemplateManager",
]
