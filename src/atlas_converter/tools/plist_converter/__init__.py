"""Plist Converter tool: converts TexturePacker .plist atlases into engine JSON descriptors."""

from atlas_converter.tools.plist_converter.tool import PlistConverterTool

__all__ = ["PlistConverterTool"]
