"""Converter tools, one sub-package per tool."""
