"""Canonical in-memory data model.

This module holds interpolation blocks, set members, and set metadata.
It is the representation every registry format is converted into.
"""
