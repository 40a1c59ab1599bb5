"""Registry fetch pipeline.

This module downloads registry resources and converts legacy encodings.
It exposes async and blocking access to indexes, metadata, and members.
"""
