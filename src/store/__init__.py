"""Cache storage layer.

This module addresses cacheable resources and persists their bytes.
It also owns the canonical Info and Member encodings.
"""
