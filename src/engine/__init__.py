"""Physics-engine capability layer.

This module defines the evaluation interface that engine backends satisfy.
Callers inject a backend; the no-op backend is the fallback.
"""
