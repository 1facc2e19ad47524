"""
Personal task and time tracker.

This package holds the task stores, the classification and analytics
functions and the FastAPI app exposing them.
"""

# Expose FastAPI app at package level (optional import path: time_tracker.app)
try:
    from .main import app  # noqa: F401
except Exception:
    # During certain tooling operations (e.g., static analysis) the import
    # path may not be resolvable. We ignore import errors here to avoid
    # side effects at import time.
    pass
