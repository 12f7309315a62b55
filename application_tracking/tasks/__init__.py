"""
Deferred task execution.
"""

from application_tracking.tasks.runner import DeferredTaskRunner, utcnow

__all__ = ["DeferredTaskRunner", "utcnow"]
