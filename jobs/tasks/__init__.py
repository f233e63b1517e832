"""
Dramatiq actors.

Run workers with ``dramatiq jobs.tasks``.
"""

from jobs.tasks.transaction_confirmation import process_transaction

__all__ = ["process_transaction"]
