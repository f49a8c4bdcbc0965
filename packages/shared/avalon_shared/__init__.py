"""
Avalon workspace shared domain model.

Schemas and closed enumerations used by every screen that reads or writes
tasks, attachments, evaluations and the activity log.
"""

__version__ = "0.1.0"
