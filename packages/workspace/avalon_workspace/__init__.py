"""
Avalon workspace session and audit layer.

Authenticates team members against the fixed roster, persists the session in
local durable storage and keeps the login/logout activity log.
"""

__version__ = "0.1.0"
