"""
Route guard decisions for protected screens.

Screens ask the guard before rendering: show a placeholder while the session
is still loading, send unauthenticated users to the login route, and keep
non-admins out of admin-only screens.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .session import SessionManager


class GuardOutcome(str, Enum):
    PLACEHOLDER = "placeholder"
    REDIRECT = "redirect"
    RENDER = "render"


class GuardDecision(BaseModel):
    outcome: GuardOutcome
    redirect_to: Optional[str] = None


class RouteGuard:
    def __init__(self, session: SessionManager):
        self._session = session

    def check(self) -> GuardDecision:
        snap = self._session.snapshot()
        if snap.loading:
            return GuardDecision(outcome=GuardOutcome.PLACEHOLDER)
        if not snap.is_authenticated:
            return GuardDecision(
                outcome=GuardOutcome.REDIRECT, redirect_to=self._session.login_route
            )
        return GuardDecision(outcome=GuardOutcome.RENDER)

    def check_admin(self) -> GuardDecision:
        decision = self.check()
        if decision.outcome is GuardOutcome.RENDER and not self._session.is_admin:
            return GuardDecision(
                outcome=GuardOutcome.REDIRECT, redirect_to=self._session.default_route
            )
        return decision
