"""Tests for route guard decisions."""

from __future__ import annotations

from avalon_workspace.guard import GuardOutcome, RouteGuard


def test_placeholder_while_loading(make_session, store):
    guard = RouteGuard(make_session(store, restore=False))
    assert guard.check().outcome is GuardOutcome.PLACEHOLDER
    assert guard.check_admin().outcome is GuardOutcome.PLACEHOLDER


def test_redirects_to_login_when_unauthenticated(session):
    decision = RouteGuard(session).check()
    assert decision.outcome is GuardOutcome.REDIRECT
    assert decision.redirect_to == "/login"


def test_renders_when_authenticated(session):
    session.login("Carol", "123456")
    assert RouteGuard(session).check().outcome is GuardOutcome.RENDER


def test_admin_screen_redirects_members(session):
    session.login("Carol", "123456")
    decision = RouteGuard(session).check_admin()
    assert decision.outcome is GuardOutcome.REDIRECT
    assert decision.redirect_to == "/kanban"


def test_admin_screen_renders_for_admin(session):
    session.login("Davi", "jesuscura10")
    assert RouteGuard(session).check_admin().outcome is GuardOutcome.RENDER
