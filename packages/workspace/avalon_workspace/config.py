"""
Configuration loading and validation.

Runtime settings come from ``AVALON_*`` environment variables (or a
``.env`` file). The team roster is either the built-in table or a YAML file
named by ``AVALON_ROSTER_PATH``; it is loaded once and frozen.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .roster import Roster


class Settings(BaseSettings):
    """Workspace configuration."""

    model_config = SettingsConfigDict(env_prefix="AVALON_", env_file=".env", extra="ignore")

    # Durable storage
    storage_path: str = "./data/workspace.db"

    # Roster (None = built-in team table)
    roster_path: Optional[str] = None

    # Navigation targets signalled on login/logout
    default_route: str = "/kanban"
    login_route: str = "/login"

    # Logging
    log_level: str = "info"
    log_format: Literal["json", "text"] = "json"


class RosterConfig(BaseModel):
    users: dict[str, str] = Field(min_length=1)
    admins: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _admins_are_members(self) -> "RosterConfig":
        unknown = sorted(set(self.admins) - set(self.users))
        if unknown:
            raise ValueError(f"admins not listed under users: {', '.join(unknown)}")
        return self

    def to_roster(self) -> Roster:
        return Roster(self.users, self.admins)


DEFAULT_ROSTER = RosterConfig(
    users={
        "Davi": "jesuscura10",
        "Carol": "123456",
        "Lorenzo": "123456",
        "Thiago": "123456",
        "Miguel": "123456",
        "Italo": "123456",
    },
    admins=["Davi"],
)


def load_roster(path: str | Path | None = None) -> Roster:
    """Load and freeze the roster from a YAML file, or the built-in table."""
    if path is None:
        return DEFAULT_ROSTER.to_roster()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Roster file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    try:
        return RosterConfig.model_validate(raw).to_roster()
    except ValidationError as exc:
        raise ConfigError(f"Invalid roster file {path}: {exc}") from exc


@lru_cache
def get_settings() -> Settings:
    return Settings()
