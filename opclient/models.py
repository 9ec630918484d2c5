"""
Data models for opclient.

Every entity is a frozen pydantic model: a snapshot of what the op tool
returned, reshaped into snake_case fields. Raw op records (camelCase JSON)
never leave opclient.normalize and opclient.client.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ─── Authentication ──────────────────────────────────────────────────────


class Credentials(_Frozen):
    """Sign-in input. Used once to mint a Session, never stored."""

    domain: str
    email: str
    secret_key: str = Field(repr=False)
    master_password: str = Field(repr=False)


class Session(_Frozen):
    """An op session token and the instant it stops being usable."""

    token: str = Field(repr=False)
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ─── Account & users ─────────────────────────────────────────────────────


class Account(_Frozen):
    uuid: str
    name: str
    avatar_url: str
    base_avatar_url: str
    created_at: datetime


class User(_Frozen):
    uuid: str
    first_name: str
    last_name: str
    email: str
    avatar_url: str


class UserDetails(User):
    language: str
    created_at: datetime
    updated_at: datetime
    last_auth_at: datetime


# ─── Reference data ──────────────────────────────────────────────────────


class Template(_Frozen):
    """An op item kind, e.g. Login (uuid "001")."""

    uuid: str
    name: str


class Vault(_Frozen):
    uuid: str
    name: str


class VaultDetails(Vault):
    description: str = ""
    avatar_url: str


# ─── Items ───────────────────────────────────────────────────────────────


class BaseItem(_Frozen):
    """Fields every item carries. vault and template are always resolved."""

    uuid: str
    vault: VaultDetails
    template: Template
    title: str = ""


class LoginItem(BaseItem):
    username: str = ""
    password: str | None = Field(default=None, repr=False)


Item = BaseItem | LoginItem


# ─── Query options ───────────────────────────────────────────────────────

DEFAULT_FUZZY_KEYS = (
    "uuid",
    "vaultUuid",
    "overview.ainfo",
    "overview.title",
    "overview.url",
)


class FuzzyOptions(_Frozen):
    """Approximate matching knobs for item search.

    threshold: 0.0 is a perfect match, 1.0 matches anything.
    location/distance: where in a field the match is expected and how far
    from it a match may drift before it scores as a full mismatch.
    """

    should_sort: bool = True
    threshold: float = Field(default=0.15, ge=0.0, le=1.0)
    location: int = Field(default=0, ge=0)
    distance: int = Field(default=100, ge=0)
    max_pattern_length: int = Field(default=32, gt=0)
    min_match_char_length: int = Field(default=1, ge=1)
    keys: tuple[str, ...] = DEFAULT_FUZZY_KEYS


class ItemsOptions(_Frozen):
    """Scope and filters for OnePasswordClient.get_items."""

    vault: Vault | None = None
    template: Template | None = None
    query: str | None = None
    fuzzy: FuzzyOptions = Field(default_factory=FuzzyOptions)

    def cache_key(self) -> tuple[str | None, str | None, str | None, str]:
        return (
            self.vault.name if self.vault else None,
            self.template.uuid if self.template else None,
            self.query or None,
            self.fuzzy.model_dump_json(),
        )
