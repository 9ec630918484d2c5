"""
opclient — typed async client for the 1Password op CLI.

Public API:
    OnePasswordClient(config=None)       → client holding the query cache
    client.authenticate(credentials)     → Session (29 minute lease)
    is_valid(session)                    → bool
    client.get_account(session)          → Account
    client.get_users(session)            → list[User]
    client.get_user(session, id)         → UserDetails
    client.get_templates(session)        → list[Template]
    client.get_vaults(session)           → list[Vault]
    client.get_vault(session, id)        → VaultDetails
    client.get_items(session, options)   → list[BaseItem | LoginItem]
    client.get_item(session, id)         → BaseItem | LoginItem
"""

from __future__ import annotations

from opclient.client import OnePasswordClient
from opclient.config import ClientConfig, get_config
from opclient.errors import (
    CommandTimeoutError,
    OnePasswordError,
    ProtocolError,
    QueryError,
    SessionError,
    SpawnError,
)
from opclient.models import (
    Account,
    BaseItem,
    Credentials,
    FuzzyOptions,
    Item,
    ItemsOptions,
    LoginItem,
    Session,
    Template,
    User,
    UserDetails,
    Vault,
    VaultDetails,
)
from opclient.normalize import item_rule
from opclient.session import is_valid

__all__ = [
    "OnePasswordClient",
    "ClientConfig",
    "get_config",
    "is_valid",
    "item_rule",
    "OnePasswordError",
    "SessionError",
    "QueryError",
    "ProtocolError",
    "SpawnError",
    "CommandTimeoutError",
    "Credentials",
    "Session",
    "Account",
    "User",
    "UserDetails",
    "Template",
    "Vault",
    "VaultDetails",
    "BaseItem",
    "LoginItem",
    "Item",
    "FuzzyOptions",
    "ItemsOptions",
]
