"""
OnePasswordClient — typed, cached, read-only access to the op CLI.

One client owns one QueryCache and one resolved op executable. Every
privileged call checks the session first, then looks the request up in the
cache, and only on a miss spawns op. Cache keys always carry the session
token value, so data fetched under one session is never served to another.

Usage:
    async with OnePasswordClient() as op:
        session = await op.authenticate(credentials)
        items = await op.get_items(session, ItemsOptions(query="github"))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from opclient import normalize
from opclient.cache import QueryCache
from opclient.config import ClientConfig, get_config
from opclient.errors import ProtocolError
from opclient.fuzzy import search
from opclient.models import (
    Account,
    Credentials,
    Item,
    ItemsOptions,
    Session,
    Template,
    User,
    UserDetails,
    Vault,
    VaultDetails,
)
from opclient.normalize import require_field
from opclient.process import build_command, run_binary
from opclient.response import classify
from opclient.session import is_valid, new_session, require_valid

logger = logging.getLogger(__name__)

Runner = Callable[[Path, list[str]], Awaitable[str]]


class OnePasswordClient:
    """Async facade over the op binary."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        cache: QueryCache | None = None,
        runner: Runner | None = None,
    ) -> None:
        self.config = config or get_config()
        self.cache = cache or QueryCache()
        self._runner = runner or self._run

    async def __aenter__(self) -> OnePasswordClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.clear_cache()

    async def _run(self, executable: Path, argv: list[str]) -> str:
        return await run_binary(executable, argv, timeout=self.config.command_timeout)

    async def exec(
        self,
        command: str,
        *args: str,
        session: Session | None = None,
        vault: Vault | None = None,
        raw: bool = False,
    ) -> Any:
        """Run one op command and return its classified payload."""
        argv = build_command(command, *args, session=session, vault=vault)
        output = await self._runner(self.config.executable, argv)
        return classify(output, raw=raw)

    def clear_cache(self) -> None:
        self.cache.clear()

    # ── Authentication ──────────────────────────────────────────────────

    async def authenticate(self, credentials: Credentials) -> Session:
        """Sign in and return a session leased for config.session_lease."""
        token = await self.exec(
            "signin",
            credentials.domain,
            credentials.email,
            credentials.secret_key,
            credentials.master_password,
            "--output=raw",
            raw=True,
        )
        if not token:
            raise ProtocolError("op signin returned an empty token")
        session = new_session(token, lease=self.config.session_lease)
        logger.info("Signed in to %s, session valid until %s", credentials.domain, session.expires_at)
        return session

    @staticmethod
    def is_valid(session: Session, now: datetime | None = None) -> bool:
        return is_valid(session, now)

    async def _cached(self, key: tuple[Any, ...], factory: Callable[[], Awaitable[Any]]) -> Any:
        return await self.cache.resolve(key, factory)

    # ── Account & users ─────────────────────────────────────────────────

    async def get_account(self, session: Session) -> Account:
        require_valid(session)

        async def fetch() -> Account:
            account = await self.exec("get account", session=session)
            uuid = require_field(account, "uuid")
            base = f"{require_field(account, 'baseAvatarURL')}{uuid}"
            return Account(
                uuid=uuid,
                name=require_field(account, "name"),
                avatar_url=f"{base}/{account.get('avatar', '')}",
                base_avatar_url=base,
                created_at=require_field(account, "createdAt"),
            )

        return await self._cached(("account", session.token), fetch)

    def _avatar_url(self, record: dict[str, Any], account: Account, default: str) -> str:
        avatar = record.get("avatar") or ""
        return f"{account.base_avatar_url}/{avatar}" if avatar else default

    async def get_users(self, session: Session) -> list[User]:
        require_valid(session)

        async def fetch() -> list[User]:
            users, account = await asyncio.gather(
                self.exec("list users", session=session), self.get_account(session)
            )
            return [
                User(
                    uuid=require_field(u, "uuid"),
                    first_name=u.get("firstName", ""),
                    last_name=u.get("lastName", ""),
                    email=u.get("email", ""),
                    avatar_url=self._avatar_url(u, account, self.config.person_avatar_default),
                )
                for u in users
            ]

        return await self._cached(("users", session.token), fetch)

    async def get_user(self, session: Session, user_id: str) -> UserDetails:
        require_valid(session)

        async def fetch() -> UserDetails:
            user, account = await asyncio.gather(
                self.exec("get user", user_id, session=session), self.get_account(session)
            )
            return UserDetails(
                uuid=require_field(user, "uuid"),
                first_name=user.get("firstName", ""),
                last_name=user.get("lastName", ""),
                email=user.get("email", ""),
                avatar_url=self._avatar_url(user, account, self.config.person_avatar_default),
                language=user.get("language", ""),
                created_at=require_field(user, "createdAt"),
                updated_at=require_field(user, "updatedAt"),
                last_auth_at=require_field(user, "lastAuthAt"),
            )

        return await self._cached(("user", session.token, user_id), fetch)

    # ── Templates & vaults ──────────────────────────────────────────────

    async def get_templates(self, session: Session) -> list[Template]:
        require_valid(session)

        async def fetch() -> list[Template]:
            templates = await self.exec("list templates", session=session)
            return [
                Template(uuid=require_field(t, "uuid"), name=require_field(t, "name"))
                for t in templates
            ]

        return await self._cached(("templates", session.token), fetch)

    async def get_vaults(self, session: Session) -> list[Vault]:
        require_valid(session)

        async def fetch() -> list[Vault]:
            vaults = await self.exec("list vaults", session=session)
            return [Vault(uuid=require_field(v, "uuid"), name=require_field(v, "name")) for v in vaults]

        return await self._cached(("vaults", session.token), fetch)

    async def get_vault(self, session: Session, vault_id: str) -> VaultDetails:
        require_valid(session)

        async def fetch() -> VaultDetails:
            vault, account = await asyncio.gather(
                self.exec("get vault", vault_id, session=session), self.get_account(session)
            )
            return VaultDetails(
                uuid=require_field(vault, "uuid"),
                name=require_field(vault, "name"),
                description=vault.get("desc") or "",
                avatar_url=self._avatar_url(vault, account, self.config.vault_avatar_default),
            )

        return await self._cached(("vault", session.token, vault_id), fetch)

    # ── Items ───────────────────────────────────────────────────────────

    async def _list_items(self, session: Session, vault: Vault | None) -> list[dict[str, Any]]:
        async def fetch() -> list[dict[str, Any]]:
            records = await self.exec("list items", session=session, vault=vault)
            if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
                raise ProtocolError(
                    "op list items did not return an array of records", output=str(records)
                )
            return records

        return await self._cached(
            ("list items", session.token, vault.name if vault else None), fetch
        )

    async def get_items(self, session: Session, options: ItemsOptions | None = None) -> list[Item]:
        """List items, optionally scoped to a vault, filtered by template and fuzzy query."""
        require_valid(session)
        options = options or ItemsOptions()

        async def fetch() -> list[Item]:
            records = await self._list_items(session, options.vault)
            if options.query:
                records = search(records, options.query, options.fuzzy)
                logger.debug("Fuzzy query kept %d items", len(records))
            return await normalize.trim(self, session, records, options.template)

        return await self._cached(("items", session.token, *options.cache_key()), fetch)

    async def get_item(self, session: Session, item_id: str) -> Item:
        require_valid(session)

        async def fetch() -> Item:
            record = await self.exec("get item", item_id, session=session)
            if not isinstance(record, dict):
                raise ProtocolError("op get item did not return a single record", output=str(record))
            return await normalize.trim(self, session, record)

        return await self._cached(("item", session.token, item_id), fetch)
