"""Shared fixtures for opclient tests — a scripted stand-in for the op binary."""

from __future__ import annotations

import asyncio
import json
from collections import Counter
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from opclient.client import OnePasswordClient
from opclient.config import ClientConfig
from opclient.models import Session

ACCOUNT = {
    "uuid": "ACC1",
    "name": "Acme",
    "avatar": "acme.png",
    "baseAvatarURL": "https://a.example.com/",
    "createdAt": "2019-01-10T09:00:00Z",
}

TEMPLATES = [
    {"uuid": "001", "name": "Login"},
    {"uuid": "003", "name": "Secure Note"},
]

VAULTS = {
    "v1": {"uuid": "v1", "name": "Private", "desc": "Personal things", "avatar": "private.png"},
    "v2": {"uuid": "v2", "name": "Shared", "desc": "", "avatar": ""},
}

ITEMS = [
    {
        "uuid": "i1",
        "templateUuid": "001",
        "vaultUuid": "v1",
        "overview": {"title": "GitHub", "ainfo": "octocat", "url": "https://github.com"},
    },
    {
        "uuid": "i2",
        "templateUuid": "001",
        "vaultUuid": "v2",
        "overview": {"title": "Gmail", "ainfo": "someone@gmail.com", "url": "https://mail.google.com"},
    },
    {
        "uuid": "i3",
        "templateUuid": "003",
        "vaultUuid": "v1",
        "overview": {"title": "Wifi notes", "ainfo": "", "url": ""},
    },
]

ITEM_DETAILS = {
    "i1": {
        **ITEMS[0],
        "details": {
            "fields": [
                {"name": "username", "designation": "username", "type": "T", "value": "octocat"},
                {"name": "password", "designation": "password", "type": "P", "value": "hunter2"},
            ]
        },
    },
}

NOT_FOUND = "[bin-error] exit status 1---[LOG] 2019/01/01 10:00:00 (ERROR) Item {id} not found"


class FakeOp:
    """Scripted op runner. Records every argv and answers from fixture data."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls: list[list[str]] = []
        self.overrides: dict[str, str] = {}

    def count(self, command: str) -> int:
        return Counter(" ".join(c[:2]) for c in self.calls)[command]

    def respond(self, argv: list[str]) -> str:
        words = [a for a in argv if not a.startswith("--")]
        key = " ".join(words[:2])
        if key in self.overrides:
            return self.overrides[key]
        if words[0] == "signin":
            return "tok-123"
        if key == "get account":
            return json.dumps(ACCOUNT)
        if key == "list templates":
            return json.dumps(TEMPLATES)
        if key == "list vaults":
            return json.dumps([{"uuid": v["uuid"], "name": v["name"]} for v in VAULTS.values()])
        if key == "get vault":
            return json.dumps(VAULTS[words[2]])
        if key == "list items":
            scope = next((a.split("=", 1)[1] for a in argv if a.startswith("--vault=")), None)
            if scope is None:
                return json.dumps(ITEMS)
            ids = {v["uuid"] for v in VAULTS.values() if v["name"] == scope}
            return json.dumps([i for i in ITEMS if i["vaultUuid"] in ids])
        if key == "get item":
            item_id = words[2]
            if item_id in ITEM_DETAILS:
                return json.dumps(ITEM_DETAILS[item_id])
            match = [i for i in ITEMS if i["uuid"] == item_id]
            return json.dumps(match[0]) if match else NOT_FOUND.format(id=item_id)
        raise AssertionError(f"Unexpected op call: {argv}")

    async def __call__(self, executable: Path, argv: list[str]) -> str:
        self.calls.append(list(argv))
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.respond(argv)


@pytest.fixture
def fake_op() -> FakeOp:
    return FakeOp(delay=0.01)


@pytest.fixture
def client_config(tmp_path: Path) -> ClientConfig:
    return ClientConfig(executable=tmp_path / "op", command_timeout=5.0)


@pytest.fixture
def client(client_config: ClientConfig, fake_op: FakeOp) -> OnePasswordClient:
    return OnePasswordClient(config=client_config, runner=fake_op)


@pytest.fixture
def session() -> Session:
    return Session(token="tok-123", expires_at=datetime.now(timezone.utc) + timedelta(minutes=29))


@pytest.fixture
def expired_session() -> Session:
    return Session(token="tok-old", expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))


@pytest.fixture
def raw_items() -> list[dict[str, Any]]:
    return [dict(i) for i in ITEMS]
