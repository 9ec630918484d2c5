"""
Normalization of raw op item records into typed items.

Each record's vault and template references are resolved through the
client's cached queries, so a listing of N items from one vault costs one
``get vault`` and one ``list templates`` call, not N of each.

Template-specific fields come from rules registered with ``item_rule``:

    @item_rule("005", PasswordItem)
    def _password(record):
        return {"password": ...}

Templates with no rule produce a plain BaseItem.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from opclient.errors import ProtocolError, QueryError
from opclient.models import BaseItem, Item, LoginItem, Session, Template

if TYPE_CHECKING:
    from opclient.client import OnePasswordClient

logger = logging.getLogger(__name__)

LOGIN_TEMPLATE_UUID = "001"

# Field type tag op uses for concealed (password) values
PASSWORD_FIELD_TYPE = "P"

Record = dict[str, Any]
FieldExtractor = Callable[[Record], dict[str, Any]]


@dataclass(frozen=True)
class ItemRule:
    model: type[BaseItem]
    extract: FieldExtractor


_RULES: dict[str, ItemRule] = {}


def item_rule(template_uuid: str, model: type[BaseItem]) -> Callable[[FieldExtractor], FieldExtractor]:
    """Register the model and extra-field extractor for a template id."""

    def decorator(fn: FieldExtractor) -> FieldExtractor:
        _RULES[template_uuid] = ItemRule(model=model, extract=fn)
        return fn

    return decorator


def rule_for(template_uuid: str) -> ItemRule | None:
    return _RULES.get(template_uuid)


# ─── Template rules ──────────────────────────────────────────────────────


def _find_password(fields: list[dict[str, Any]], attr: str) -> dict[str, Any] | None:
    for f in fields:
        if str(f.get(attr, "")).lower() == "password" and f.get("type") == PASSWORD_FIELD_TYPE:
            return f
    return None


@item_rule(LOGIN_TEMPLATE_UUID, LoginItem)
def login_fields(record: Record) -> dict[str, Any]:
    """Username from the overview, password from the details fields.

    A field named "password" wins over one merely designated as the password.
    """
    extra: dict[str, Any] = {"username": (record.get("overview") or {}).get("ainfo") or ""}

    fields = (record.get("details") or {}).get("fields")
    if fields:
        match = _find_password(fields, "name") or _find_password(fields, "designation")
        if match is not None:
            extra["password"] = match.get("value")
    return extra


# ─── Pipeline ────────────────────────────────────────────────────────────


def require_field(record: Record, key: str) -> Any:
    """record[key], or ProtocolError when op left it out."""
    try:
        return record[key]
    except (KeyError, TypeError):
        raise ProtocolError(f"op record is missing '{key}'", output=str(record)) from None


def find_template(templates: list[Template], template_uuid: str) -> Template:
    for template in templates:
        if template.uuid == template_uuid:
            return template
    raise QueryError(f"Template {template_uuid} not found")


async def format_item(client: OnePasswordClient, session: Session, record: Record) -> Item:
    """Turn one raw item record into a BaseItem or a template-specific item."""
    uuid = require_field(record, "uuid")
    vault, templates = await asyncio.gather(
        client.get_vault(session, require_field(record, "vaultUuid")),
        client.get_templates(session),
    )
    template = find_template(templates, require_field(record, "templateUuid"))

    fields: dict[str, Any] = {
        "uuid": uuid,
        "vault": vault,
        "template": template,
        "title": (record.get("overview") or {}).get("title") or "",
    }

    rule = rule_for(template.uuid)
    if rule is None:
        return BaseItem(**fields)
    return rule.model(**fields, **rule.extract(record))


def matches_template(record: Record, template: Template | None) -> bool:
    return template is None or record.get("templateUuid") == template.uuid


async def trim(
    client: OnePasswordClient,
    session: Session,
    data: list[Record] | Record,
    template: Template | None = None,
) -> list[Item] | Item:
    """Normalize a single record, or a template-filtered list of records."""
    if isinstance(data, list):
        kept = [record for record in data if matches_template(record, template)]
        logger.debug("Normalizing %d of %d items", len(kept), len(data))
        return list(await asyncio.gather(*(format_item(client, session, r) for r in kept)))
    if not isinstance(data, dict):
        raise ProtocolError(f"Expected an item record, got {type(data).__name__}", output=str(data))
    return await format_item(client, session, data)
