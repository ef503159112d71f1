"""
Tests for role storage and loading.
"""

import pytest
from sqlalchemy import select

from rolegate.core.auth import AbilityRegistry, Rule, RuleValidationError
from rolegate.models.rbac import Permission
from rolegate.services.rbac import RBACService
from rolegate.services.user import UserService


@pytest.mark.asyncio
async def test_create_role_keeps_rule_order(rbac_service: RBACService):
    await rbac_service.create_role("editor", rules=[
        {"action": "read", "subject": "Post"},
        {"action": "read", "subject": "Post", "inverted": True, "reason": "Hidden"},
        Rule("update", "Post", fields=["title"]),
    ])
    await rbac_service.db.commit()

    role_rules = await rbac_service.load_role_rules()

    assert role_rules == {
        "editor": [
            Rule("read", "Post"),
            Rule("read", "Post", inverted=True, reason="Hidden"),
            Rule("update", "Post", fields=["title"]),
        ]
    }


@pytest.mark.asyncio
async def test_create_role_expands_multi_action_records(rbac_service: RBACService):
    role = await rbac_service.create_role("writer", rules=[
        {"action": ["create", "update"], "subject": "Post"},
    ])

    assert [(rule.action, rule.subject) for rule in role.rules] == [
        ("create", "Post"),
        ("update", "Post"),
    ]
    assert [link.position for link in role.permission_links] == [0, 1]


@pytest.mark.asyncio
async def test_create_role_rejects_malformed_rules(rbac_service: RBACService):
    with pytest.raises(RuleValidationError):
        await rbac_service.create_role("broken", rules=[{"action": "", "subject": "Post"}])

    assert await rbac_service.get_role_by_name("broken") is None


@pytest.mark.asyncio
async def test_add_rule_appends_at_the_end(rbac_service: RBACService):
    await rbac_service.create_role("editor", rules=[{"action": "read", "subject": "Post"}])

    role = await rbac_service.add_rule_to_role(
        "editor",
        {"action": "read", "subject": "Post", "inverted": True},
    )

    assert role is not None
    assert role.rules[-1] == Rule("read", "Post", inverted=True)
    assert await rbac_service.add_rule_to_role("missing", {"action": "read", "subject": "Post"}) is None


@pytest.mark.asyncio
async def test_delete_role(rbac_service: RBACService):
    await rbac_service.create_role("temp")

    assert await rbac_service.delete_role("temp") is True
    assert await rbac_service.delete_role("temp") is False
    assert await rbac_service.get_role_by_name("temp") is None


@pytest.mark.asyncio
async def test_delete_role_removes_its_permissions(rbac_service: RBACService):
    await rbac_service.create_role("editor", rules=[
        {"action": ["read", "update"], "subject": "Post"},
    ])
    await rbac_service.create_role("viewer", rules=[{"action": "read", "subject": "Post"}])

    assert await rbac_service.delete_role("editor") is True

    remaining = await rbac_service.db.scalars(select(Permission))
    assert [(p.action, p.subject) for p in remaining] == [("read", "Post")]
    assert await rbac_service.load_role_rules() == {"viewer": [Rule("read", "Post")]}


@pytest.mark.asyncio
async def test_seed_defaults_is_idempotent(rbac_service: RBACService):
    assert await rbac_service.seed_defaults() is True
    assert await rbac_service.seed_defaults() is False

    roles = await rbac_service.list_roles()
    assert [role.name for role in roles] == ["admin", "guest"]

    user = await UserService(rbac_service.db).get_by_email("user@example.org")
    assert user is not None


@pytest.mark.asyncio
async def test_loaded_rules_feed_the_registry(seeded: RBACService):
    registry = AbilityRegistry.build_all(await seeded.load_role_rules())

    admin = registry.lookup("admin")
    guest = registry.lookup("guest")

    assert admin.can("delete", "User")
    assert guest.can("read", "User")
    assert not guest.can("delete", "User")
    assert guest.permitted_fields("read", "User", ["id", "email"]) == {"email"}


@pytest.mark.asyncio
async def test_list_projected_selects_only_requested_columns(seeded: RBACService):
    users = await UserService(seeded.db).list_projected(["email"])

    assert users == [{"email": "user@example.org"}]


@pytest.mark.asyncio
async def test_list_projected_ignores_unknown_fields(seeded: RBACService):
    service = UserService(seeded.db)

    assert await service.list_projected(["email", "password"]) == [{"email": "user@example.org"}]
    assert await service.list_projected([]) == []
