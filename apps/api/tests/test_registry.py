"""
Tests for the role → ability registry.
"""

import threading

import pytest

from rolegate.core.auth import (
    Ability,
    AbilityRegistry,
    Rule,
    RuleValidationError,
    UnknownRoleError,
    permitted_fields,
)


@pytest.fixture
def registry(admin_rules, guest_rules) -> AbilityRegistry:
    return AbilityRegistry.build_all({"admin": admin_rules, "guest": guest_rules})


def test_build_all_compiles_every_role(registry: AbilityRegistry):
    assert registry.roles == ["admin", "guest"]
    assert len(registry) == 2
    assert "admin" in registry
    assert isinstance(registry.lookup("guest"), Ability)


def test_lookup_unknown_role(registry: AbilityRegistry):
    assert registry.lookup("editor") is None


def test_lookup_or_default(registry: AbilityRegistry):
    assert registry.lookup_or_default("admin", "guest") is registry.lookup("admin")
    assert registry.lookup_or_default("editor", "guest") is registry.lookup("guest")
    assert registry.lookup_or_default(None, "guest") is registry.lookup("guest")


def test_lookup_or_default_without_fallback_fails(registry: AbilityRegistry):
    with pytest.raises(UnknownRoleError) as exc_info:
        registry.lookup_or_default("editor", "visitor")

    assert exc_info.value.role == "editor"
    assert exc_info.value.fallback == "visitor"
    assert isinstance(exc_info.value, LookupError)


def test_admin_and_guest_scenario(registry: AbilityRegistry):
    admin = registry.lookup_or_default("admin", "guest")
    assert admin.can("read", "User")
    assert permitted_fields(admin, "read", "User", ["id", "email"]) == {"id", "email"}

    anonymous = registry.lookup_or_default("nobody", "guest")
    assert anonymous.can("read", "User")
    assert permitted_fields(anonymous, "read", "User", ["id", "email"]) == {"email"}
    assert not anonymous.can("delete", "User")


def test_default_message_is_threaded_into_abilities():
    registry = AbilityRegistry.build_all({"guest": []}, default_message="Go away")

    assert registry.lookup("guest").default_message == "Go away"


def test_entries_are_read_only(registry: AbilityRegistry):
    with pytest.raises(TypeError):
        registry.abilities["editor"] = Ability([])


def test_reload_replaces_the_whole_mapping(registry: AbilityRegistry):
    before = registry.abilities

    registry.reload({"editor": [Rule("update", "Post")]})

    assert registry.roles == ["editor"]
    assert registry.lookup("admin") is None
    # Snapshots taken before the reload are unaffected
    assert sorted(before) == ["admin", "guest"]


def test_failed_reload_keeps_the_previous_mapping(registry: AbilityRegistry):
    with pytest.raises(RuleValidationError):
        registry.reload({"editor": [{"action": "", "subject": "Post"}]})

    assert registry.roles == ["admin", "guest"]


def test_role_names_must_be_non_empty():
    with pytest.raises(ValueError):
        AbilityRegistry.build_all({"": []})


def test_lookups_during_reload_see_complete_mappings(admin_rules, guest_rules):
    old = {"admin": admin_rules, "guest": guest_rules}
    new = {"admin": admin_rules, "guest": guest_rules, "editor": [Rule("update", "Post")]}
    registry = AbilityRegistry.build_all(old)
    seen: set[tuple[str, ...]] = set()
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            seen.add(tuple(registry.roles))

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for i in range(50):
        registry.reload(new if i % 2 else old)
    stop.set()
    for thread in threads:
        thread.join()

    assert seen <= {("admin", "guest"), ("admin", "editor", "guest")}
