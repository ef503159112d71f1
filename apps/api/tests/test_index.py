"""
Tests for rule compilation and lookup.
"""

import pytest

from rolegate.core.auth import Rule, RuleIndex, RuleValidationError


def test_empty_index_matches_nothing():
    index = RuleIndex.compile([])

    assert len(index) == 0
    assert index.matching_rules("read", "User") == ()


def test_matching_preserves_declaration_order_across_wildcards():
    rules = [
        Rule("manage", "all"),
        Rule("read", "User"),
        Rule("read", "Post"),
        Rule("manage", "User", inverted=True),
        Rule("read", "all", fields=["id"]),
    ]
    index = RuleIndex.compile(rules)

    assert index.matching_rules("read", "User") == (rules[0], rules[1], rules[3], rules[4])
    assert index.matching_rules("read", "Post") == (rules[0], rules[2], rules[4])
    assert index.matching_rules("delete", "User") == (rules[0], rules[3])
    assert index.matching_rules("delete", "Invoice") == (rules[0],)


def test_conditions_do_not_affect_type_level_matching():
    rule = Rule("read", "Post", conditions={"status": "draft"})
    index = RuleIndex.compile([rule])

    assert index.matching_rules("read", "Post") == (rule,)


def test_compile_accepts_records():
    index = RuleIndex.compile([
        {"action": "read", "subject": "User", "fields": ["email"]},
        {"action": ["update", "delete"], "subject": "Post"},
    ])

    assert [(r.action, r.subject) for r in index] == [
        ("read", "User"),
        ("update", "Post"),
        ("delete", "Post"),
    ]
    assert index.actions == {"read", "update", "delete"}
    assert index.subjects == {"User", "Post"}


def test_compile_rejects_malformed_input():
    with pytest.raises(RuleValidationError):
        RuleIndex.compile([{"action": "", "subject": "User"}])

    with pytest.raises(RuleValidationError):
        RuleIndex.compile(["read:User"])


def test_index_owns_a_copy_of_the_rules():
    rules = [Rule("read", "User")]
    index = RuleIndex.compile(rules)

    rules.append(Rule("read", "User", inverted=True))

    assert len(index) == 1
    assert index.matching_rules("read", "User") == (Rule("read", "User"),)


def test_repeated_lookups_return_identical_results():
    index = RuleIndex.compile([Rule("read", "User"), Rule("manage", "all", inverted=True)])

    first = index.matching_rules("read", "User")
    assert index.matching_rules("read", "User") == first
    assert index.matching_rules("read", "User") == first
