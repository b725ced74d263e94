import itertools

import pytest

from kingdom_access.core.exceptions import UnknownRoleError
from kingdom_access.models.role import (
    Role,
    ROLE_HIERARCHY,
    TOP_ROLE,
    at_least,
    level,
    parse_role,
)

ASCENDING = [Role.PARTICIPANT, Role.ORG_LEADER, Role.ORG_ADMIN, Role.ORG_OWNER, Role.SUPER_ADMIN]


def test_hierarchy_covers_every_role():
    assert set(ROLE_HIERARCHY) == set(Role)


def test_hierarchy_order():
    """PARTICIPANT < ORG_LEADER < ORG_ADMIN < ORG_OWNER < SUPER_ADMIN"""
    for lower, higher in zip(ASCENDING, ASCENDING[1:]):
        assert at_least(higher, lower)
        assert not at_least(lower, higher)


def test_top_role_is_super_admin():
    assert TOP_ROLE == Role.SUPER_ADMIN


@pytest.mark.parametrize("a,b", list(itertools.product(Role, repeat=2)))
def test_at_least_matches_levels(a, b):
    assert at_least(a, b) == (level(a) >= level(b))


def test_order_is_antisymmetric():
    for a, b in itertools.product(Role, repeat=2):
        if at_least(a, b) and at_least(b, a):
            assert a == b


def test_order_is_transitive():
    for a, b, c in itertools.product(Role, repeat=3):
        if at_least(a, b) and at_least(b, c):
            assert at_least(a, c)


def test_levels_are_distinct():
    assert len(set(ROLE_HIERARCHY.values())) == len(Role)


def test_string_tokens_accepted():
    assert parse_role("ORG_ADMIN") is Role.ORG_ADMIN
    assert at_least("ORG_OWNER", "ORG_ADMIN")


def test_unknown_role_comparison_fails():
    with pytest.raises(UnknownRoleError):
        at_least("PASTOR", Role.PARTICIPANT)
    with pytest.raises(UnknownRoleError):
        at_least(Role.SUPER_ADMIN, "admin")
    with pytest.raises(UnknownRoleError):
        level("")


def test_hierarchy_is_read_only():
    with pytest.raises(TypeError):
        ROLE_HIERARCHY[Role.PARTICIPANT] = 1000
