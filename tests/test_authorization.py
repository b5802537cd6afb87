"""Unit tests for app.services.authorization: the pure allow/deny rules."""

import itertools
import unittest

from app.models.user import Role
from app.schemas.auth import Principal
from app.services.authorization import (
    REASON_ADMIN,
    REASON_FORBIDDEN,
    REASON_OWNER,
    REASON_READ,
    Action,
    ForbiddenError,
    can_mutate,
    ensure_allowed,
)

ALICE = Principal(id=1, username="alice", role=Role.USER)
BOB_ID = 2
ADMIN = Principal(id=99, username="admin", role=Role.ADMIN)


class TestOwnershipRule(unittest.TestCase):
    """WRITE/DELETE allowed iff the principal is admin or owns the resource."""

    def test_owner_may_write_and_delete(self) -> None:
        for action in (Action.WRITE, Action.DELETE):
            decision = can_mutate(ALICE, ALICE.id, action)
            self.assertTrue(decision.allowed)
            self.assertEqual(decision.reason, REASON_OWNER)

    def test_non_owner_is_forbidden(self) -> None:
        for action in (Action.WRITE, Action.DELETE):
            decision = can_mutate(ALICE, BOB_ID, action)
            self.assertFalse(decision.allowed)
            self.assertEqual(decision.reason, REASON_FORBIDDEN)

    def test_admin_may_act_on_anything(self) -> None:
        for action in Action:
            decision = can_mutate(ADMIN, BOB_ID, action, private=True)
            self.assertTrue(decision.allowed)
            self.assertEqual(decision.reason, REASON_ADMIN)

    def test_rule_holds_for_all_combinations(self) -> None:
        ids = [1, 2, 3]
        for pid, owner, role in itertools.product(ids, ids, list(Role)):
            principal = Principal(id=pid, username=f"u{pid}", role=role)
            expected = role is Role.ADMIN or pid == owner
            with self.subTest(pid=pid, owner=owner, role=role):
                self.assertEqual(can_mutate(principal, owner, Action.WRITE).allowed, expected)
                self.assertEqual(can_mutate(principal, owner, Action.DELETE).allowed, expected)


class TestReadRule(unittest.TestCase):
    """Reads of public resources are open to any principal; private ones need ownership."""

    def test_anyone_may_read_public(self) -> None:
        decision = can_mutate(ALICE, BOB_ID, Action.READ)
        self.assertTrue(decision.allowed)
        self.assertEqual(decision.reason, REASON_READ)

    def test_private_read_requires_owner(self) -> None:
        self.assertFalse(can_mutate(ALICE, BOB_ID, Action.READ, private=True).allowed)
        self.assertTrue(can_mutate(ALICE, ALICE.id, Action.READ, private=True).allowed)


class TestDeterminism(unittest.TestCase):
    def test_same_inputs_same_decision(self) -> None:
        first = can_mutate(ALICE, BOB_ID, Action.WRITE)
        for _ in range(10):
            self.assertEqual(can_mutate(ALICE, BOB_ID, Action.WRITE), first)


class TestEnsureAllowed(unittest.TestCase):
    def test_raises_forbidden_on_deny(self) -> None:
        with self.assertRaises(ForbiddenError) as ctx:
            ensure_allowed(ALICE, BOB_ID, Action.DELETE)
        self.assertEqual(ctx.exception.action, Action.DELETE)

    def test_returns_decision_on_allow(self) -> None:
        self.assertTrue(ensure_allowed(ADMIN, BOB_ID, Action.WRITE).allowed)


if __name__ == "__main__":
    unittest.main()
