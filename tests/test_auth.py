"""
Unit tests for the ApiKey/role gate.
"""

import unittest
from datetime import datetime, timedelta, timezone

from weather_api.errors import MissingCredential, Unauthorized
from weather_api.models import AccountCreateRequest, Role
from weather_api.services import AccountService, AuthenticationGate, DocumentStore

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestAuthenticationGate(unittest.TestCase):

    def setUp(self):
        self.now = T0
        self.accounts = AccountService(DocumentStore(), clock=lambda: self.now)
        self.gate = AuthenticationGate(self.accounts)
        self.student = self.accounts.create_account(
            AccountCreateRequest(username="sam", password="pw", role=Role.STUDENT)
        )
        self.teacher = self.accounts.create_account(
            AccountCreateRequest(username="tess", password="pw", role=Role.TEACHER)
        )

    def test_missing_or_blank_header(self):
        for raw in (None, "", "   ", "{}"):
            with self.assertRaises(MissingCredential, msg=repr(raw)):
                self.gate.authenticate(raw, Role.STUDENT)

    def test_valid_key(self):
        account = self.gate.authenticate(self.student.credential, Role.STUDENT)
        self.assertEqual(account.username, "sam")

    def test_braces_and_whitespace_are_stripped(self):
        raw = f"  {{{self.teacher.credential}}} "
        self.assertEqual(self.gate.authenticate(raw, Role.TEACHER).username, "tess")

    def test_unbalanced_brace_is_not_stripped(self):
        with self.assertRaises(Unauthorized):
            self.gate.authenticate("{" + self.student.credential, Role.STUDENT)

    def test_unknown_key_and_low_role_look_the_same(self):
        with self.assertRaises(Unauthorized) as unknown:
            self.gate.authenticate("no-such-key", Role.STUDENT)
        with self.assertRaises(Unauthorized) as too_low:
            self.gate.authenticate(self.student.credential, Role.TEACHER)
        self.assertEqual(unknown.exception.message, too_low.exception.message)
        self.assertEqual(unknown.exception.status_code, 403)

    def test_teacher_cannot_pass_admin_endpoint(self):
        with self.assertRaises(Unauthorized):
            self.gate.authenticate(self.teacher.credential, Role.ADMIN)

    def test_corrupted_stored_role_fails_closed(self):
        self.accounts.accounts.update_many(None, {"role": "Wizard"})
        with self.assertRaises(Unauthorized):
            self.gate.authenticate(self.teacher.credential, Role.STUDENT)

    def test_record_activity_updates_last_seen(self):
        account = self.gate.authenticate(self.student.credential, Role.STUDENT)
        self.now = T0 + timedelta(minutes=5)
        self.gate.record_activity(account)
        self.assertEqual(self.accounts.get_account(account.id).last_seen, T0 + timedelta(minutes=5))
        self.assertEqual(self.accounts.get_account(self.teacher.id).last_seen, T0)


if __name__ == "__main__":
    unittest.main()
