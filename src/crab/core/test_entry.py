import unittest
from unittest import mock

from crab.core.entry import CredentialEntry
from crab.errors import DeserializationError


class TestCredentialEntry(unittest.TestCase):
    def test_create_sets_initial_timestamps(self):
        with mock.patch('crab.core.entry.now_timestamp', return_value=1704067200):
            entry = CredentialEntry.create("service", "account", "secret")
        self.assertEqual(entry.service, "service")
        self.assertEqual(entry.account, "account")
        self.assertEqual(entry.secret, "secret")
        self.assertEqual(entry.created_at, 1704067200)
        self.assertEqual(entry.updated_at, entry.created_at)

    def test_update_methods_change_values_and_refresh_timestamp(self):
        with mock.patch('crab.core.entry.now_timestamp', return_value=100):
            entry = CredentialEntry.create("service", "account", "secret")
        with mock.patch('crab.core.entry.now_timestamp', return_value=200):
            entry.update_service("service2")
            entry.update_account("account2")
            entry.update_secret("secret2")
        self.assertEqual(entry.service, "service2")
        self.assertEqual(entry.account, "account2")
        self.assertEqual(entry.secret, "secret2")
        self.assertEqual(entry.created_at, 100)
        self.assertEqual(entry.updated_at, 200)

    def test_update_with_same_value_still_refreshes(self):
        with mock.patch('crab.core.entry.now_timestamp', return_value=100):
            entry = CredentialEntry.create("github", "alice", "s3cr3t")
        with mock.patch('crab.core.entry.now_timestamp', return_value=150):
            entry.update_account("alice")
        self.assertEqual(entry.updated_at, 150)

    def test_clock_going_backwards_keeps_timestamps_ordered(self):
        with mock.patch('crab.core.entry.now_timestamp', return_value=500):
            entry = CredentialEntry.create("github", "alice", "s3cr3t")
        with mock.patch('crab.core.entry.now_timestamp', return_value=400):
            entry.update_secret("new")
        self.assertGreaterEqual(entry.updated_at, entry.created_at)
        self.assertEqual(entry.updated_at, 500)


class TestCredentialEntryMapping(unittest.TestCase):
    def setUp(self):
        self.data = {
            "service": "github",
            "account": "alice",
            "secret": "s3cr3t",
            "created_at": 10,
            "updated_at": 20,
        }

    def test_from_dict_reads_all_fields(self):
        entry = CredentialEntry.from_dict(self.data)
        self.assertEqual(entry.to_dict(), self.data)

    def test_missing_field_is_rejected(self):
        del self.data["secret"]
        with self.assertRaises(DeserializationError):
            CredentialEntry.from_dict(self.data)

    def test_mistyped_field_is_rejected(self):
        self.data["created_at"] = "10"
        with self.assertRaises(DeserializationError):
            CredentialEntry.from_dict(self.data)

    def test_boolean_timestamp_is_rejected(self):
        self.data["updated_at"] = True
        with self.assertRaises(DeserializationError):
            CredentialEntry.from_dict(self.data)

    def test_updated_before_created_is_rejected(self):
        self.data["updated_at"] = 5
        with self.assertRaises(DeserializationError):
            CredentialEntry.from_dict(self.data)

    def test_non_object_is_rejected(self):
        with self.assertRaises(DeserializationError):
            CredentialEntry.from_dict(["github", "alice"])


if __name__ == '__main__':
    unittest.main()
