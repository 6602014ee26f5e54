import pytest

from shortlink.availability import AvailabilityChecker, OnCheckError
from shortlink.errors import DatastoreError
from shortlink.repository import LinkRecord


def test_existing_code_is_taken(store):
    store.records.append(LinkRecord("abc123", "https://example.com"))
    assert AvailabilityChecker(store).is_taken("abc123") is True
    assert store.calls == [("find_by_code", "abc123")]


def test_missing_code_is_free(store):
    assert AvailabilityChecker(store).is_taken("abc123") is False


def test_default_policy_treats_error_as_available(store):
    store.lookup_error = DatastoreError("connection reset")
    checker = AvailabilityChecker(store)
    assert checker.on_error is OnCheckError.TREAT_AS_AVAILABLE
    assert checker.is_taken("abc123") is False


def test_taken_policy_treats_error_as_taken(store):
    store.lookup_error = DatastoreError("connection reset")
    assert AvailabilityChecker(store, OnCheckError.TREAT_AS_TAKEN).is_taken("abc123") is True


def test_raise_policy_propagates_error(store):
    store.lookup_error = DatastoreError("connection reset")
    with pytest.raises(DatastoreError):
        AvailabilityChecker(store, OnCheckError.RAISE).is_taken("abc123")


def test_policy_accepts_config_string(store):
    assert AvailabilityChecker(store, "taken").on_error is OnCheckError.TREAT_AS_TAKEN


def test_unknown_policy_string_is_rejected(store):
    with pytest.raises(ValueError):
        AvailabilityChecker(store, "maybe")
