"""Tests for InMemoryContactRepository: constraint, search, ordering and paging."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from contactbook.application import ConstraintViolation
from contactbook.domain import ContactChanges, ContactFields, SortField
from contactbook.infrastructure import InMemoryContactRepository


def _fields(name: str, email: str | None = None, phone: str = "555") -> ContactFields:
    return ContactFields(name=name, email=email or f"{name.lower()}@example.com", phone=phone)


def test_insert_lowercases_email_and_enforces_uniqueness():
    repo = InMemoryContactRepository()
    contact = repo.insert(_fields("Alice", "Alice@Example.com"))
    assert contact.email == "alice@example.com"

    with pytest.raises(ConstraintViolation):
        repo.insert(_fields("Other", "ALICE@example.com"))
    assert repo.count(None) == 1


def test_find_one_by_email_excludes_id():
    repo = InMemoryContactRepository()
    contact = repo.insert(_fields("Bob"))
    assert repo.find_one(email="BOB@example.com") == contact
    assert repo.find_one(email="bob@example.com", exclude_id=contact.id) is None
    assert repo.find_one(email="nobody@example.com") is None


def test_update_collision_raises_and_keeps_record():
    repo = InMemoryContactRepository()
    repo.insert(_fields("Carol"))
    dave = repo.insert(_fields("Dave"))

    with pytest.raises(ConstraintViolation):
        repo.update_by_id(dave.id, ContactChanges(email="carol@example.com"))
    assert repo.get_by_id(dave.id) == dave


def test_update_and_delete_missing_return_none():
    repo = InMemoryContactRepository()
    assert repo.update_by_id("missing", ContactChanges(name="X")) is None
    assert repo.delete_by_id("missing") is None


def test_find_many_sorts_and_pages():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ticks = iter(start + timedelta(minutes=i) for i in range(100))
    repo = InMemoryContactRepository(clock=lambda: next(ticks))
    for name in ["Charlie", "Alice", "Bob", "Eve", "Dan"]:
        repo.insert(_fields(name))

    by_name = repo.find_many(None, SortField.NAME, False, 0, 10)
    assert [c.name for c in by_name] == ["Alice", "Bob", "Charlie", "Dan", "Eve"]

    newest = repo.find_many(None, SortField.CREATED_AT, True, 0, 2)
    assert [c.name for c in newest] == ["Dan", "Eve"]

    second_page = repo.find_many(None, SortField.CREATED_AT, True, 2, 2)
    assert [c.name for c in second_page] == ["Bob", "Alice"]

    assert repo.find_many(None, SortField.NAME, False, 10, 5) == []


def test_search_is_word_based_and_case_insensitive():
    repo = InMemoryContactRepository()
    repo.insert(_fields("Ada Lovelace", "ada@analytical.org", "+44 20 7946 0000"))
    repo.insert(_fields("Grace Hopper", "grace@navy.mil", "555-0100"))

    assert repo.count("LOVELACE") == 1
    assert repo.count("navy") == 1
    assert repo.count("0100") == 1
    assert repo.count("love") == 0
    assert repo.count("ada grace") == 2
    assert repo.count(None) == 2


def test_concurrent_creates_with_same_email_yield_one_success():
    repo = InMemoryContactRepository()
    barrier = threading.Barrier(8)
    outcomes: list[str] = []
    lock = threading.Lock()

    def create(i: int) -> None:
        barrier.wait()
        try:
            repo.insert(_fields(f"Racer {i}", "race@example.com"))
            outcome = "ok"
        except ConstraintViolation:
            outcome = "dup"
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=create, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("dup") == 7
    assert repo.count(None) == 1


def test_listing_while_deleting_does_not_fail():
    repo = InMemoryContactRepository()
    ids = [repo.insert(_fields(f"Person{i}")).id for i in range(300)]
    errors: list[Exception] = []
    done = threading.Event()

    def read() -> None:
        try:
            while not done.is_set():
                repo.find_many("person1", SortField.NAME, False, 0, 50)
                repo.count(None)
        except Exception as exc:
            errors.append(exc)

    readers = [threading.Thread(target=read) for _ in range(4)]
    for t in readers:
        t.start()
    for contact_id in ids:
        repo.delete_by_id(contact_id)
    done.set()
    for t in readers:
        t.join()

    assert errors == []
    assert repo.count(None) == 0
