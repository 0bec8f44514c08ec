"""Tests for the vault stores (memory and SQLite)."""

import threading

import pytest

from privacy_vault import (
    DuplicateTokenError, MemoryVaultStore, SqliteVaultStore, StoreError, TokenNotFoundError,
)


# ── Contract (both backends) ─────────────────────────────────────────

def test_put_get(any_store):
    entry = any_store.put("{{EMAIL_ab12cd34}}", "juan@example.com", "EMAIL")
    got = any_store.get("{{EMAIL_ab12cd34}}")
    assert got.original_value == "juan@example.com"
    assert got.category == "EMAIL"
    assert got.token == "{{EMAIL_ab12cd34}}"
    assert got.created_at == entry.created_at
    assert got.created_at.tzinfo is not None


def test_duplicate_token_rejected(any_store):
    any_store.put("{{NAME_ab12cd34}}", "Juan", "NAME")
    with pytest.raises(DuplicateTokenError) as exc:
        any_store.put("{{NAME_ab12cd34}}", "Ana", "NAME")
    assert exc.value.token == "{{NAME_ab12cd34}}"
    # The first write is untouched
    assert any_store.get("{{NAME_ab12cd34}}").original_value == "Juan"


def test_get_missing(any_store):
    with pytest.raises(TokenNotFoundError):
        any_store.get("{{NAME_zzzzzzzz}}")


def test_size_and_dump(any_store):
    assert any_store.size == 0
    any_store.put("{{NAME_aaaaaaaa}}", "Juan", "NAME")
    any_store.put("{{PHONE_bbbbbbbb}}", "300 123 4567", "PHONE")
    assert any_store.size == 2
    assert any_store.dump() == {
        "{{NAME_aaaaaaaa}}": "Juan",
        "{{PHONE_bbbbbbbb}}": "300 123 4567",
    }


def test_concurrent_puts_same_token(any_store):
    errors: list[Exception] = []
    ok: list[str] = []

    def worker(i: int) -> None:
        try:
            any_store.put("{{NAME_samesame}}", f"value-{i}", "NAME")
            ok.append(f"value-{i}")
        except DuplicateTokenError as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(ok) == 1
    assert len(errors) == 15
    assert any_store.get("{{NAME_samesame}}").original_value == ok[0]


def test_concurrent_puts_distinct_tokens(any_store):
    def worker(i: int) -> None:
        any_store.put(f"{{{{NAME_token{i:04d}}}}}", f"value-{i}", "NAME")

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(32)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert any_store.size == 32


# ── Lifecycle ────────────────────────────────────────────────────────

@pytest.mark.parametrize("factory", [
    lambda tmp: MemoryVaultStore(),
    lambda tmp: SqliteVaultStore(db_path=tmp / "v.db"),
])
def test_use_before_connect(factory, tmp_path):
    s = factory(tmp_path)
    with pytest.raises(StoreError):
        s.put("{{NAME_aaaaaaaa}}", "Juan", "NAME")
    with pytest.raises(StoreError):
        s.get("{{NAME_aaaaaaaa}}")


def test_context_manager(tmp_path):
    with SqliteVaultStore(db_path=tmp_path / "v.db") as s:
        s.put("{{NAME_aaaaaaaa}}", "Juan", "NAME")
    with pytest.raises(StoreError):
        s.get("{{NAME_aaaaaaaa}}")


def test_sqlite_persists_across_reconnect(tmp_path):
    path = tmp_path / "nested" / "vault.db"
    with SqliteVaultStore(db_path=path) as s:
        s.put("{{EMAIL_ab12cd34}}", "juan@example.com", "EMAIL")

    with SqliteVaultStore(db_path=path) as s:
        assert s.get("{{EMAIL_ab12cd34}}").original_value == "juan@example.com"
        with pytest.raises(DuplicateTokenError):
            s.put("{{EMAIL_ab12cd34}}", "other@example.com", "EMAIL")


def test_sqlite_rejects_unknown_category(tmp_path):
    with SqliteVaultStore(db_path=tmp_path / "v.db") as s:
        with pytest.raises(StoreError) as exc:
            s.put("{{NAME_aaaaaaaa}}", "x", "SSN")
        assert not isinstance(exc.value, DuplicateTokenError)


def test_sqlite_sees_writes_from_other_connection(tmp_path):
    path = tmp_path / "v.db"
    with SqliteVaultStore(db_path=path) as reader, SqliteVaultStore(db_path=path) as writer:
        with pytest.raises(TokenNotFoundError):
            reader.get("{{NAME_aaaaaaaa}}")
        writer.put("{{NAME_aaaaaaaa}}", "Juan", "NAME")
        assert reader.get("{{NAME_aaaaaaaa}}").original_value == "Juan"


def test_sqlite_open_failure_leaves_store_disconnected(tmp_path):
    path = tmp_path / "not-a-db.db"
    path.write_bytes(b"this is not a sqlite database\n" * 200)
    s = SqliteVaultStore(db_path=path)
    with pytest.raises(StoreError):
        s.connect()
    # a failed open must not look connected
    with pytest.raises(StoreError):
        s.connect()
    with pytest.raises(StoreError):
        s.get("{{NAME_aaaaaaaa}}")
