"""Tests for the deanonymizer."""

import pytest

from privacy_vault import Deanonymizer, MemoryVaultStore, StoreError, ValidationError


class UnavailableStore(MemoryVaultStore):
    def get(self, token):
        raise StoreError("database unavailable")


class ExplodingStore(MemoryVaultStore):
    def get(self, token):
        raise RuntimeError("driver bug")


# ── Restoration ──────────────────────────────────────────────────────

def test_restore_wrapped(store, deanonymizer):
    store.put("{{NAME_abcdefgh}}", "Juan Pérez", "NAME")
    result = deanonymizer.restore("Hola {{NAME_abcdefgh}}!")
    assert result.text == "Hola Juan Pérez!"
    assert result.restored == {"{{NAME_abcdefgh}}": "Juan Pérez"}
    assert result.unresolved == []


def test_all_occurrences_replaced(store, deanonymizer):
    store.put("{{EMAIL_ab12cd34}}", "juan@example.com", "EMAIL")
    text = "{{EMAIL_ab12cd34}} / {{EMAIL_ab12cd34}}"
    assert deanonymizer.deanonymize(text) == "juan@example.com / juan@example.com"


def test_legacy_unwrapped_form(store, deanonymizer):
    store.put("{{NAME_abcdefgh}}", "Juan", "NAME")
    assert deanonymizer.deanonymize("Hi NAME_abcdefgh!") == "Hi Juan!"


def test_mixed_wrapped_and_bare(store, deanonymizer):
    store.put("{{NAME_abcdefgh}}", "Juan", "NAME")
    assert deanonymizer.deanonymize("NAME_abcdefgh / {{NAME_abcdefgh}}") == "Juan / Juan"


def test_legacy_unwrapped_storage(store, deanonymizer):
    store.put("PHONE_abcdefgh", "300 123 4567", "PHONE")
    assert deanonymizer.deanonymize("call PHONE_abcdefgh") == "call 300 123 4567"


def test_longer_suffix_accepted(store, deanonymizer):
    store.put("{{PHONE_abcdefgh1234}}", "300 123 4567", "PHONE")
    assert deanonymizer.deanonymize("{{PHONE_abcdefgh1234}}") == "300 123 4567"


def test_restored_values_not_rescanned(store, deanonymizer):
    store.put("{{NAME_aaaaaaaa}}", "see {{NAME_bbbbbbbb}}", "NAME")
    store.put("{{NAME_bbbbbbbb}}", "Juan", "NAME")
    assert deanonymizer.deanonymize("{{NAME_aaaaaaaa}}") == "see {{NAME_bbbbbbbb}}"


# ── Leniency ─────────────────────────────────────────────────────────

def test_unknown_token_unchanged(deanonymizer):
    result = deanonymizer.restore("{{NAME_zzzzzzzz}}")
    assert result.text == "{{NAME_zzzzzzzz}}"
    assert result.unresolved == ["{{NAME_zzzzzzzz}}"]


def test_partial_resolution(store, deanonymizer):
    store.put("{{NAME_abcdefgh}}", "Juan", "NAME")
    result = deanonymizer.restore("{{NAME_abcdefgh}} and {{NAME_zzzzzzzz}}")
    assert result.text == "Juan and {{NAME_zzzzzzzz}}"
    assert result.unresolved == ["{{NAME_zzzzzzzz}}"]


@pytest.mark.parametrize("store_cls", [UnavailableStore, ExplodingStore])
def test_lookup_failure_is_not_fatal(store_cls):
    store = store_cls()
    store.connect()
    result = Deanonymizer(store).restore("Hi {{NAME_abcdefgh}}")
    assert result.text == "Hi {{NAME_abcdefgh}}"
    assert result.unresolved == ["{{NAME_abcdefgh}}"]


def test_closed_store_is_not_fatal():
    store = MemoryVaultStore()
    assert Deanonymizer(store).deanonymize("Hi {{NAME_abcdefgh}}") == "Hi {{NAME_abcdefgh}}"


# ── Plain text ───────────────────────────────────────────────────────

@pytest.mark.parametrize("text", [
    "nothing to see here",
    "Juan wrote juan@example.com",
    "{{NAME_short}} and NAME_ABCDEFGH",
])
def test_idempotent_without_tokens(deanonymizer, text):
    once = deanonymizer.deanonymize(text)
    assert once == text
    assert deanonymizer.deanonymize(once) == once


def test_validation(deanonymizer):
    with pytest.raises(ValidationError):
        deanonymizer.deanonymize("")
    with pytest.raises(ValidationError):
        deanonymizer.restore(None)
