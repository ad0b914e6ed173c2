"""Tests for the bot credential store and credential precedence."""

import pytest

from api.exceptions import MissingCredentialError
from bot.models import BotRegistration
from bot.state.credential_store import (
    InMemoryCredentialStore,
    require_credential,
    resolve_credential,
)


def _registration(token="tok-1", api_key=None) -> BotRegistration:
    return BotRegistration(token=token, webhook_url=f"https://relay.example/webhook/{token}", api_key=api_key)


class TestInMemoryCredentialStore:
    def test_register_and_get(self):
        store = InMemoryCredentialStore()
        store.register(_registration(api_key="k"))

        got = store.get("tok-1")
        assert got is not None
        assert got.api_key == "k"
        assert got.setup_time is not None
        assert len(store) == 1

    def test_unknown_token(self):
        assert InMemoryCredentialStore().get("nope") is None

    def test_register_overwrites(self):
        store = InMemoryCredentialStore()
        store.register(_registration(api_key="old"))
        store.register(_registration(api_key="new"))
        assert store.get("tok-1").api_key == "new"
        assert len(store) == 1

    def test_remove(self):
        store = InMemoryCredentialStore()
        store.register(_registration())
        assert store.remove("tok-1") is True
        assert store.remove("tok-1") is False
        assert len(store) == 0


class TestResolveCredential:
    def test_registration_key_wins_over_default(self):
        assert resolve_credential(_registration(api_key="bot-key"), "env-key") == "bot-key"

    def test_default_when_registration_has_no_key(self):
        assert resolve_credential(_registration(api_key=None), "env-key") == "env-key"
        assert resolve_credential(_registration(api_key=""), "env-key") == "env-key"

    def test_default_when_unregistered(self):
        assert resolve_credential(None, "env-key") == "env-key"

    @pytest.mark.parametrize("default", [None, ""])
    def test_absent_everywhere(self, default):
        assert resolve_credential(None, default) is None
        assert resolve_credential(_registration(), default) is None

    def test_require_credential(self):
        assert require_credential(None, "env-key") == "env-key"
        with pytest.raises(MissingCredentialError):
            require_credential(_registration(), None)
