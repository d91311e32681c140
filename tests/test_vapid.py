"""VAPID signing context: lazy validation, idempotence."""
import pytest

from ncx.core.config import Settings
from ncx.core.errors import ConfigurationError
from ncx.core.vapid import VapidContext


def test_ensure_ready_missing_private_key():
    ctx = VapidContext("public", "", "mailto:a@example.com")
    with pytest.raises(ConfigurationError):
        ctx.ensure_ready()
    assert ctx.ready is False


def test_ensure_ready_missing_public_key():
    ctx = VapidContext("  ", "private", "mailto:a@example.com")
    with pytest.raises(ConfigurationError):
        ctx.ensure_ready()


def test_ensure_ready_is_idempotent():
    ctx = VapidContext("public", "private", "mailto:a@example.com")
    first = ctx.ensure_ready()
    assert ctx.ready is True
    assert ctx.ensure_ready() is first
    assert first.public_key == "public"
    assert first.private_key == "private"


def test_claims_are_fresh_per_call():
    ctx = VapidContext("public", "private", "mailto:a@example.com")
    a = ctx.claims()
    a["aud"] = "https://fcm.googleapis.com"
    assert ctx.claims() == {"sub": "mailto:a@example.com"}


def test_from_settings_default_subject():
    s = Settings(vapid_public_key=" pub ", vapid_private_key="priv", vapid_subject="")
    identity = VapidContext.from_settings(s).ensure_ready()
    assert identity.public_key == "pub"
    assert identity.subject == "mailto:noreply@nickelcityxwing.com"
