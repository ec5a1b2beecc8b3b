from __future__ import annotations

from bluetracker._redact import redact_for_log, redact_url


def test_redact_url_masks_webhook_secret() -> None:
    url = "https://discord.com/api/webhooks/123456/s3cr3t-token"
    redacted = redact_url(url)

    assert redacted == "https://discord.com/api/…"
    assert "s3cr3t" not in redacted
    assert "123456" not in redacted


def test_redact_url_keeps_short_paths() -> None:
    assert redact_url("https://hooks.example") == "https://hooks.example/"
    assert redact_url("https://hooks.example/one") == "https://hooks.example/one"


def test_redact_url_without_scheme_is_fully_hidden() -> None:
    assert redact_url("discord.com/api/webhooks/1/token") == "<redacted>"
    assert redact_url("") == "<redacted>"


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "content": None,
        "token": {"secret": "SIG"},
        "password": "pw",
        "webhooks": ["https://discord.com/api/webhooks/1/abc", 42],
        "nested": {"webhook": "https://discord.com/api/webhooks/2/def"},
    }

    redacted = redact_for_log(payload)
    assert redacted["content"] is None
    assert redacted["password"] == "<redacted>"
    assert redacted["token"] == "<redacted>"
    assert redacted["webhooks"] == ["https://discord.com/api/…", "<redacted>"]
    assert redacted["nested"]["webhook"] == "https://discord.com/api/…"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_handles_bytes_and_unknown_objects() -> None:
    redacted = redact_for_log({"blob": b"abcd", "items": [1, 2.5, True], "obj": object()})
    assert redacted["blob"] == "<bytes:4b>"
    assert redacted["items"] == [1, 2.5, True]
    assert redacted["obj"].startswith("<object object")
