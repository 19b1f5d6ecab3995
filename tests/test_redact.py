from __future__ import annotations

from teslagps._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "response": {
            "id": 1,
            "vin": "5YJ3E1EA7KF000000",
            "drive_state": {"latitude": 52.1, "longitude": 4.2, "shift_state": "D"},
        },
        "access_token": "secret",
        "nested": [{"Authorization": "Bearer secret"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["access_token"] == "<redacted>"
    assert redacted["response"]["vin"] == "<redacted>"
    assert redacted["response"]["drive_state"]["latitude"] == "<redacted>"
    assert redacted["response"]["drive_state"]["shift_state"] == "D"
    assert redacted["nested"][0]["Authorization"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
