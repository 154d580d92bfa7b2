from src.untis.logging import REDACTED, redact_secrets


def test_redacts_top_level_secrets():
    event = redact_secrets(None, "info", {"event": "x", "password": "hunter2", "user": "student"})
    assert event == {"event": "x", "password": REDACTED, "user": "student"}


def test_redacts_header_dicts():
    event = redact_secrets(
        None, "info", {"event": "x", "headers": {"Cookie": "JSESSIONID=abc", "Accept": "application/json"}}
    )
    assert event["headers"] == {"Cookie": REDACTED, "Accept": "application/json"}


def test_leaves_other_values():
    event = {"event": "untis_request", "status": 200, "ok": True}
    assert redact_secrets(None, "info", dict(event)) == event
