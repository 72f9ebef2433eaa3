"""
Dionysus Backend — Auth Notification Rendering Tests
======================================================

What we test:
    ✅ Every user-supplied field is HTML-escaped in the rich body
    ✅ The plain-text body reproduces every field verbatim
    ✅ Missing IP / user agent render as "Unavailable" in both bodies
    ✅ Event labels, fixed subject, and timestamp format
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from dionysus.schemas.auth import AuthEvent, AuthEventType
from dionysus.services.auth_notification import (
    PLACEHOLDER,
    SUBJECT,
    escape_html,
    format_timestamp,
    render_auth_notification,
)

HOSTILE = "<script>alert(\"pwn\")</script> & 'quoted'"


class TestEscaping:

    def test_escape_html_covers_five_characters(self):
        assert escape_html("&") == "&amp;"
        assert escape_html("<") == "&lt;"
        assert escape_html(">") == "&gt;"
        assert escape_html('"') == "&quot;"
        assert escape_html("'") == "&#x27;"

    def test_ampersand_escaped_once(self):
        """Escaping must not double-encode the entities it produces."""
        assert escape_html("a<b") == "a&lt;b"
        assert "&amp;lt;" not in escape_html("a<b")

    @pytest.mark.parametrize(
        "field", ["name", "email", "user_id", "ip_address", "user_agent"]
    )
    def test_hostile_field_is_escaped_in_html(self, sample_event, field):
        event = sample_event.model_copy(update={field: HOSTILE})

        rendered = render_auth_notification(event)

        assert escape_html(HOSTILE) in rendered.html
        assert HOSTILE not in rendered.html
        assert "<script>" not in rendered.html

    @pytest.mark.parametrize(
        "field", ["name", "email", "user_id", "ip_address", "user_agent"]
    )
    def test_hostile_field_is_verbatim_in_text(self, sample_event, field):
        event = sample_event.model_copy(update={field: HOSTILE})

        rendered = render_auth_notification(event)

        assert HOSTILE in rendered.text
        assert escape_html(HOSTILE) not in rendered.text

    def test_every_field_escaped_independently(self, sample_event):
        event = sample_event.model_copy(
            update={"name": "A<b>", "email": "x\"@y.com", "user_id": "u'1"}
        )

        rendered = render_auth_notification(event)

        assert "A&lt;b&gt;" in rendered.html
        assert "x&quot;@y.com" in rendered.html
        assert "u&#x27;1" in rendered.html


class TestPlainTextFidelity:

    def test_all_fields_present(self, sample_event):
        text = render_auth_notification(sample_event).text

        assert "Event: User Login" in text
        assert "Name: Ada Lovelace" in text
        assert "Email: ada@example.com" in text
        assert "User ID: user_2abc" in text
        assert "Occurred At (UTC): 2024-01-15T12:00:00.000Z" in text
        assert "IP Address: 203.0.113.5" in text
        assert "User Agent: Mozilla/5.0 (X11; Linux x86_64)" in text


class TestPlaceholders:

    def test_missing_optional_fields_use_placeholder(self, sample_event):
        event = sample_event.model_copy(update={"ip_address": None, "user_agent": None})

        rendered = render_auth_notification(event)

        assert f"IP Address: {PLACEHOLDER}" in rendered.text
        assert f"User Agent: {PLACEHOLDER}" in rendered.text
        assert rendered.html.count(f">{PLACEHOLDER}</td>") == 2

    def test_empty_string_is_treated_as_missing(self, sample_event):
        event = sample_event.model_copy(update={"ip_address": "", "user_agent": ""})

        rendered = render_auth_notification(event)

        assert f"IP Address: {PLACEHOLDER}" in rendered.text
        assert f"User Agent: {PLACEHOLDER}" in rendered.text

    def test_row_set_is_static(self, sample_event):
        """Same number of rows/lines whether optional data is present or not."""
        bare = sample_event.model_copy(update={"ip_address": None, "user_agent": None})

        full = render_auth_notification(sample_event)
        partial = render_auth_notification(bare)

        assert full.html.count("<tr>") == partial.html.count("<tr>") == 7
        assert len(full.text.splitlines()) == len(partial.text.splitlines())


class TestLabelsAndSubject:

    def test_login_label(self, sample_event):
        rendered = render_auth_notification(sample_event)
        assert "Event: User Login" in rendered.text
        assert "User Login" in rendered.html

    def test_signup_label(self, sample_event):
        event = sample_event.model_copy(update={"event_type": AuthEventType.SIGNUP})
        rendered = render_auth_notification(event)
        assert "Event: New Signup" in rendered.text
        assert "New Signup" in rendered.html

    def test_subject_is_fixed(self, sample_event):
        signup = sample_event.model_copy(
            update={"event_type": AuthEventType.SIGNUP, "name": "Someone Else"}
        )
        assert render_auth_notification(sample_event).subject == SUBJECT
        assert render_auth_notification(signup).subject == SUBJECT


class TestTimestamp:

    def test_naive_timestamp_is_taken_as_utc(self):
        assert format_timestamp(datetime(2024, 1, 15, 12, 0, 0)) == "2024-01-15T12:00:00.000Z"

    def test_aware_timestamp_is_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2024, 1, 15, 14, 30, 0, 123456, tzinfo=plus_two)
        assert format_timestamp(value) == "2024-01-15T12:30:00.123Z"


def test_auth_event_is_immutable(sample_event):
    with pytest.raises(ValidationError):
        sample_event.name = "changed"


def test_auth_event_accepts_unvalidated_strings():
    """Format checks are the caller's job; odd values still render."""
    event = AuthEvent(
        event_type="signup",
        name="",
        email="not-an-email",
        user_id="?",
        occurred_at=datetime.now(timezone.utc),
    )
    assert event.ip_address is None
    assert "Email: not-an-email" in render_auth_notification(event).text
