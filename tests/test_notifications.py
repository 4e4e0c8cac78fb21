import asyncio
from types import SimpleNamespace

import pytest

from cardstudio.domain.errors import ConfigurationError, ProviderError
from cardstudio.domain.notifications import (
    Celebration, DEFAULT_AVATAR, build_admin_email, build_person_email, is_valid_email, subject_for,
)
from cardstudio.infrastructure.email.sendgrid_sender import SendGridEmailSender


class RecordingClient:
    def __init__(self, status_code=202):
        self.status_code = status_code
        self.mails = []

    def send(self, mail):
        self.mails.append(mail)
        return SimpleNamespace(status_code=self.status_code)


BIRTHDAY = Celebration(is_birthday=True)
BOTH = Celebration(is_birthday=True, is_work_anniversary=True)


@pytest.mark.parametrize("value,ok", [
    ("ana@example.com", True),
    ("ana@example", False),
    ("ana example.com", False),
    ("", False),
    (None, False),
])
def test_email_validation(value, ok):
    assert is_valid_email(value) is ok


def test_subjects():
    assert subject_for("Ana", BIRTHDAY, is_admin=False) == "Happy Birthday Ana!"
    assert subject_for("Ana", BOTH, is_admin=False) == "Happy Birthday & Work Anniversary Ana!"
    assert subject_for("Ana", Celebration(is_work_anniversary=True), is_admin=True) == "Today is Ana's Work Anniversary!"


def test_body_escapes_values_and_breaks_lines():
    msg = build_person_email("a@example.com", "<Ana>", "Line <1>\nLine 2", None, BIRTHDAY)

    assert "&lt;Ana&gt;" in msg.html
    assert "Line &lt;1&gt;<br>Line 2" in msg.html
    assert "<Ana>" not in msg.html


def test_admin_email_uses_photo_when_given():
    msg = build_admin_email("admin@example.com", "Ana", "Hi", "https://cdn.example.com/ana.png", BIRTHDAY)
    assert 'src="https://cdn.example.com/ana.png"' in msg.html
    assert msg.to == "admin@example.com"


def test_default_avatar_is_not_embedded_as_remote_image():
    msg = build_person_email("a@example.com", "Ana", "Hi", None, BIRTHDAY)
    assert DEFAULT_AVATAR not in msg.html


def test_sender_delivers_through_client():
    client = RecordingClient()
    sender = SendGridEmailSender(api_key="key", sender="cards@example.com", client=client)

    status = asyncio.run(sender.send(build_person_email("a@example.com", "Ana", "Hi", None, BIRTHDAY)))

    assert status == 202
    assert len(client.mails) == 1


def test_sender_rejects_non_2xx():
    sender = SendGridEmailSender(api_key="key", sender="cards@example.com", client=RecordingClient(400))
    with pytest.raises(ProviderError):
        asyncio.run(sender.send(build_person_email("a@example.com", "Ana", "Hi", None, BIRTHDAY)))


def test_sender_without_credentials_raises_configuration_error():
    sender = SendGridEmailSender(api_key=None, sender=None)
    assert sender.configured is False
    with pytest.raises(ConfigurationError):
        asyncio.run(sender.send(build_person_email("a@example.com", "Ana", "Hi", None, BIRTHDAY)))
