# cardstudio/domain/notifications.py
import html
import re
from dataclasses import dataclass
from typing import Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DEFAULT_AVATAR = "/default-avatar.png"


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_RE.match(value) is not None


@dataclass(frozen=True)
class Celebration:
    is_birthday: bool = False
    is_work_anniversary: bool = False

    @property
    def any(self) -> bool:
        return self.is_birthday or self.is_work_anniversary

    @property
    def occasion(self) -> str:
        if self.is_birthday and self.is_work_anniversary:
            return "both"
        return "birthday" if self.is_birthday else "anniversary"


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str


_OCCASION_TITLES = {
    "both": "Birthday & Work Anniversary",
    "birthday": "Birthday",
    "anniversary": "Work Anniversary",
}


def subject_for(name: str, celebration: Celebration, is_admin: bool) -> str:
    title = _OCCASION_TITLES[celebration.occasion]
    if is_admin:
        return f"Today is {name}'s {title}!"
    return f"Happy {title} {name}!"


def _body(title: str, message: str, photo: Optional[str], is_admin: bool) -> str:
    message_html = "<br>".join(html.escape(line) for line in message.splitlines())
    photo_html = ""
    if photo and photo.startswith(("http://", "https://", "data:image/")):
        photo_html = (
            f'<img src="{html.escape(photo, quote=True)}" alt="Celebration" '
            'style="display:block;max-width:200px;height:auto;border-radius:8px;margin:0 auto 20px auto"/>'
        )
    footer = (
        "This is an automated notification from CardStudio"
        if is_admin else
        "This message was created especially for you by CardStudio"
    )
    return f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"></head>
  <body style="margin:0;padding:0;background:#f8f8f8;font-family:Arial,sans-serif">
    <table width="100%" cellpadding="0" cellspacing="0" border="0">
      <tr><td align="center" style="padding:40px 0">
        <table width="600" cellpadding="0" cellspacing="0" border="0" style="background:#ffffff;border-radius:8px">
          <tr><td align="center" style="padding:40px">
            <h1 style="color:#333;margin:0 0 30px 0;font-size:24px">{html.escape(title)}</h1>
            {photo_html}
            <div style="background:#f5f5f5;padding:30px;border-radius:8px;margin:20px 0">
              <p style="margin:0;color:#444;font-size:18px;line-height:1.6;text-align:center">{message_html}</p>
            </div>
            <p style="color:#666;margin:30px 0 10px 0;font-size:16px">{footer}</p>
          </td></tr>
        </table>
      </td></tr>
    </table>
  </body>
</html>"""


def build_person_email(to: str, name: str, message: str, photo: Optional[str], celebration: Celebration) -> EmailMessage:
    title = f"Happy {_OCCASION_TITLES[celebration.occasion]} {name}!"
    return EmailMessage(
        to=to,
        subject=subject_for(name, celebration, is_admin=False),
        html=_body(title, message, photo or DEFAULT_AVATAR, is_admin=False),
    )


def build_admin_email(to: str, name: str, message: str, photo: Optional[str], celebration: Celebration) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject=subject_for(name, celebration, is_admin=True),
        html=_body(f"Today we're celebrating {name}!", message, photo or DEFAULT_AVATAR, is_admin=True),
    )
