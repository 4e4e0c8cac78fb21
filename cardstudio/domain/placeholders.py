# cardstudio/domain/placeholders.py
import re

from cardstudio.delivery.schemas.template import Template, TextElement

DEFAULT_NAME = "Recipient Name"
DEFAULT_MESSAGE = "Your message here"

# Exact, case-sensitive tokens only; there is no escape syntax.
_TOKEN_RE = re.compile(r"\{\{(name|message)\}\}")


def _or_default(value: str, default: str) -> str:
    return value if value and value.strip() else default


def resolve_text(label: str, name: str = "", message: str = "") -> str:
    """Replace `{{name}}` / `{{message}}` in one pass.

    Replacement values are never scanned again, so a message containing
    `{{name}}` comes out verbatim.
    """
    values = {
        "name": _or_default(name, DEFAULT_NAME),
        "message": _or_default(message, DEFAULT_MESSAGE),
    }
    return _TOKEN_RE.sub(lambda m: values[m.group(1)], label)


def resolve_template(template: Template, name: str = "", message: str = "") -> Template:
    """Copy of `template` whose text labels have been resolved."""
    elements = [
        el.model_copy(update={"label": resolve_text(el.label, name, message)})
        if isinstance(el, TextElement) else el
        for el in template.elements
    ]
    return template.model_copy(update={"elements": elements})
