from cardstudio.delivery.schemas.template import ImageElement, Template, TextElement
from cardstudio.domain.placeholders import DEFAULT_MESSAGE, DEFAULT_NAME, resolve_template, resolve_text


def test_resolves_both_tokens():
    label = "Happy Birthday, {{name}}! {{message}}"
    assert resolve_text(label, "Ana", "Cheers!") == "Happy Birthday, Ana! Cheers!"


def test_empty_name_uses_default_not_empty_string():
    assert resolve_text("Dear {{name}}", "", "Hi") == f"Dear {DEFAULT_NAME}"
    assert resolve_text("{{message}}", "Ana", "   ") == DEFAULT_MESSAGE


def test_text_without_tokens_is_unchanged():
    assert resolve_text("Congratulations", "Ana", "Cheers!") == "Congratulations"


def test_tokens_are_case_sensitive():
    assert resolve_text("{{Name}} {{ name }}", "Ana", "x") == "{{Name}} {{ name }}"


def test_replacement_values_are_not_rescanned():
    assert resolve_text("{{message}}", "Ana", "see {{name}}") == "see {{name}}"


def test_repeated_tokens_all_replaced():
    assert resolve_text("{{name}} & {{name}}", "Bo", "") == "Bo & Bo"


def test_resolve_template_is_idempotent_and_leaves_input_untouched():
    template = Template(
        id="t1",
        elements=[
            TextElement(id="a", x=10, y=40, label="Hi {{name}}"),
            ImageElement(id="b", x=0, y=0, label="{{name}}"),
        ],
    )
    once = resolve_template(template, "Ana", "Cheers!")
    twice = resolve_template(once, "Ana", "Cheers!")

    assert once == twice
    assert once.elements[0].label == "Hi Ana"
    assert once.elements[1].label == "{{name}}"
    assert template.elements[0].label == "Hi {{name}}"
