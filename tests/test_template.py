from types import SimpleNamespace

from slack_log_transport.template import render_template


def test_renders_top_level_names() -> None:
    text = render_template("[{{ level }}] {{message}}", {"level": "warn", "message": "disk full"})
    assert text == "[warn] disk full"


def test_renders_dotted_paths_through_mappings_and_attributes() -> None:
    context = {"meta": {"user": SimpleNamespace(name="ada")}}
    assert render_template("by {{ meta.user.name }}", context) == "by ada"


def test_missing_values_render_empty() -> None:
    assert render_template("<{{ meta.nope }}>", {"meta": None}) == "<>"


def test_non_string_values_use_str() -> None:
    assert render_template("{{ meta.count }} items", {"meta": {"count": 3}}) == "3 items"


def test_text_without_placeholders_is_unchanged() -> None:
    assert render_template("plain { text }", {}) == "plain { text }"
