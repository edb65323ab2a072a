from pathlib import Path

import pytest

from csvbind.messages import DEFAULT_MESSAGES, EMPTY_MARKER, GENERIC_MESSAGE, MessageBundle, MessageResolver

FORBID = "csvbind.constraint.WordForbid"


def vars_(**kw):
    base = {
        "row_number": 3,
        "line_number": 4,
        "column_number": 2,
        "label": "Comment",
        "validated_value": "a bar of soap",
        "words": ["bar"],
    }
    base.update(kw)
    return base


def write_bundle(tmp_path: Path):
    (tmp_path / "messages.yaml").write_text(
        "csvbind:\n"
        "  constraint:\n"
        "    WordForbid:\n"
        "      message: \"{{ label }} has {{ words | join('/') }}\"\n"
        "custom: \"base {{ label }}\"\n",
        encoding="utf-8",
    )
    (tmp_path / "messages_ja.yaml").write_text(
        "custom: \"{{ label }} は不正です\"\n",
        encoding="utf-8",
    )
    return MessageBundle.from_directory(tmp_path)


def test_literal_template_is_interpolated():
    r = MessageResolver()
    text = r.resolve("{{ label }}@{{ row_number }}:{{ line_number }}:{{ column_number }} -> {{ words | join(', ') }}", vars_())
    assert text == "Comment@3:4:2 -> bar"


def test_missing_variable_renders_marker():
    r = MessageResolver()
    assert r.resolve("value={{ nope }}", vars_()) == f"value={EMPTY_MARKER}"
    assert r.resolve("[{{ words | join(',') }}]", {}) == f"[{EMPTY_MARKER}]"
    assert r.resolve("w={{ words | join(', ') }}", {}) == "w=<?>"


def test_missing_key_falls_back_to_kind_default():
    r = MessageResolver()
    text = r.resolve("{csvbind.constraint.WordForbid.message}", vars_(), kind=FORBID)
    assert text == "[row 3, column 2] Comment: 'a bar of soap' contains forbidden words: bar."
    assert text


def test_missing_key_without_kind_uses_key_name():
    r = MessageResolver()
    text = r.resolve("{csvbind.constraint.WordForbid.message}", vars_())
    assert "contains forbidden words" in text


def test_unknown_key_uses_generic_message():
    r = MessageResolver()
    assert r.template_for("{some.unknown.key}") == GENERIC_MESSAGE
    assert "invalid value 'a bar of soap'" in r.resolve("{some.unknown.key}", vars_())


def test_bundle_key_wins_over_default(tmp_path):
    r = MessageResolver(write_bundle(tmp_path))
    text = r.resolve("{csvbind.constraint.WordForbid.message}", vars_(words=["bar", "baz"]), kind=FORBID)
    assert text == "Comment has bar/baz"


def test_locale_lookup_falls_back_to_base(tmp_path):
    bundle = write_bundle(tmp_path)
    assert bundle.locales == ["", "ja"]
    assert MessageResolver(bundle, locale="ja_JP").resolve("{custom}", vars_()) == "Comment は不正です"
    assert MessageResolver(bundle, locale="en").resolve("{custom}", vars_()) == "base Comment"
    # key only in the base file
    ja = MessageResolver(bundle, locale="ja")
    assert ja.resolve("{csvbind.constraint.WordForbid.message}", vars_(), kind=FORBID) == "Comment has bar"


def test_every_constraint_kind_has_a_default():
    for kind in (
        "csvbind.constraint.WordForbid",
        "csvbind.constraint.WordRequire",
        "csvbind.constraint.Required",
        "csvbind.constraint.LengthMax",
    ):
        assert kind in DEFAULT_MESSAGES


def test_missing_directory_rejected(tmp_path):
    with pytest.raises(FileNotFoundError):
        MessageBundle.from_directory(tmp_path / "missing")
