from dataclasses import dataclass
from pathlib import Path

import pytest

from csvbind.builder.chain import VOCABULARY_PER_CALL, BuildEnv
from csvbind.builder.factory import DefaultBeanFactory
from csvbind.builder.providers import FileWordProvider, StaticVocabulary, Vocabulary, resolve_vocabulary
from csvbind.builder.schema import SchemaCompiler
from csvbind.cellprocessor.base import CellContext
from csvbind.declare import WordForbid, WordRequire, column, csv_bean, get_description
from csvbind.errors import ConfigurationError, ProviderResolutionError


# -------------------------------------------------------
# Providers
# -------------------------------------------------------

class XYProvider:
    def get_forbidden_words(self, field):
        return ["x", "y"]


class LabelProvider:
    """Picks words based on the field it is asked about."""

    def get_forbidden_words(self, field):
        return [f"{field.label.lower()}-{field.number}"]


class BrokenProvider:
    def get_forbidden_words(self, field):
        raise IOError("word source offline")


class NeedsArgsProvider:
    def __init__(self, path):
        self.path = path

    def get_forbidden_words(self, field):
        return []


class CountingProvider:
    calls = 0
    words = ["old"]

    def get_forbidden_words(self, field):
        CountingProvider.calls += 1
        return list(CountingProvider.words)


# -------------------------------------------------------
# Beans
# -------------------------------------------------------

@csv_bean
@dataclass
class Combined:
    text: str = column(1, constraints=[WordForbid(["z"]), WordForbid(provider=[XYProvider])])


@csv_bean
@dataclass
class Mixed:
    text: str = column(3, "Note", constraints=[WordForbid(["z", "z", "Z"], provider=[XYProvider, LabelProvider])])


@csv_bean
@dataclass
class Broken:
    text: str = column(1, constraints=[WordForbid(provider=[BrokenProvider])])


@csv_bean
@dataclass
class NeedsArgs:
    text: str = column(1, constraints=[WordForbid(provider=[NeedsArgsProvider])])


@csv_bean
@dataclass
class Refreshing:
    text: str = column(1, constraints=[WordForbid(provider=[CountingProvider])])


def run(schema, value):
    proc = schema.processors[0]
    ctx = CellContext(proc.field, schema.case)
    proc.execute(value, ctx)
    return ctx.violations


# -------------------------------------------------------
# Tests
# -------------------------------------------------------

def test_literal_and_provider_words_are_merged_verbatim():
    desc = get_description(Mixed)
    field = desc.fields[0]
    words = resolve_vocabulary(desc.descriptors_for("text")[0], field, DefaultBeanFactory())
    assert words == ["z", "z", "Z", "x", "y", "note-3"]


def test_provider_only_constraint():
    schema = SchemaCompiler().compile(Combined)
    violations = run(schema, "y?")
    assert [v.words for v in violations] == [("y",)]


def test_union_of_literal_and_provider_constraints():
    schema = SchemaCompiler().compile(Combined)
    violations = run(schema, "x y z")
    found = {w for v in violations for w in v.words}
    assert found == {"x", "y", "z"}


def test_provider_failure_is_fatal():
    with pytest.raises(ProviderResolutionError, match="word source offline") as exc:
        SchemaCompiler().compile(Broken)
    assert isinstance(exc.value.__cause__, IOError)
    assert exc.value.provider == "BrokenProvider"


def test_provider_that_cannot_be_created_is_provider_error():
    with pytest.raises(ProviderResolutionError, match="cannot create word provider"):
        SchemaCompiler().compile(NeedsArgs)


def test_provider_instances_and_callables_are_accepted():
    @csv_bean
    @dataclass
    class Inline:
        text: str = column(1, constraints=[WordForbid(provider=[XYProvider(), lambda field: ["q"]])])

    schema = SchemaCompiler().compile(Inline)
    assert {w for v in run(schema, "x q") for w in v.words} == {"x", "q"}


def test_compile_mode_calls_provider_once():
    CountingProvider.calls = 0
    CountingProvider.words = ["old"]
    schema = SchemaCompiler().compile(Refreshing)
    run(schema, "old")
    run(schema, "old")
    assert CountingProvider.calls == 1

    CountingProvider.words = ["new"]
    assert run(schema, "new") == []


def test_per_call_mode_sees_refreshed_words():
    CountingProvider.calls = 0
    CountingProvider.words = ["old"]
    schema = SchemaCompiler(BuildEnv(vocabulary_mode=VOCABULARY_PER_CALL)).compile(Refreshing)
    assert CountingProvider.calls == 0
    assert len(run(schema, "old")) == 1

    CountingProvider.words = ["new"]
    assert run(schema, "old") == []
    assert [v.words for v in run(schema, "new")] == [("new",)]
    assert CountingProvider.calls == 3


def test_file_word_provider(tmp_path: Path):
    words = tmp_path / "forbidden.txt"
    words.write_text("# forbidden words\nfoo\n\n  bar  \n", encoding="utf-8")
    provider = FileWordProvider(words)

    @csv_bean
    @dataclass
    class FromFile:
        text: str = column(1, constraints=[
            WordForbid(provider=[provider]),
            WordRequire(provider=[provider], order=1),
        ])

    schema = SchemaCompiler().compile(FromFile)
    violations = run(schema, "foo only")
    assert [(v.kind.rsplit(".", 1)[-1], v.words) for v in violations] == [
        ("WordForbid", ("foo",)),
        ("WordRequire", ("bar",)),
    ]


def test_missing_word_file_is_provider_error(tmp_path: Path):
    provider = FileWordProvider(tmp_path / "nope.txt")

    @csv_bean
    @dataclass
    class MissingFile:
        text: str = column(1, constraints=[WordForbid(provider=[provider])])

    with pytest.raises(ProviderResolutionError):
        SchemaCompiler().compile(MissingFile)


def test_word_constraint_needs_words_or_provider():
    with pytest.raises(ConfigurationError, match="either value or provider"):
        WordForbid()


def test_vocabulary_base_is_abstract():
    with pytest.raises(TypeError):
        Vocabulary()

    class NoSignature(Vocabulary):
        def words(self):
            return ("a",)

    with pytest.raises(TypeError):
        NoSignature()
    assert StaticVocabulary(["a", "a"]).words() == ("a", "a")
