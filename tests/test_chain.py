from dataclasses import dataclass

import pytest

from csvbind.builder.chain import BUILDER_REGISTRY, BuildEnv
from csvbind.builder.schema import SchemaCompiler
from csvbind.builder.types import BuildCase
from csvbind.cellprocessor import conversion
from csvbind.cellprocessor.base import CellContext, Operation, Strictness
from csvbind.declare import Lower, Required, Trim, Upper, WordForbid, column, csv_bean
from csvbind.errors import ConfigurationError


# -------------------------------------------------------
# Beans
# -------------------------------------------------------

@csv_bean
@dataclass
class Comment:
    text: str = column(1, "Text", constraints=[WordForbid(["bar", "baz"])])


@csv_bean
@dataclass
class Mixed:
    text: str = column(1, constraints=[
        Upper(order=2),
        WordForbid(["x"], order=1),
        Trim(order=1),
        Required(),
    ])


@csv_bean
@dataclass
class OnlyGroupA:
    text: str = column(1, constraints=[Trim(groups=["A"]), WordForbid(["no"], groups=["A"])])


@csv_bean
@dataclass
class TwoWords:
    text: str = column(1, constraints=[WordForbid(["a"]), WordForbid(["b"], order=1)])


def shouting_builder(descriptor, attributes, next_op, env):
    return conversion.Upper(descriptor, next_op)


class ShoutingBuilder:
    def build(self, descriptor, attributes, next_op, env):
        return conversion.Upper(descriptor, next_op)


@csv_bean
@dataclass
class Overridden:
    text: str = column(1, constraints=[Lower()], builders={"Lower": shouting_builder})
    other: str = column(2, constraints=[Lower()], builders={"csvbind.conversion.Lower": ShoutingBuilder})


# -------------------------------------------------------
# Helpers
# -------------------------------------------------------

class Recording(Operation):
    def __init__(self, kind, log, next=None):
        super().__init__(next)
        self.kind = kind
        self.log = log

    def execute(self, value, ctx):
        self.log.append(self.kind)
        return self.call_next(value, ctx)


def recording_registry(log):
    return {kind: (lambda d, a, n, env, k=kind: Recording(k, log, n)) for kind in BUILDER_REGISTRY}


def run(schema, name, value):
    proc = schema.processor_for(name)
    ctx = CellContext(proc.field, schema.case)
    out = proc.execute(value, ctx)
    return out, ctx.violations


# -------------------------------------------------------
# Forbidden words
# -------------------------------------------------------

def test_forbidden_word_found():
    schema = SchemaCompiler().compile(Comment)
    out, violations = run(schema, "text", "a bar of soap")

    assert out == "a bar of soap"
    assert len(violations) == 1
    v = violations[0]
    assert v.words == ("bar",)
    assert v.kind == "csvbind.constraint.WordForbid"
    assert v.label == "Text"
    assert v.column_number == 1
    assert "contains forbidden words: bar" in v.message


def test_clean_value_has_no_violation():
    schema = SchemaCompiler().compile(Comment)
    _, violations = run(schema, "text", "all clear")
    assert violations == []


def test_matched_words_follow_vocabulary_order():
    schema = SchemaCompiler().compile(Comment)
    _, violations = run(schema, "text", "baz then bar")
    assert violations[0].words == ("bar", "baz")


def test_empty_value_is_not_checked():
    schema = SchemaCompiler().compile(Comment)
    assert run(schema, "text", None) == (None, [])
    assert run(schema, "text", "") == ("", [])


# -------------------------------------------------------
# Chain shape
# -------------------------------------------------------

def test_execution_order_follows_order_then_kind():
    log = []
    schema = SchemaCompiler(registry=recording_registry(log)).compile(Mixed)
    run(schema, "text", "value")
    assert log == [
        "csvbind.constraint.Required",
        "csvbind.constraint.WordForbid",
        "csvbind.conversion.Trim",
        "csvbind.conversion.Upper",
    ]
    assert list(schema.processor_for("text").kinds) == log


def test_conversions_applied_in_chain():
    schema = SchemaCompiler().compile(Mixed)
    out, violations = run(schema, "text", "  hello ")
    assert out == "HELLO"
    assert violations == []


def test_fully_filtered_field_is_identity():
    for case in (BuildCase.READ, BuildCase.WRITE):
        schema = SchemaCompiler().compile(OnlyGroupA, case)
        proc = schema.processor_for("text")
        assert proc.is_identity
        out, violations = run(schema, "text", "  no way  ")
        assert out == "  no way  "
        assert violations == []


def test_group_activates_filtered_constraints():
    schema = SchemaCompiler().compile(OnlyGroupA, groups=["A"])
    out, violations = run(schema, "text", "  no way  ")
    assert out == "no way"
    assert [v.words for v in violations] == [("no",)]


def test_same_key_compiles_to_equivalent_chains():
    a = SchemaCompiler().compile(Mixed)
    b = SchemaCompiler().compile(Mixed)
    assert a is not b
    assert a.signature() == b.signature()
    for value in ["  x marks  ", "", None, "plain"]:
        out_a, v_a = run(a, "text", value)
        out_b, v_b = run(b, "text", value)
        assert out_a == out_b
        assert v_a == v_b


# -------------------------------------------------------
# Strictness
# -------------------------------------------------------

def test_accumulate_collects_every_violation():
    schema = SchemaCompiler().compile(TwoWords)
    _, violations = run(schema, "text", "ab")
    assert [v.words for v in violations] == [("a",), ("b",)]


def test_fail_fast_stops_at_first_violation():
    schema = SchemaCompiler(BuildEnv(strictness=Strictness.FAIL_FAST)).compile(TwoWords)
    _, violations = run(schema, "text", "ab")
    assert [v.words for v in violations] == [("a",)]


# -------------------------------------------------------
# Builder dispatch
# -------------------------------------------------------

def test_field_builder_override_wins():
    schema = SchemaCompiler().compile(Overridden)
    assert run(schema, "text", "abc")[0] == "ABC"
    assert run(schema, "other", "abc")[0] == "ABC"


def test_missing_builder_is_configuration_error():
    with pytest.raises(ConfigurationError, match="no builder registered"):
        SchemaCompiler(registry={}).compile(Comment)


def test_builder_must_return_operation():
    registry = dict(BUILDER_REGISTRY)
    registry["csvbind.constraint.WordForbid"] = lambda d, a, n, env: "nope"
    with pytest.raises(ConfigurationError, match="not an Operation"):
        SchemaCompiler(registry=registry).compile(Comment)
