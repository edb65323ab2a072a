import dataclasses
from pathlib import Path

import pytest

from csvbind.builder.loader import build_description, import_ref, load_description
from csvbind.builder.schema import SchemaCompiler
from csvbind.builder.types import BuildCase
from csvbind.csvio import BeanReader
from csvbind.errors import ConfigurationError

DOC = """\
version: 1
name: Review
header: true
fields:
  - name: id
    number: 1
    label: ID
    constraints:
      - kind: Required
  - name: comment
    number: 2
    label: Comment
    constraints:
      - kind: Trim
      - kind: WordForbid
        value: [bar]
        provider: [blocklist]
        order: 1
      - kind: LengthMax
        value: 10
        cases: [write]
"""


class Blocklist:
    def get_forbidden_words(self, field):
        return ["spam"]


def write_doc(tmp_path: Path, text: str = DOC) -> Path:
    p = tmp_path / "review.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_description_generates_record_type(tmp_path):
    doc = load_description(write_doc(tmp_path), providers={"blocklist": Blocklist})
    desc = doc.description

    assert doc.header is True
    assert doc.delimiter == ","
    assert dataclasses.is_dataclass(desc.target)
    assert desc.name == "Review"
    assert [(f.number, f.name, f.label) for f in desc.fields] == [(1, "id", "ID"), (2, "comment", "Comment")]
    forbid = desc.descriptors_for("comment")[1]
    assert forbid.attributes == {"value": ("bar",), "provider": (Blocklist,)}


def test_loaded_description_reads_records(tmp_path):
    doc = load_description(write_doc(tmp_path), providers={"blocklist": Blocklist})
    schema = SchemaCompiler().compile(doc.description, BuildCase.READ)
    # LengthMax is write-only; WordForbid has order 1 so it runs after Trim
    assert schema.processor_for("comment").kinds == (
        "csvbind.conversion.Trim",
        "csvbind.constraint.WordForbid",
    )

    res = BeanReader(schema).read_values(["r1", " no spam or bar here "])
    assert [v.words for v in res.violations] == [("bar", "spam")]
    assert res.bean.comment == "no spam or bar here"


def test_explicit_target(tmp_path):
    @dataclasses.dataclass
    class Review:
        id: str = None
        comment: str = None

    doc = load_description(write_doc(tmp_path), providers={"blocklist": Blocklist}, target=Review)
    assert doc.description.target is Review
    res = BeanReader.for_bean(Review).read_values(["r1", "fine"])
    assert isinstance(res.bean, Review)


def test_unknown_provider_name(tmp_path):
    with pytest.raises(ConfigurationError, match="unknown provider 'blocklist'"):
        load_description(write_doc(tmp_path))


def test_provider_by_import_reference():
    doc = {
        "fields": [{
            "name": "a",
            "number": 1,
            "constraints": [{"kind": "WordForbid", "provider": ["csvbind.builder.providers:FileWordProvider"]}],
        }],
    }
    desc = build_description(doc).description
    from csvbind.builder.providers import FileWordProvider

    assert desc.descriptors_for("a")[0].attributes["provider"] == (FileWordProvider,)


@pytest.mark.parametrize(
    "doc, match",
    [
        ({"fields": []}, "invalid bean description"),
        ({"fields": [{"name": "a", "number": 0}]}, "fields/0/number"),
        ({"fields": [{"name": "a", "number": 1, "extra": True}]}, "invalid bean description"),
        ({"fields": [{"name": "a", "number": 1, "constraints": [{"kind": "Nope"}]}]}, "Unknown declaration kind"),
        ({"fields": [{"name": "a", "number": 1, "constraints": [{"kind": "Trim", "bogus": 1}]}]}, "csvbind.conversion.Trim"),
        ({"fields": [{"name": "a", "number": 1}, {"name": "a", "number": 2}]}, "described twice"),
        ({"fields": [{"name": "a", "number": 1}, {"name": "b", "number": 1}]}, "column number 1 is used by both"),
        ({"target": "csvbind.builder.types:DEFAULT_GROUP", "fields": [{"name": "a", "number": 1}]}, "is not a class"),
    ],
)
def test_bad_documents_rejected(doc, match):
    with pytest.raises(ConfigurationError, match=match):
        build_description(doc)


def test_import_ref():
    assert import_ref("csvbind.builder.types:BuildCase.READ") is BuildCase.READ
    with pytest.raises(ConfigurationError, match="module:attr"):
        import_ref("csvbind.builder.types")
    with pytest.raises(ConfigurationError, match="cannot resolve"):
        import_ref("csvbind.builder.types:Missing")


def test_non_mapping_yaml(tmp_path):
    with pytest.raises(ConfigurationError, match="must be a mapping"):
        load_description(write_doc(tmp_path, "- a\n"))
