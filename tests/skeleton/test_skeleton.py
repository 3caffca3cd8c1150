"""Tests for trigger location, skeleton building and emission."""

from __future__ import annotations

import textwrap

import pytest

from skelgen.models import Declaration, ImportStatement, Marker, Scope, ScopeKind, TypeParameter
from skelgen.skeleton import SkeletonEmitter, StubNode, build_skeleton, locate_triggers, merge_imports
from skelgen.syntax.parser import parse_source

_MARK = Marker(name="Augment", recognized=True)
_OTHER = Marker(name="Serializable", recognized=False)


def _parse(source: str) -> Scope:
    text = textwrap.dedent(source)
    return parse_source(text, ["Augment"])


def _scope(kind: ScopeKind, name: str, *members, **kwargs) -> Scope:
    keyword = kwargs.pop("keyword", kind.value)
    return Scope(kind=kind, name=name, keyword=keyword, members=list(members), **kwargs)


def test_locate_triggers_walks_in_document_order() -> None:
    root = _parse(
        """
        namespace N
        {
            [Augment] partial class A
            {
                [Augment] int x;
                [Serializable] int y;
            }
            partial class B
            {
                [Augment] void M() { }
            }
        }
        """
    )
    triggers = locate_triggers(root)
    assert [trigger.qualified_name for trigger in triggers] == ["N.A", "N.A.x", "N.B.M"]
    assert [scope.name for scope in triggers[1].chain] == ["N", "A"]


def test_locate_triggers_ignores_unrecognized_markers() -> None:
    root = _scope(
        ScopeKind.COMPILATION_UNIT,
        "",
        _scope(ScopeKind.CLASS, "C", Declaration(name="d", markers=[_OTHER]), markers=[_OTHER]),
    )
    assert locate_triggers(root) == []


def test_builder_merges_shared_ancestors_by_identity() -> None:
    inner = _scope(
        ScopeKind.STRUCT,
        "Inner",
        Declaration(name="a", markers=[_MARK]),
        Declaration(name="b", markers=[_MARK]),
        type_parameters=[TypeParameter("T1"), TypeParameter("T2")],
    )
    outer = _scope(ScopeKind.CLASS, "Outer", inner, modifiers=["partial"])
    root = _scope(ScopeKind.COMPILATION_UNIT, "", outer)

    forest = build_skeleton(locate_triggers(root))

    assert len(forest) == 1
    assert forest[0].header == "partial class Outer"
    assert len(forest[0].children) == 1
    assert forest[0].children[0].header == "struct Inner<T1, T2>"
    assert forest[0].children[0].children == []


def test_builder_keeps_same_named_scopes_separate() -> None:
    first = _scope(ScopeKind.NAMESPACE, "N", Declaration(name="a", markers=[_MARK]))
    second = _scope(ScopeKind.NAMESPACE, "N", Declaration(name="b", markers=[_MARK]))
    root = _scope(ScopeKind.COMPILATION_UNIT, "", first, second)

    forest = build_skeleton(locate_triggers(root))

    assert [stub.name for stub in forest] == ["N", "N"]


def test_builder_omits_unmarked_siblings() -> None:
    root = _parse(
        """
        namespace N
        {
            class Plain { int z; }
            partial class Marked { [Augment] int x; }
        }
        """
    )
    forest = build_skeleton(locate_triggers(root))
    assert [child.name for child in forest[0].children] == ["Marked"]


def test_builder_with_no_triggers_is_empty() -> None:
    assert build_skeleton([]) == []


def test_stub_carries_namespace_imports_only() -> None:
    namespace = _scope(
        ScopeKind.NAMESPACE,
        "N",
        keyword="namespace",
        imports=[ImportStatement("using System;")],
    )
    stub = StubNode.from_scope(namespace)
    assert [statement.text for statement in stub.imports] == ["using System;"]
    assert stub.header == "namespace N"


def test_stub_header_renders_variance() -> None:
    scope = _scope(
        ScopeKind.INTERFACE,
        "IProducer",
        modifiers=["public", "partial"],
        type_parameters=[TypeParameter("T", "out")],
    )
    assert StubNode.from_scope(scope).header == "public partial interface IProducer<out T>"


def test_merge_imports_preserves_duplicates_and_order() -> None:
    root = _parse("using B;\nusing A;\nusing B;")
    assert [statement.text for statement in merge_imports(root)] == [
        "using B;",
        "using A;",
        "using B;",
    ]


def test_emitter_empty_inputs_give_empty_string() -> None:
    assert SkeletonEmitter().emit([], []) == ""


def test_emitter_nested_layout_with_custom_indent() -> None:
    namespace = StubNode(
        kind=ScopeKind.NAMESPACE,
        keyword="namespace",
        name="N",
        imports=[ImportStatement("using System.Linq;")],
        children=[
            StubNode(kind=ScopeKind.CLASS, keyword="class", name="A", modifiers=["partial"]),
            StubNode(kind=ScopeKind.CLASS, keyword="class", name="B", modifiers=["partial"]),
        ],
    )
    text = SkeletonEmitter(indent=2).emit([ImportStatement("using System;")], [namespace])
    assert text == "\n".join(
        [
            "using System;",
            "",
            "namespace N",
            "{",
            "  using System.Linq;",
            "",
            "  partial class A",
            "  {",
            "  }",
            "",
            "  partial class B",
            "  {",
            "  }",
            "}",
        ]
    )


def test_emitter_rejects_negative_indent() -> None:
    with pytest.raises(ValueError):
        SkeletonEmitter(indent=-1)
