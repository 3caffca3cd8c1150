"""Tree-sitter backed parser building the scope tree from active text.

Only what the skeleton needs is read from the syntax tree: imports,
namespaces, type headers, attribute lists and member names. Member bodies,
base lists and constraint clauses are never visited.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Tuple

import tree_sitter
import tree_sitter_c_sharp

from ..errors import ParseError
from ..logging import get_logger
from ..models import Declaration, ImportStatement, Marker, Scope, ScopeKind, TypeParameter

logger = get_logger("parser")

CSHARP = tree_sitter.Language(tree_sitter_c_sharp.language())

_TYPE_NODES = {
    "class_declaration",
    "struct_declaration",
    "interface_declaration",
    "enum_declaration",
    "record_declaration",
    "record_struct_declaration",
}
_NAMESPACE_NODES = {"namespace_declaration", "file_scoped_namespace_declaration"}
_IMPORT_NODES = {"using_directive", "extern_alias_directive"}
_MEMBER_NODES = {
    "field_declaration",
    "event_field_declaration",
    "property_declaration",
    "method_declaration",
    "event_declaration",
    "indexer_declaration",
    "constructor_declaration",
    "destructor_declaration",
    "operator_declaration",
    "conversion_operator_declaration",
    "delegate_declaration",
    "enum_member_declaration",
}
_TYPE_KEYWORDS = ("record", "class", "struct", "interface", "enum")
_STANDALONE_ATTRIBUTE_TARGETS = {"assembly", "module"}
_ATTRIBUTE_SUFFIX = "Attribute"
_WHITESPACE = re.compile(r"\s+")


def normalize_marker_name(name: str) -> str:
    """Reduce an attribute name to the simple name used for matching."""
    simple = name.replace("::", ".").rsplit(".", 1)[-1]
    if simple.endswith(_ATTRIBUTE_SUFFIX) and len(simple) > len(_ATTRIBUTE_SUFFIX):
        simple = simple[: -len(_ATTRIBUTE_SUFFIX)]
    return simple


class MarkerMatcher:
    """Static membership test against the configured marker names."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = frozenset(normalize_marker_name(name) for name in names if name)

    def matches(self, name: str) -> bool:
        return normalize_marker_name(name) in self.names


def _scope_kind(keyword: str) -> ScopeKind:
    if "struct" in keyword:
        return ScopeKind.STRUCT
    if keyword == "interface":
        return ScopeKind.INTERFACE
    if keyword == "enum":
        return ScopeKind.ENUM
    return ScopeKind.CLASS


def _children_of_type(node: tree_sitter.Node, *types: str) -> Iterator[tree_sitter.Node]:
    return (child for child in node.children if child.type in types)


def _first_child(node: tree_sitter.Node, *types: str) -> Optional[tree_sitter.Node]:
    return next(_children_of_type(node, *types), None)


def _field(node: tree_sitter.Node, name: str, *types: str) -> Optional[tree_sitter.Node]:
    """Return the named field, or the first child of ``types`` when it is absent."""
    child = node.child_by_field_name(name)
    if child is None and types:
        child = _first_child(node, *types)
    return child


def _leaves(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    if node.type == "comment":
        return
    if node.child_count == 0:
        yield node
        return
    for child in node.children:
        yield from _leaves(child)


def _first_error(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Return the first ERROR or MISSING node in document order."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


class DeclarationParser:
    """Walks a C# syntax tree into the document's scope tree."""

    def __init__(self, matcher: MarkerMatcher) -> None:
        self.matcher = matcher
        self._parser = tree_sitter.Parser(CSHARP)
        self._source = b""

    def parse(self, text: str) -> Scope:
        if text.startswith("\ufeff"):
            text = " " + text[1:]
        self._source = text.encode("utf-8")
        tree = self._parser.parse(self._source)
        if tree.root_node.has_error:
            raise self._syntax_error(tree.root_node)

        root = Scope(kind=ScopeKind.COMPILATION_UNIT, name="")
        self._collect(root, tree.root_node)
        return root

    # Text and positions

    def _text(self, node: tree_sitter.Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def _position(self, node: tree_sitter.Node) -> Tuple[int, int]:
        line_start = self._source.rfind(b"\n", 0, node.start_byte) + 1
        prefix = self._source[line_start : node.start_byte].decode("utf-8", errors="ignore")
        return node.start_point[0] + 1, len(prefix) + 1

    def _header_line(self, node: tree_sitter.Node) -> int:
        """Line of the first token after the node's attribute lists."""
        for child in node.children:
            if child.type not in ("attribute_list", "comment"):
                return child.start_point[0] + 1
        return node.start_point[0] + 1

    def _join(self, node: tree_sitter.Node) -> str:
        """Rebuild a node's text from its tokens, collapsing any gap to one space."""
        parts: List[str] = []
        previous_end: Optional[int] = None
        for leaf in _leaves(node):
            if previous_end is not None and leaf.start_byte > previous_end:
                parts.append(" ")
            parts.append(self._text(leaf))
            previous_end = leaf.end_byte
        return "".join(parts)

    def _syntax_error(self, root: tree_sitter.Node) -> ParseError:
        node = _first_error(root)
        if node is None:
            node = root
        line, column = self._position(node)
        if node.is_missing:
            expected = node.type if node.is_named else f"'{node.type}'"
            message = f"Expected {expected}"
        else:
            leaf = next((leaf for leaf in _leaves(node) if leaf.end_byte > leaf.start_byte), None)
            message = f"Unexpected '{self._text(leaf)}'" if leaf is not None else "Unexpected end of input"
        logger.debug("Syntax error at line %d, column %d: %s", line, column, message)
        return ParseError(message, line, column)

    # Tree walk

    def _collect(self, scope: Scope, container: tree_sitter.Node) -> None:
        target = scope
        for child in container.named_children:
            if child.type == "file_scoped_namespace_declaration":
                target = self._namespace(scope, child)
                # Grammar releases differ on whether the following members nest here.
                self._collect(target, child)
                continue
            self._member(target, child)

    def _member(self, scope: Scope, node: tree_sitter.Node) -> None:
        if node.type in _IMPORT_NODES:
            if scope.kind in (ScopeKind.COMPILATION_UNIT, ScopeKind.NAMESPACE):
                scope.imports.append(
                    ImportStatement(text=self._join(node), line=node.start_point[0] + 1)
                )
        elif node.type in _NAMESPACE_NODES:
            if scope.kind not in (ScopeKind.COMPILATION_UNIT, ScopeKind.NAMESPACE):
                line, column = self._position(node)
                raise ParseError("Namespace declared inside a type", line, column)
            namespace = self._namespace(scope, node)
            body = _field(node, "body", "declaration_list")
            if body is not None:
                self._collect(namespace, body)
        elif node.type in _TYPE_NODES:
            self._type(scope, node)
        elif node.type in _MEMBER_NODES:
            scope.members.append(
                Declaration(
                    name=self._member_name(node),
                    markers=self._markers(node),
                    line=self._header_line(node),
                )
            )

    def _namespace(self, parent: Scope, node: tree_sitter.Node) -> Scope:
        name_node = node.child_by_field_name("name")
        name = _WHITESPACE.sub("", self._text(name_node)) if name_node is not None else ""
        namespace = Scope(
            kind=ScopeKind.NAMESPACE,
            name=name,
            keyword="namespace",
            line=node.start_point[0] + 1,
        )
        parent.members.append(namespace)
        return namespace

    def _type(self, parent: Scope, node: tree_sitter.Node) -> None:
        name_node = node.child_by_field_name("name")
        modifiers: List[str] = []
        keywords: List[str] = []
        for child in node.children:
            if name_node is not None and child.start_byte >= name_node.start_byte:
                break
            if child.type == "modifier":
                modifiers.append(self._text(child))
            elif not child.is_named and child.type == "ref":
                modifiers.append("ref")
            elif not child.is_named and child.type in _TYPE_KEYWORDS:
                keywords.append(child.type)
        keyword = " ".join(keywords)

        scope = Scope(
            kind=_scope_kind(keyword),
            name=self._text(name_node) if name_node is not None else "",
            keyword=keyword,
            modifiers=modifiers,
            markers=self._markers(node),
            line=self._header_line(node),
        )
        parameters = _first_child(node, "type_parameter_list")
        if parameters is not None:
            scope.type_parameters = self._type_parameters(parameters)
        parent.members.append(scope)

        body = _field(node, "body", "declaration_list", "enum_member_declaration_list")
        if body is not None:
            self._collect(scope, body)

    def _type_parameters(self, node: tree_sitter.Node) -> List[TypeParameter]:
        parameters: List[TypeParameter] = []
        for parameter in _children_of_type(node, "type_parameter"):
            name_node = _field(parameter, "name", "identifier")
            variance: Optional[str] = None
            for child in parameter.children:
                if child.type in ("attribute_list", "identifier"):
                    continue
                if self._text(child) in ("in", "out"):
                    variance = self._text(child)
            name = self._text(name_node) if name_node is not None else ""
            parameters.append(TypeParameter(name=name, variance=variance))
        return parameters

    # Attributes

    def _markers(self, node: tree_sitter.Node) -> List[Marker]:
        markers: List[Marker] = []
        for attribute_list in _children_of_type(node, "attribute_list"):
            target: Optional[str] = None
            specifier = _first_child(attribute_list, "attribute_target_specifier")
            if specifier is not None:
                target = self._text(specifier).rstrip(":").strip()
            if target in _STANDALONE_ATTRIBUTE_TARGETS:
                continue
            for attribute in _children_of_type(attribute_list, "attribute"):
                markers.append(self._marker(attribute, target))
        return markers

    def _marker(self, attribute: tree_sitter.Node, target: Optional[str]) -> Marker:
        name_node = attribute.child_by_field_name("name")
        if name_node is None:
            name_node = attribute.named_children[0]
        name = _WHITESPACE.sub("", self._text(name_node)).split("<", 1)[0]
        arguments = ""
        argument_list = _first_child(attribute, "attribute_argument_list")
        if argument_list is not None:
            arguments = self._text(argument_list)[1:-1].strip()
        return Marker(
            name=name,
            arguments=arguments,
            target=target,
            recognized=self.matcher.matches(name),
        )

    # Members

    def _member_name(self, node: tree_sitter.Node) -> str:
        if node.type == "indexer_declaration":
            return "this"
        if node.type in ("field_declaration", "event_field_declaration"):
            declaration = _first_child(node, "variable_declaration")
            declarator = _first_child(declaration, "variable_declarator") if declaration is not None else None
            if declarator is not None:
                name_node = _field(declarator, "name", "identifier")
                if name_node is not None:
                    return self._text(name_node).lstrip("@")
        if node.type == "operator_declaration":
            operator = node.child_by_field_name("operator")
            return f"operator {self._text(operator)}" if operator is not None else "operator"
        if node.type == "conversion_operator_declaration":
            target = node.child_by_field_name("type")
            return f"operator {self._text(target)}" if target is not None else "operator"
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            return self._text(name_node).lstrip("@")
        return node.type


def parse_source(text: str, marker_names: Iterable[str]) -> Scope:
    """Parse active ``text`` into the document's root scope."""
    return DeclarationParser(MarkerMatcher(marker_names)).parse(text)


__all__ = ["CSHARP", "DeclarationParser", "MarkerMatcher", "normalize_marker_name", "parse_source"]
