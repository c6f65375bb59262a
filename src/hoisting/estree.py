# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""ESTree node helpers, builders, and visitor base classes."""

import json
import logging
from collections.abc import Iterator, Sequence
from typing import Any

logger = logging.getLogger(__name__)

Node = dict[str, Any]
Ancestry = list[tuple[Node, str]]

_METADATA_KEYS: frozenset[str] = frozenset(
    {
        "type",
        "loc",
        "range",
        "start",
        "end",
        "comments",
        "leadingComments",
        "trailingComments",
        "innerComments",
        "tokens",
        "extra",
    }
)

FUNCTION_TYPES: frozenset[str] = frozenset(
    {"FunctionDeclaration", "FunctionExpression", "ArrowFunctionExpression"}
)
CLASS_TYPES: frozenset[str] = frozenset({"ClassDeclaration", "ClassExpression"})
_PATTERN_TYPES: frozenset[str] = frozenset(
    {"ObjectPattern", "ArrayPattern", "RestElement"}
)
_LABEL_OWNERS: frozenset[str] = frozenset(
    {"LabeledStatement", "BreakStatement", "ContinueStatement"}
)
_KEYED_MEMBERS: frozenset[str] = frozenset(
    {"Property", "MethodDefinition", "PropertyDefinition"}
)


def is_node(value: object) -> bool:
    """Check whether a value is an ESTree node.

    Args:
        value: Candidate value.

    Returns:
        True when value is a mapping carrying a string ``type`` tag.
    """
    return isinstance(value, dict) and isinstance(value.get("type"), str)


def iter_fields(node: Node) -> Iterator[tuple[str, Any]]:
    """Yield child-bearing fields of a node in declaration order.

    Args:
        node: ESTree node.

    Yields:
        Field name and value for fields holding nodes or node lists.
    """
    for field, value in list(node.items()):
        if field in _METADATA_KEYS:
            continue
        if is_node(value):
            yield field, value
        elif isinstance(value, list) and any(is_node(item) for item in value):
            yield field, value


def is_identifier(node: Any, name: str | None = None) -> bool:
    """Check for an identifier node, optionally with a given name."""
    if not is_node(node) or node["type"] != "Identifier":
        return False
    return name is None or node["name"] == name


def is_string_literal(node: Any) -> bool:
    """Check for a plain string literal node."""
    if not is_node(node) or node["type"] != "Literal":
        return False
    return isinstance(node.get("value"), str) and "regex" not in node


def matches_pattern(node: Any, pattern: str) -> bool:
    """Check whether a member expression chain spells a dotted pattern.

    Properties match when they are non-computed identifiers or computed
    string literals, so ``module["exports"]`` matches ``module.exports``.

    Args:
        node: Candidate expression node.
        pattern: Dotted name such as ``module.bundle.modules``.

    Returns:
        True when the chain matches every segment exactly.
    """
    parts = pattern.split(".")
    current = node
    for part in reversed(parts[1:]):
        if not is_node(current) or current["type"] != "MemberExpression":
            return False
        if _member_property_name(current) != part:
            return False
        current = current["object"]
    return is_identifier(current, parts[0])


def _member_property_name(node: Node) -> str | None:
    prop = node["property"]
    if node.get("computed"):
        if is_string_literal(prop):
            return prop["value"]
        return None
    if is_identifier(prop):
        return prop["name"]
    return None


def is_reference(ancestry: Sequence[tuple[Node, str]]) -> bool:
    """Classify whether an identifier at the current position reads a binding.

    Property keys, labels, declared names, and assignment targets are not
    references.

    Args:
        ancestry: Stack of ``(parent, field)`` pairs ending at the identifier.

    Returns:
        True when the identifier is a read reference.
    """
    if not ancestry:
        return False
    parent, field = ancestry[-1]
    kind = parent["type"]
    if kind == "MemberExpression":
        return field == "object" or bool(parent.get("computed"))
    if kind in _KEYED_MEMBERS:
        if field == "key":
            return bool(parent.get("computed"))
        if kind == "Property" and len(ancestry) > 1:
            return ancestry[-2][0]["type"] != "ObjectPattern"
        return True
    if kind == "VariableDeclarator":
        return field != "id"
    if kind in FUNCTION_TYPES:
        return field == "body"
    if kind in CLASS_TYPES:
        return field == "superClass"
    if kind in ("AssignmentExpression", "AssignmentPattern"):
        return field == "right"
    if kind in ("ForInStatement", "ForOfStatement"):
        return field != "left"
    if kind == "CatchClause":
        return field != "param"
    if kind == "ExportSpecifier":
        return field == "local"
    if kind in _PATTERN_TYPES or kind in _LABEL_OWNERS:
        return False
    if kind in (
        "MetaProperty",
        "ImportSpecifier",
        "ImportDefaultSpecifier",
        "ImportNamespaceSpecifier",
    ):
        return False
    return True


def identifier(name: str) -> Node:
    return {"type": "Identifier", "name": name}


def literal(value: str | int | float | bool | None) -> Node:
    """Build a literal node with a matching ``raw`` source text."""
    if value is None:
        raw = "null"
    elif isinstance(value, bool):
        raw = "true" if value else "false"
    elif isinstance(value, str):
        raw = json.dumps(value)
    else:
        raw = repr(value)
    return {"type": "Literal", "value": value, "raw": raw}


def this_expression() -> Node:
    return {"type": "ThisExpression"}


def member_expression(obj: Node, prop: Node, computed: bool = False) -> Node:
    return {
        "type": "MemberExpression",
        "object": obj,
        "property": prop,
        "computed": computed,
    }


def call_expression(callee: Node, arguments: list[Node]) -> Node:
    return {"type": "CallExpression", "callee": callee, "arguments": arguments}


def property_node(key: Node, value: Node, shorthand: bool = False) -> Node:
    return {
        "type": "Property",
        "key": key,
        "value": value,
        "kind": "init",
        "computed": False,
        "method": False,
        "shorthand": shorthand,
    }


def object_expression(properties: list[Node]) -> Node:
    return {"type": "ObjectExpression", "properties": properties}


def function_expression(
    body: list[Node], params: list[Node] | None = None, name: str | None = None
) -> Node:
    return {
        "type": "FunctionExpression",
        "id": identifier(name) if name is not None else None,
        "params": params or [],
        "body": {"type": "BlockStatement", "body": body},
        "generator": False,
        "async": False,
    }


def variable_declaration(kind: str, name: str, init: Node | None) -> Node:
    return {
        "type": "VariableDeclaration",
        "kind": kind,
        "declarations": [
            {"type": "VariableDeclarator", "id": identifier(name), "init": init}
        ],
    }


def expression_statement(expression: Node) -> Node:
    return {"type": "ExpressionStatement", "expression": expression}


def return_statement(argument: Node | None) -> Node:
    return {"type": "ReturnStatement", "argument": argument}


def program(body: list[Node]) -> Node:
    return {"type": "Program", "sourceType": "script", "body": body}


def is_directive(statement: Node) -> bool:
    """Check whether a statement belongs to a directive prologue."""
    return statement["type"] == "ExpressionStatement" and "directive" in statement


def split_directives(body: list[Node]) -> tuple[list[Node], list[Node]]:
    """Split a statement list into its directive prologue and the rest.

    Args:
        body: Program or function statement list.

    Returns:
        Leading directive statements and the remaining statements.
    """
    index = 0
    while index < len(body) and is_directive(body[index]):
        index += 1
    return body[:index], body[index:]


class NodeVisitor:
    """Walk an ESTree tree dispatching on each node's ``type`` tag.

    Subclasses define ``visit_<Type>`` methods; unhandled node types fall
    back to :meth:`generic_visit`. ``ancestry`` holds the ``(parent, field)``
    pairs leading to the node being visited.
    """

    def __init__(self) -> None:
        self.ancestry: Ancestry = []

    def visit(self, node: Node) -> Node | None:
        method = getattr(self, f"visit_{node['type']}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: Node) -> Node | None:
        for field, _ in iter_fields(node):
            self.visit_field(node, field)
        return node

    def visit_field(self, node: Node, field: str) -> None:
        """Visit the node or node list stored in one field.

        Args:
            node: Parent node.
            field: Field name on the parent.
        """
        value = node.get(field)
        self.ancestry.append((node, field))
        if isinstance(value, list):
            for item in list(value):
                if is_node(item):
                    self.visit(item)
        elif is_node(value):
            self.visit(value)
        self.ancestry.pop()


class NodeTransformer(NodeVisitor):
    """Visitor that replaces nodes with the values its visit methods return.

    Returning ``None`` for a list item removes it; returning ``None`` for a
    single-node field clears the field.
    """

    def visit_field(self, node: Node, field: str) -> None:
        value = node.get(field)
        self.ancestry.append((node, field))
        if isinstance(value, list):
            updated: list[Any] = []
            for item in value:
                if is_node(item):
                    item = self.visit(item)
                    if item is None:
                        continue
                updated.append(item)
            value[:] = updated
        elif is_node(value):
            node[field] = self.visit(value)
        self.ancestry.pop()
