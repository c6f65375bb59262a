# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Lexical scope model built by crawling an ESTree program."""

import logging
from dataclasses import dataclass, field
from typing import Literal

from hoisting.estree import (
    Node,
    NodeTransformer,
    NodeVisitor,
    identifier,
    is_reference,
)

logger = logging.getLogger(__name__)

ScopeKind = Literal["program", "function", "arrow", "block", "catch", "class"]
BindingKind = Literal[
    "var", "let", "const", "function", "class", "param", "catch", "import", "local"
]

_VAR_SCOPE_KINDS: frozenset[str] = frozenset({"program", "function", "arrow"})
_CLOSURE_SCOPE_KINDS: frozenset[str] = frozenset(
    {"program", "function", "arrow", "class"}
)


@dataclass(eq=False)
class Occurrence:
    """Locate one identifier node inside its parent.

    Args:
        node: Identifier node.
        parent: Node holding the identifier.
        field: Parent field holding the identifier.
        holder: Shorthand property or import/export specifier whose external
            name is spelled by the same identifier.
    """

    node: Node
    parent: Node
    field: str
    holder: Node | None = None


@dataclass(eq=False)
class Binding:
    """Represent one name declared in a scope with every place it appears."""

    name: str
    kind: BindingKind
    scope: "Scope"
    declarations: list[Occurrence] = field(default_factory=list)
    references: list[Occurrence] = field(default_factory=list)


@dataclass(eq=False)
class Scope:
    """Represent one lexical scope in a parent-linked scope tree."""

    kind: ScopeKind
    node: Node
    parent: "Scope | None" = None
    bindings: dict[str, Binding] = field(default_factory=dict)

    def declare(self, name: str, kind: BindingKind, occurrence: Occurrence) -> Binding:
        """Declare a name here, merging redeclarations into one binding.

        Args:
            name: Declared name.
            kind: Declaration kind of the first declaration.
            occurrence: Declaring identifier.

        Returns:
            Binding owning the declaration.
        """
        binding = self.bindings.get(name)
        if binding is None:
            binding = Binding(name=name, kind=kind, scope=self)
            self.bindings[name] = binding
        binding.declarations.append(occurrence)
        return binding

    def get_binding(self, name: str) -> Binding | None:
        """Resolve a name through this scope and its ancestors."""
        scope: Scope | None = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None

    def has_binding(self, name: str) -> bool:
        return self.get_binding(name) is not None

    def function_parent(self) -> "Scope":
        """Return the nearest scope that owns ``var`` and ``return``."""
        scope = self
        while scope.kind not in _VAR_SCOPE_KINDS and scope.parent is not None:
            scope = scope.parent
        return scope

    def closure_parent(self) -> "Scope":
        """Return the nearest function, arrow, class body or program scope.

        Block and catch scopes are skipped.
        """
        scope = self
        while scope.kind not in _CLOSURE_SCOPE_KINDS and scope.parent is not None:
            scope = scope.parent
        return scope

    def rename(self, name: str, new_name: str) -> int:
        """Rename a binding declared in this scope and every reference to it.

        Shorthand holders are split so the external property, import or
        export name keeps its original spelling.

        Args:
            name: Current binding name.
            new_name: Replacement name.

        Returns:
            Number of identifier occurrences rewritten.
        """
        return self.rename_binding(self.bindings[name], new_name)

    def rename_binding(self, binding: Binding, new_name: str) -> int:
        """Rename one binding object declared in this scope.

        Args:
            binding: Binding owned by this scope.
            new_name: Replacement name.

        Returns:
            Number of identifier occurrences rewritten.
        """
        original = binding.name
        if self.bindings.get(original) is binding:
            del self.bindings[original]
        binding.name = new_name
        self.bindings[new_name] = binding
        occurrences = binding.declarations + binding.references
        for occurrence in occurrences:
            if occurrence.holder is not None:
                _split_holder(occurrence, original=original)
            occurrence.node["name"] = new_name
        return len(occurrences)


@dataclass(frozen=True)
class ScopeTree:
    """Hold the crawled scopes of one program.

    Args:
        root: Program scope.
        owned: Scope keyed by the identity of the node that opens it.
        free_references: References resolving to no binding, keyed by name.
    """

    root: Scope
    owned: dict[int, Scope]
    free_references: dict[str, list[Occurrence]]

    def scope_owned_by(self, node: Node) -> Scope | None:
        return self.owned.get(id(node))


def _split_holder(occurrence: Occurrence, original: str) -> None:
    holder = occurrence.holder
    assert holder is not None
    kind = holder["type"]
    if kind == "Property":
        holder["shorthand"] = False
        holder["key"] = identifier(original)
    elif kind == "ImportSpecifier" and holder.get("imported") is occurrence.node:
        holder["imported"] = identifier(original)
    elif kind == "ExportSpecifier" and holder.get("exported") is occurrence.node:
        holder["exported"] = identifier(original)


class _ScopeCrawler(NodeVisitor):
    """Declare bindings and collect references for one program."""

    def __init__(self, program: Node) -> None:
        super().__init__()
        self.root = Scope(kind="program", node=program)
        self.owned: dict[int, Scope] = {id(program): self.root}
        self._scope = self.root
        self._pending: list[tuple[Scope, Occurrence]] = []

    def build(self) -> ScopeTree:
        """Crawl the program and resolve every collected reference.

        Returns:
            Crawled scope tree.
        """
        self.visit(self.root.node)
        free_references: dict[str, list[Occurrence]] = {}
        for scope, occurrence in self._pending:
            name = occurrence.node["name"]
            binding = scope.get_binding(name)
            if binding is None:
                free_references.setdefault(name, []).append(occurrence)
            else:
                binding.references.append(occurrence)
        return ScopeTree(
            root=self.root, owned=self.owned, free_references=free_references
        )

    def visit_Identifier(self, node: Node) -> Node:
        if not is_reference(self.ancestry):
            return node
        parent, field_name = self.ancestry[-1]
        holder = None
        if parent["type"] == "Property" and parent.get("shorthand"):
            holder = parent
        elif parent["type"] == "ExportSpecifier":
            holder = parent
        self._reference(node, parent, field_name, holder)
        return node

    def visit_VariableDeclaration(self, node: Node) -> Node:
        kind = node.get("kind", "var")
        target = self._scope if kind in ("let", "const") else self._scope.function_parent()
        for declarator in node["declarations"]:
            self.ancestry.append((node, "declarations"))
            self._walk_pattern(declarator["id"], declarator, "id", declare=(target, kind))
            self.visit_field(declarator, "init")
            self.ancestry.pop()
        return node

    def visit_FunctionDeclaration(self, node: Node) -> Node:
        name_id = node.get("id")
        if name_id is not None:
            self._scope.declare(
                name_id["name"], "function", Occurrence(name_id, node, "id")
            )
        self._visit_function(node, "function", own_name=False)
        return node

    def visit_FunctionExpression(self, node: Node) -> Node:
        self._visit_function(node, "function", own_name=True)
        return node

    def visit_ArrowFunctionExpression(self, node: Node) -> Node:
        self._visit_function(node, "arrow", own_name=False)
        return node

    def visit_ClassDeclaration(self, node: Node) -> Node:
        name_id = node.get("id")
        if name_id is not None:
            self._scope.declare(name_id["name"], "class", Occurrence(name_id, node, "id"))
        self._visit_class(node, own_name=False)
        return node

    def visit_ClassExpression(self, node: Node) -> Node:
        self._visit_class(node, own_name=True)
        return node

    def visit_BlockStatement(self, node: Node) -> Node:
        scope = self._enter("block", node)
        self.generic_visit(node)
        self._leave(scope)
        return node

    def visit_StaticBlock(self, node: Node) -> Node:
        scope = self._enter("function", node)
        self.generic_visit(node)
        self._leave(scope)
        return node

    def visit_ForStatement(self, node: Node) -> Node:
        scope = self._enter("block", node)
        self.generic_visit(node)
        self._leave(scope)
        return node

    def visit_ForInStatement(self, node: Node) -> Node:
        scope = self._enter("block", node)
        left = node["left"]
        if left["type"] == "VariableDeclaration":
            self.visit_field(node, "left")
        else:
            self._walk_pattern(left, node, "left", declare=None)
        self.visit_field(node, "right")
        self.visit_field(node, "body")
        self._leave(scope)
        return node

    def visit_ForOfStatement(self, node: Node) -> Node:
        return self.visit_ForInStatement(node)

    def visit_SwitchStatement(self, node: Node) -> Node:
        self.visit_field(node, "discriminant")
        scope = self._enter("block", node)
        self.visit_field(node, "cases")
        self._leave(scope)
        return node

    def visit_CatchClause(self, node: Node) -> Node:
        scope = self._enter("catch", node)
        param = node.get("param")
        if param is not None:
            self._walk_pattern(param, node, "param", declare=(scope, "catch"))
        self.visit_field(node, "body")
        self._leave(scope)
        return node

    def visit_AssignmentExpression(self, node: Node) -> Node:
        self._walk_pattern(node["left"], node, "left", declare=None)
        self.visit_field(node, "right")
        return node

    def visit_ImportDeclaration(self, node: Node) -> Node:
        for specifier in node.get("specifiers", []):
            local = specifier["local"]
            holder = specifier if specifier["type"] == "ImportSpecifier" else None
            self.root.declare(
                local["name"],
                "import",
                Occurrence(local, specifier, "local", holder=holder),
            )
        return node

    def visit_LabeledStatement(self, node: Node) -> Node:
        self.visit_field(node, "body")
        return node

    def visit_BreakStatement(self, node: Node) -> Node:
        return node

    def visit_ContinueStatement(self, node: Node) -> Node:
        return node

    def _visit_function(self, node: Node, kind: ScopeKind, own_name: bool) -> None:
        scope = self._enter(kind, node)
        name_id = node.get("id")
        if own_name and name_id is not None:
            scope.declare(name_id["name"], "local", Occurrence(name_id, node, "id"))
        for param in node.get("params", []):
            self.ancestry.append((node, "params"))
            self._walk_pattern(param, node, "params", declare=(scope, "param"))
            self.ancestry.pop()
        body = node["body"]
        if body["type"] == "BlockStatement":
            self.ancestry.append((node, "body"))
            self.visit_field(body, "body")
            self.ancestry.pop()
        else:
            self.visit_field(node, "body")
        self._leave(scope)

    def _visit_class(self, node: Node, own_name: bool) -> None:
        self.visit_field(node, "superClass")
        body = node["body"]
        scope = self._enter("class", body)
        name_id = node.get("id")
        if own_name and name_id is not None:
            scope.declare(name_id["name"], "local", Occurrence(name_id, node, "id"))
        self.ancestry.append((node, "body"))
        self.generic_visit(body)
        self.ancestry.pop()
        self._leave(scope)

    def _walk_pattern(
        self,
        pattern: Node | None,
        parent: Node,
        field_name: str,
        declare: tuple[Scope, BindingKind] | None,
        holder: Node | None = None,
    ) -> None:
        """Walk a binding or assignment target pattern.

        Args:
            pattern: Pattern node; array holes are ``None``.
            parent: Node holding the pattern.
            field_name: Parent field holding the pattern.
            declare: Target scope and kind when the pattern declares names,
                ``None`` when it assigns to existing ones.
            holder: Shorthand property spelling the same name.
        """
        if pattern is None:
            return
        kind = pattern["type"]
        if kind == "Identifier":
            occurrence = Occurrence(pattern, parent, field_name, holder=holder)
            if declare is None:
                self._pending.append((self._scope, occurrence))
            else:
                scope, binding_kind = declare
                scope.declare(pattern["name"], binding_kind, occurrence)
        elif kind == "ObjectPattern":
            for prop in pattern["properties"]:
                if prop["type"] == "RestElement":
                    self._walk_pattern(prop["argument"], prop, "argument", declare)
                    continue
                if prop.get("computed"):
                    self.ancestry.append((pattern, "properties"))
                    self.visit_field(prop, "key")
                    self.ancestry.pop()
                shorthand = prop if prop.get("shorthand") else None
                self._walk_pattern(prop["value"], prop, "value", declare, shorthand)
        elif kind == "ArrayPattern":
            for element in pattern["elements"]:
                self._walk_pattern(element, pattern, "elements", declare)
        elif kind == "AssignmentPattern":
            self._walk_pattern(pattern["left"], pattern, "left", declare, holder)
            self.visit_field(pattern, "right")
        elif kind == "RestElement":
            self._walk_pattern(pattern["argument"], pattern, "argument", declare)
        else:
            self.ancestry.append((parent, field_name))
            self.visit(pattern)
            self.ancestry.pop()

    def _reference(
        self, node: Node, parent: Node, field_name: str, holder: Node | None
    ) -> None:
        self._pending.append(
            (self._scope, Occurrence(node, parent, field_name, holder=holder))
        )

    def _enter(self, kind: ScopeKind, node: Node) -> Scope:
        scope = Scope(kind=kind, node=node, parent=self._scope)
        self.owned[id(node)] = scope
        self._scope = scope
        return scope

    def _leave(self, scope: Scope) -> None:
        assert scope.parent is not None
        self._scope = scope.parent


def crawl_scopes(program: Node) -> ScopeTree:
    """Build the scope tree of an ESTree program.

    Args:
        program: ESTree ``Program`` node.

    Returns:
        Scope tree with resolved bindings and free references.
    """
    tree = _ScopeCrawler(program).build()
    logger.debug(
        "Crawled program scope (bindings=%s free=%s)",
        len(tree.root.bindings),
        len(tree.free_references),
    )
    return tree


class ScopedVisitor(NodeVisitor):
    """Visitor exposing the innermost crawled scope as ``self.scope``."""

    def __init__(self, scopes: ScopeTree) -> None:
        super().__init__()
        self._scopes = scopes
        self.scope = scopes.root

    def visit(self, node: Node) -> Node | None:
        owned = self._scopes.scope_owned_by(node)
        if owned is None or owned is self.scope:
            return super().visit(node)
        previous = self.scope
        self.scope = owned
        result = super().visit(node)
        self.scope = previous
        return result


class ScopedTransformer(ScopedVisitor, NodeTransformer):
    """Transformer exposing the innermost crawled scope as ``self.scope``."""
