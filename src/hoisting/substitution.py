# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Rewrite CommonJS constructs into references valid at bundle scope."""

import logging

from hoisting.estree import (
    Node,
    identifier,
    is_identifier,
    is_reference,
    is_string_literal,
    literal,
    matches_pattern,
    member_expression,
)
from hoisting.model import HoistContext, SubstitutionSummary
from hoisting.naming import exports_name, require_name, require_resolve_name
from hoisting.scope import ScopedTransformer, ScopeTree

logger = logging.getLogger(__name__)


class _CommonJSSubstituter(ScopedTransformer):
    """Apply every CommonJS rewrite rule in one traversal."""

    def __init__(self, context: HoistContext, scopes: ScopeTree) -> None:
        super().__init__(scopes)
        self._asset = context.asset
        self._wrapped = context.should_wrap
        self._exports_name = exports_name(context.asset.id)
        self.substitutions: int = 0
        self.require_placeholders: dict[str, str] = {}
        self.require_resolve_placeholders: dict[str, str] = {}
        self.unresolved_requires: list[str] = []

    def visit_MemberExpression(self, node: Node) -> Node:
        """Rewrite ``module.*`` accesses when ``module`` is the free global.

        Args:
            node: Member expression node.

        Returns:
            Replacement node, or the visited original.
        """
        replacement = self._module_member_replacement(node)
        if replacement is not None:
            self.substitutions += 1
            return replacement
        self.generic_visit(node)
        return node

    def visit_Identifier(self, node: Node) -> Node:
        if node["name"] != "exports" or self._wrapped:
            return node
        if not is_reference(self.ancestry) or self.scope.has_binding("exports"):
            return node
        parent, _ = self.ancestry[-1]
        if parent["type"] == "Property" and parent.get("shorthand"):
            parent["shorthand"] = False
        self.substitutions += 1
        return identifier(self._exports_name)

    def visit_ThisExpression(self, node: Node) -> Node:
        if self._wrapped or self.scope.closure_parent().kind != "program":
            return node
        self.substitutions += 1
        return identifier(self._exports_name)

    def visit_AssignmentExpression(self, node: Node) -> Node:
        left = node["left"]
        if (
            is_identifier(left, "exports")
            and not self._wrapped
            and not self.scope.has_binding("exports")
        ):
            node["left"] = identifier(self._exports_name)
            self.substitutions += 1
        self.generic_visit(node)
        return node

    def visit_UnaryExpression(self, node: Node) -> Node:
        if (
            node.get("operator") == "typeof"
            and is_identifier(node["argument"], "module")
            and not self._wrapped
            and not self.scope.has_binding("module")
        ):
            self.substitutions += 1
            return literal("object")
        self.generic_visit(node)
        return node

    def visit_CallExpression(self, node: Node) -> Node:
        """Replace resolvable ``require`` and ``require.resolve`` calls.

        Both rules apply inside wrapped modules too, since the closure has no
        ``require`` binding of its own.

        Args:
            node: Call node.

        Returns:
            Placeholder identifier, or the visited original call.
        """
        callee = node["callee"]
        args = node.get("arguments", [])
        if (
            len(args) != 1
            or not is_string_literal(args[0])
            or self.scope.has_binding("require")
        ):
            self.generic_visit(node)
            return node

        specifier = args[0]["value"]
        if is_identifier(callee, "require"):
            if specifier not in self._asset.dependencies:
                logger.debug(
                    "Leaving unresolved require in place (asset_id=%s specifier=%s)",
                    self._asset.id,
                    specifier,
                )
                self.unresolved_requires.append(specifier)
                self.generic_visit(node)
                return node
            name = require_name(self._asset.id, specifier)
            self.require_placeholders[name] = specifier
            self.substitutions += 1
            return identifier(name)

        if matches_pattern(callee, "require.resolve"):
            name = require_resolve_name(self._asset.id, specifier)
            self.require_resolve_placeholders[name] = specifier
            self.substitutions += 1
            return identifier(name)

        self.generic_visit(node)
        return node

    def _module_member_replacement(self, node: Node) -> Node | None:
        if self._wrapped or self.scope.has_binding("module"):
            return None
        if matches_pattern(node, "module.exports"):
            return identifier(self._exports_name)
        if matches_pattern(node, "module.id"):
            return literal(self._asset.id)
        if matches_pattern(node, "module.hot"):
            return literal(None)
        if matches_pattern(node, "module.bundle.modules"):
            return member_expression(identifier("require"), identifier("modules"))
        return None


def substitute_commonjs(context: HoistContext, scopes: ScopeTree) -> SubstitutionSummary:
    """Rewrite CommonJS constructs of one module in place.

    Args:
        context: Per-module hoisting context holding the wrap verdict.
        scopes: Scope tree crawled from the asset's current program.

    Returns:
        Substitution counters and emitted placeholders.
    """
    substituter = _CommonJSSubstituter(context, scopes)
    substituter.visit(context.asset.program)
    return SubstitutionSummary(
        substitutions=substituter.substitutions,
        require_placeholders=dict(substituter.require_placeholders),
        require_resolve_placeholders=dict(substituter.require_resolve_placeholders),
        unresolved_requires=tuple(substituter.unresolved_requires),
    )
