# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Decide whether a module can be flattened into the bundle scope."""

import logging

from hoisting.estree import Node, is_identifier
from hoisting.model import WrapDecision, WrapReason
from hoisting.scope import ScopedVisitor, ScopeTree

logger = logging.getLogger(__name__)


class _WrapDetector(ScopedVisitor):
    """Stop at the first construct that requires a private closure."""

    def __init__(self, scopes: ScopeTree) -> None:
        super().__init__(scopes)
        self.reason: WrapReason | None = None

    def visit(self, node: Node) -> Node | None:
        if self.reason is not None:
            return node
        return super().visit(node)

    def visit_CallExpression(self, node: Node) -> Node:
        """Flag a direct call to the global ``eval``.

        Code handed to ``eval`` can name module locals, so they must survive
        unrenamed.

        Args:
            node: Call node.

        Returns:
            Unchanged node.
        """
        if is_identifier(node["callee"], "eval") and not self.scope.has_binding("eval"):
            self.reason = "eval"
            return node
        self.generic_visit(node)
        return node

    def visit_ReturnStatement(self, node: Node) -> Node:
        """Flag a ``return`` whose nearest function boundary is the program.

        Args:
            node: Return node.

        Returns:
            Unchanged node.
        """
        if self.scope.function_parent().kind == "program":
            self.reason = "top_level_return"
            return node
        self.generic_visit(node)
        return node


def analyze_wrap(program: Node, scopes: ScopeTree) -> WrapDecision:
    """Compute the wrap verdict of one module.

    Args:
        program: ESTree ``Program`` node.
        scopes: Scope tree crawled from ``program``.

    Returns:
        Wrap verdict with the construct that forced it.
    """
    detector = _WrapDetector(scopes)
    detector.visit(program)
    if detector.reason is None:
        return WrapDecision(should_wrap=False)
    logger.debug("Module requires wrapping (reason=%s)", detector.reason)
    return WrapDecision(should_wrap=True, reason=detector.reason)
