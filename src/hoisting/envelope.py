# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Isolate a module body inside an immediately invoked closure."""

import logging

from hoisting.estree import (
    Node,
    call_expression,
    function_expression,
    identifier,
    member_expression,
    object_expression,
    property_node,
    return_statement,
    split_directives,
    this_expression,
    variable_declaration,
)
from hoisting.model import HoistContext
from hoisting.naming import exports_name

logger = logging.getLogger(__name__)


def build_envelope(context: HoistContext) -> Node:
    """Replace the program body with one wrapped exports declaration.

    The result reads::

        var $ID$exports = (function () {
          var exports = this;
          var module = {exports: this};
          BODY;
          return module.exports;
        }).call({});

    Original statements move into the closure untouched, so ``module``,
    ``exports`` and ``this`` keep their CommonJS meaning there.

    Args:
        context: Per-module hoisting context of a module that must be wrapped.

    Returns:
        The envelope declaration now forming the whole program body.
    """
    asset = context.asset
    program = asset.program
    directives, statements = split_directives(program["body"])
    closure = function_expression(
        body=[
            *directives,
            variable_declaration("var", "exports", this_expression()),
            variable_declaration(
                "var",
                "module",
                object_expression(
                    [property_node(identifier("exports"), this_expression())]
                ),
            ),
            *statements,
            return_statement(
                member_expression(identifier("module"), identifier("exports"))
            ),
        ]
    )
    invocation = call_expression(
        member_expression(closure, identifier("call")), [object_expression([])]
    )
    envelope = variable_declaration("var", exports_name(asset.id), invocation)
    program["body"] = [envelope]
    logger.debug(
        "Wrapped module body (asset_id=%s statements=%s)", asset.id, len(statements)
    )
    return envelope
