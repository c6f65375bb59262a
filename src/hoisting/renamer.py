# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Make a flattened module's top-level bindings unique across the bundle."""

import logging

from hoisting.estree import object_expression, split_directives, variable_declaration
from hoisting.model import HoistContext
from hoisting.naming import exports_name, variable_name
from hoisting.scope import crawl_scopes

logger = logging.getLogger(__name__)


def rename_top_level(context: HoistContext) -> int:
    """Rename top-level bindings and inject the exports container.

    Bindings of nested scopes keep their names. The exports container goes
    first, right after any directive prologue.

    Args:
        context: Per-module hoisting context of a module that stays flat.

    Returns:
        Number of top-level bindings renamed.
    """
    asset = context.asset
    program = asset.program
    # Substitution may have replaced identifiers, so bindings are re-crawled.
    scopes = crawl_scopes(program)
    root = scopes.root
    bindings = list(root.bindings.values())
    for binding in bindings:
        name = binding.name
        occurrences = root.rename_binding(binding, variable_name(asset.id, name))
        logger.debug(
            "Renamed top-level binding (asset_id=%s name=%s occurrences=%s)",
            asset.id,
            name,
            occurrences,
        )

    directives, statements = split_directives(program["body"])
    container = variable_declaration("var", exports_name(asset.id), object_expression([]))
    program["body"] = [*directives, container, *statements]
    return len(bindings)
