# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Hoist one CommonJS asset into bundle scope."""

import logging

from hoisting.analyzer import analyze_wrap
from hoisting.envelope import build_envelope
from hoisting.estree import is_node
from hoisting.model import Asset, HoistContext, HoistError, HoistResult
from hoisting.naming import exports_name
from hoisting.renamer import rename_top_level
from hoisting.scope import crawl_scopes
from hoisting.substitution import substitute_commonjs

logger = logging.getLogger(__name__)


def hoist_asset(asset: Asset) -> HoistResult:
    """Analyze and rewrite one asset's tree for bundle concatenation.

    The wrap verdict is computed once, before any rewrite. Substitution runs
    for every module; renaming or wrapping then runs depending on the verdict.

    Args:
        asset: Asset whose ``program`` is rewritten in place.

    Returns:
        Verdict, counters, and placeholders emitted for the packager.

    Raises:
        HoistError: If the asset tree is not an ESTree ``Program``.
    """
    program = asset.program
    if not is_node(program) or program["type"] != "Program":
        raise HoistError(f"Asset {asset.id} tree is not an ESTree Program")
    if not isinstance(program.get("body"), list):
        raise HoistError(f"Asset {asset.id} program has no statement list")

    scopes = crawl_scopes(program)
    context = HoistContext(asset=asset, decision=analyze_wrap(program, scopes))
    substitution = substitute_commonjs(context, scopes)

    bindings_renamed = 0
    if context.should_wrap:
        build_envelope(context)
    else:
        bindings_renamed = rename_top_level(context)
    asset.is_ast_dirty = True

    logger.debug(
        "Hoisted asset (asset_id=%s wrapped=%s substitutions=%s renamed=%s)",
        asset.id,
        context.should_wrap,
        substitution.substitutions,
        bindings_renamed,
    )
    return HoistResult(
        asset_id=asset.id,
        exports_name=exports_name(asset.id),
        decision=context.decision,
        substitution=substitution,
        bindings_renamed=bindings_renamed,
    )
