# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for module scope hoisting."""

from hoisting.analyzer import analyze_wrap
from hoisting.envelope import build_envelope
from hoisting.hoister import hoist_asset
from hoisting.manifest import ManifestError, dump_asset, load_asset
from hoisting.model import (
    Asset,
    HoistContext,
    HoistError,
    HoistResult,
    SubstitutionSummary,
    WrapDecision,
)
from hoisting.renamer import rename_top_level
from hoisting.scope import ScopeTree, crawl_scopes
from hoisting.substitution import substitute_commonjs

__all__ = [
    "Asset",
    "HoistContext",
    "HoistError",
    "HoistResult",
    "ManifestError",
    "ScopeTree",
    "SubstitutionSummary",
    "WrapDecision",
    "analyze_wrap",
    "build_envelope",
    "crawl_scopes",
    "dump_asset",
    "hoist_asset",
    "load_asset",
    "rename_top_level",
    "substitute_commonjs",
]
