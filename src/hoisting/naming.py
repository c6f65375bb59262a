# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Deterministic bundle-level names derived from asset identity."""

import hashlib
import logging
import re

logger = logging.getLogger(__name__)

_READABLE_SPECIFIER = re.compile(r"(?:\./)?[A-Za-z0-9]+")
_NON_ALNUM_RUN = re.compile(r"[^A-Za-z0-9]+")
_DIGEST_LENGTH = 8


def asset_prefix(asset_id: int) -> str:
    return f"${asset_id}"


def exports_name(asset_id: int) -> str:
    """Build the identifier standing in for an asset's ``module.exports``.

    Args:
        asset_id: Bundle-unique asset identity.

    Returns:
        Exports identifier such as ``$3$exports``.
    """
    return f"{asset_prefix(asset_id)}$exports"


def require_name(asset_id: int, specifier: str) -> str:
    """Build the placeholder for a resolved ``require(specifier)`` call.

    The packager later replaces it with the target asset's exports identifier.

    Args:
        asset_id: Identity of the requiring asset.
        specifier: Module specifier passed to ``require``.

    Returns:
        Placeholder identifier such as ``$3$require$_a``.
    """
    return f"{asset_prefix(asset_id)}$require${sanitize_specifier(specifier)}"


def require_resolve_name(asset_id: int, specifier: str) -> str:
    """Build the placeholder for a ``require.resolve(specifier)`` call.

    Args:
        asset_id: Identity of the requiring asset.
        specifier: Module specifier passed to ``require.resolve``.

    Returns:
        Placeholder identifier such as ``$3$require_resolve$_a``.
    """
    return f"{asset_prefix(asset_id)}$require_resolve${sanitize_specifier(specifier)}"


def variable_name(asset_id: int, name: str) -> str:
    """Build the flattened name for a top-level binding."""
    return f"{asset_prefix(asset_id)}$var${name}"


def sanitize_specifier(specifier: str) -> str:
    """Map a module specifier to a bare identifier fragment.

    Runs of characters outside ``[A-Za-z0-9]`` collapse to ``_``. Specifiers
    of the plain forms ``name`` and ``./name`` collapse without losing
    information; every other specifier gets a ``$`` and a short digest of the
    full text appended so distinct specifiers never share a fragment.

    Args:
        specifier: Arbitrary module specifier string.

    Returns:
        Identifier fragment, for example ``_a`` for ``./a``.
    """
    fragment = _NON_ALNUM_RUN.sub("_", specifier)
    if _READABLE_SPECIFIER.fullmatch(specifier):
        return fragment
    digest = hashlib.md5(specifier.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
    return f"{fragment}${digest}"
