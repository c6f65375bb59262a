# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for module scope hoisting."""

from dataclasses import dataclass, field
from typing import Literal

from hoisting.estree import Node

WrapReason = Literal["eval", "top_level_return"]


class HoistError(RuntimeError):
    """Represent an asset whose tree cannot be hoisted."""


@dataclass
class Asset:
    """Represent one bundler-tracked CommonJS module.

    Attributes:
        id: Bundle-unique integer identity.
        program: ESTree ``Program`` node, mutated in place while hoisting.
        dependencies: Specifiers the resolver confirmed as resolvable.
        is_ast_dirty: Set once any rewrite touched ``program``.
    """

    id: int
    program: Node
    dependencies: frozenset[str] = frozenset()
    is_ast_dirty: bool = False


@dataclass(frozen=True)
class WrapDecision:
    """Store the verdict on whether a module must stay isolated.

    Attributes:
        should_wrap: True when the module needs a private closure.
        reason: First construct that forced wrapping, if any.
    """

    should_wrap: bool
    reason: WrapReason | None = None


@dataclass(frozen=True)
class HoistContext:
    """Carry the per-module verdict through every rewrite step."""

    asset: Asset
    decision: WrapDecision

    @property
    def should_wrap(self) -> bool:
        return self.decision.should_wrap


@dataclass(frozen=True)
class SubstitutionSummary:
    """Represent the CommonJS substitution pass counters and placeholders.

    Attributes:
        substitutions: Count of constructs rewritten.
        require_placeholders: Placeholder identifier to original specifier.
        require_resolve_placeholders: Placeholder identifier to specifier for
            ``require.resolve`` calls.
        unresolved_requires: Specifiers left as live ``require`` calls.
    """

    substitutions: int
    require_placeholders: dict[str, str] = field(default_factory=dict)
    require_resolve_placeholders: dict[str, str] = field(default_factory=dict)
    unresolved_requires: tuple[str, ...] = ()


@dataclass(frozen=True)
class HoistResult:
    """Represent the outcome of hoisting one asset."""

    asset_id: int
    exports_name: str
    decision: WrapDecision
    substitution: SubstitutionSummary
    bindings_renamed: int
