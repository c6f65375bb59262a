# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for end-to-end asset hoisting."""

import pytest

from hoisting import Asset, HoistError, crawl_scopes, hoist_asset
from hoisting.estree import identifier, object_expression

from js_trees import (
    arrow,
    assign,
    call,
    declare,
    dotted,
    function_decl,
    function_expr,
    identifier_names,
    if_stmt,
    lit,
    ret,
    script,
    stmt,
    this,
)


def test_hoist_601_module_exports_function_is_flattened() -> None:
    function = function_expr([ret(lit(1))])
    asset = Asset(
        id=3, program=script(stmt(assign(dotted("module.exports"), function)))
    )

    result = hoist_asset(asset)

    body = asset.program["body"]
    assert len(body) == 2
    assert body[0]["declarations"][0]["id"] == identifier("$3$exports")
    assert body[0]["declarations"][0]["init"] == object_expression([])
    assignment = body[1]["expression"]
    assert assignment["left"] == identifier("$3$exports")
    assert assignment["right"] is function
    assert result.decision.should_wrap is False
    assert result.exports_name == "$3$exports"
    assert asset.is_ast_dirty is True


def test_hoist_602_eval_module_is_wrapped() -> None:
    original = stmt(call("eval", lit("x+1")))
    asset = Asset(id=3, program=script(original))

    result = hoist_asset(asset)

    body = asset.program["body"]
    assert len(body) == 1
    declarator = body[0]["declarations"][0]
    assert declarator["id"] == identifier("$3$exports")
    closure = declarator["init"]["callee"]["object"]
    assert closure["body"]["body"][2] is original
    assert result.decision.should_wrap is True
    assert result.decision.reason == "eval"
    assert result.bindings_renamed == 0
    assert asset.is_ast_dirty is True


def test_hoist_603_resolved_require_becomes_placeholder() -> None:
    asset = Asset(
        id=3,
        program=script(stmt(call("require", lit("./a")))),
        dependencies=frozenset({"./a"}),
    )

    result = hoist_asset(asset)

    assert asset.program["body"][1]["expression"] == identifier("$3$require$_a")
    assert result.substitution.require_placeholders == {"$3$require$_a": "./a"}


def test_hoist_604_flattened_bindings_are_prefixed_and_unique() -> None:
    asset = Asset(
        id=7,
        program=script(
            declare("var", "helper", function_expr([ret(this())])),
            function_decl("run", ["input"], [ret(call("helper", identifier("input")))]),
            stmt(assign(dotted("exports.run"), identifier("run"))),
        ),
    )

    result = hoist_asset(asset)

    top_level = set(crawl_scopes(asset.program).root.bindings)
    assert top_level == {"$7$exports", "$7$var$helper", "$7$var$run"}
    names = identifier_names(asset.program)
    assert "helper" not in names
    assert "run" in names
    assert "input" in names
    assert result.bindings_renamed == 2


def test_hoist_605_top_level_return_module_is_wrapped() -> None:
    guard = if_stmt(identifier("loaded"), [ret()])
    asset = Asset(id=4, program=script(guard, stmt(assign(dotted("module.exports"), lit(1)))))

    result = hoist_asset(asset)

    assert result.decision.reason == "top_level_return"
    closure = asset.program["body"][0]["declarations"][0]["init"]["callee"]["object"]
    moved = closure["body"]["body"]
    assert moved[2] is guard
    assert moved[3]["expression"]["left"] == dotted("module.exports")


def test_hoist_606_two_assets_never_share_top_level_names() -> None:
    first = Asset(id=1, program=script(declare("var", "shared", lit(1))))
    second = Asset(id=2, program=script(declare("var", "shared", lit(2))))

    hoist_asset(first)
    hoist_asset(second)

    first_names = set(crawl_scopes(first.program).root.bindings)
    second_names = set(crawl_scopes(second.program).root.bindings)
    assert first_names.isdisjoint(second_names)


def test_hoist_607_non_program_tree_is_rejected() -> None:
    asset = Asset(id=1, program={"type": "ExpressionStatement", "expression": lit(1)})

    with pytest.raises(HoistError):
        hoist_asset(asset)

    assert asset.is_ast_dirty is False


def test_hoist_608_this_inside_top_level_arrow_is_kept() -> None:
    fn = arrow(this())
    asset = Asset(id=3, program=script(declare("var", "f", fn)))

    hoist_asset(asset)

    declaration = asset.program["body"][1]["declarations"][0]
    assert declaration["id"] == identifier("$3$var$f")
    assert declaration["init"] is fn
    assert fn["body"] == this()
