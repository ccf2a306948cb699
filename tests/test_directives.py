"""Tests for directive evaluation (use-for, use-if, slot, bound attributes)."""

from __future__ import annotations

import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tessera import DirectiveSyntaxError, markup
from tessera.directives import DirectiveEvaluator, parse_repeat
from tessera.utils.constants import BOUND_JSON_ATTR

from .strategies import plain_text


def evaluate(source: str, data: dict, import_tags: tuple[str, ...] = ()) -> str:
    soup = markup.parse(source)
    DirectiveEvaluator(import_tags).evaluate(soup, data)
    return markup.serialize(soup)


class TestRepeat:
    """use-for clones an element once per item."""

    def test_items_in_order(self) -> None:
        result = evaluate(
            '<ul><li use-for="item in items"><slot name="item"></slot></li></ul>',
            {"items": ["a", "b", "c"]},
        )
        assert result == "<ul><li>a</li><li>b</li><li>c</li></ul>"

    def test_item_fields(self) -> None:
        result = evaluate(
            '<a use-for="link in links" :href="link.url"><slot name="link.label"></slot></a>',
            {"links": [{"url": "/a", "label": "A"}, {"url": "/b", "label": "B"}]},
        )
        assert result == '<a href="/a">A</a><a href="/b">B</a>'

    def test_empty_collection_removes_element(self) -> None:
        assert evaluate('<p>x<i use-for="n in nums">n</i></p>', {"nums": []}) == "<p>x</p>"

    @pytest.mark.parametrize("value", [None, "abc", {"a": 1}, 5])
    def test_non_sequence_is_empty(self, value) -> None:
        assert evaluate('<i use-for="n in value">n</i>', {"value": value}) == ""

    def test_undefined_collection_is_empty(self) -> None:
        assert evaluate('<i use-for="n in missing">n</i>', {}) == ""

    def test_item_shadows_outer_data_only_inside_clone(self) -> None:
        result = evaluate(
            '<b use-for="name in names"><slot name="name"></slot></b><slot name="name"></slot>',
            {"names": ["x", "y"], "name": "outer"},
        )
        assert result == "<b>x</b><b>y</b>outer"

    def test_nested_repeats(self) -> None:
        result = evaluate(
            '<tr use-for="row in rows"><td use-for="cell in row"><slot name="cell"></slot></td></tr>',
            {"rows": [[1, 2], [3]]},
        )
        assert result == "<tr><td>1</td><td>2</td></tr><tr><td>3</td></tr>"

    def test_repeat_with_condition_per_item(self) -> None:
        result = evaluate(
            '<li use-for="t in todos" use-if="t.open"><slot name="t.title"></slot></li>',
            {"todos": [{"title": "a", "open": True}, {"title": "b", "open": False}]},
        )
        assert result == "<li>a</li>"

    def test_malformed_expression(self) -> None:
        with pytest.raises(DirectiveSyntaxError, match="expected 'item in collection'"):
            evaluate('<li use-for="items">x</li>', {"items": [1]})

    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("item in items", ("item", "items")),
            ("  row   in  table.rows ", ("row", "table.rows")),
            ("$x in xs", ("$x", "xs")),
        ],
    )
    def test_parse_repeat(self, expression: str, expected: tuple[str, str]) -> None:
        assert parse_repeat(expression) == expected

    @given(items=st.lists(plain_text, max_size=10))
    @settings(max_examples=100)
    def test_one_clone_per_item(self, items: list[str]) -> None:
        result = evaluate('<ul><li use-for="i in items"><slot name="i"></slot></li></ul>', {"items": items})
        assert result == "<ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>"


class TestConditional:
    """use-if keeps or removes an element."""

    def test_true_drops_attribute_only(self) -> None:
        assert evaluate('<p use-if="show" class="x">hi</p>', {"show": True}) == '<p class="x">hi</p>'

    def test_false_removes_subtree(self) -> None:
        assert evaluate('<div><p use-if="show">hi</p></div>', {"show": False}) == "<div></div>"

    def test_negation(self) -> None:
        assert evaluate('<p use-if="!hidden">visible</p>', {"hidden": True}) == ""
        assert evaluate('<p use-if="!hidden">visible</p>', {}) == "<p>visible</p>"

    @pytest.mark.parametrize("value", ["", 0, None, False, float("nan")])
    def test_falsy_values(self, value) -> None:
        assert evaluate('<p use-if="v">x</p>', {"v": value}) == ""

    @pytest.mark.parametrize("value", [[], {}, "0", -1])
    def test_truthy_values(self, value) -> None:
        assert evaluate('<p use-if="v">x</p>', {"v": value}) == "<p>x</p>"

    def test_removed_subtree_directives_not_evaluated(self) -> None:
        # a malformed use-for inside a removed element never raises
        assert evaluate('<div use-if="no"><i use-for="broken">x</i></div>', {}) == ""


class TestDataBoundSlot:
    """<slot name="path"> is replaced by the value when present."""

    def test_value_replaces_slot(self) -> None:
        assert evaluate('<h1><slot name="title">Default</slot></h1>', {"title": "Hi"}) == "<h1>Hi</h1>"

    def test_missing_value_leaves_slot(self) -> None:
        result = evaluate('<h1><slot name="title">Default</slot></h1>', {})
        assert result == '<h1><slot name="title">Default</slot></h1>'

    def test_none_is_absent(self) -> None:
        result = evaluate('<h1><slot name="title">Default</slot></h1>', {"title": None})
        assert result == '<h1><slot name="title">Default</slot></h1>'

    @pytest.mark.parametrize(("value", "text"), [("", ""), (0, "0"), (False, "false")])
    def test_falsy_but_present_values_fill_slot(self, value, text) -> None:
        assert evaluate('<b><slot name="v">fallback</slot></b>', {"v": value}) == f"<b>{text}</b>"

    def test_value_is_escaped_text(self) -> None:
        result = evaluate('<p><slot name="v"></slot></p>', {"v": "<script>x</script>"})
        assert result == "<p>&lt;script&gt;x&lt;/script&gt;</p>"

    def test_unnamed_slot_untouched(self) -> None:
        assert evaluate("<div><slot></slot></div>", {"": "x"}) == "<div><slot></slot></div>"


class TestBoundAttributes:
    """:name="path" computes an attribute."""

    def test_text_value(self) -> None:
        assert evaluate('<a :href="url">x</a>', {"url": "/home"}) == '<a href="/home">x</a>'

    def test_overrides_static_attribute(self) -> None:
        assert evaluate('<a href="/old" :href="url">x</a>', {"url": "/new"}) == '<a href="/new">x</a>'

    def test_falsy_removes_attribute(self) -> None:
        assert evaluate('<input disabled :disabled="locked">', {"locked": False}) == "<input>"

    def test_missing_value_removes_attribute(self) -> None:
        assert evaluate('<a :title="tip">x</a>', {}) == "<a>x</a>"

    def test_negated_value(self) -> None:
        assert evaluate('<input :hidden="!visible">', {"visible": False}) == '<input hidden="true">'

    def test_structured_value_on_plain_element_is_json(self) -> None:
        result = evaluate("<div :data-items=\"items\"></div>", {"items": [1, 2]})
        assert result == "<div data-items=\"[1, 2]\"></div>"

    def test_import_placeholder_gets_json_and_marker(self) -> None:
        soup = markup.parse('<x-card :user="user" :count="n" title="raw"></x-card>')
        DirectiveEvaluator(["x-card"]).evaluate(soup, {"user": {"name": "Ada"}, "n": 3})
        card = soup.find("x-card")
        assert json.loads(card["user"]) == {"name": "Ada"}
        assert card["count"] == "3"
        assert card["title"] == "raw"
        assert card[BOUND_JSON_ATTR].split() == ["user", "count"]

    def test_bound_attributes_evaluated_after_children(self) -> None:
        result = evaluate(
            '<ul :data-n="items.length"><li use-for="i in items">x</li></ul>', {"items": [1, 2]}
        )
        assert result == '<ul data-n="2"><li>x</li><li>x</li></ul>'

    def test_empty_bind_name_is_dropped(self) -> None:
        assert evaluate('<p :="x">y</p>', {"x": 1}) == "<p>y</p>"


class TestIdentity:
    """Templates without directives pass through unchanged."""

    @pytest.mark.parametrize(
        "source",
        [
            "<p>plain</p>",
            '<div class="a" data-x="1"><span>t</span></div>',
            "<!-- c --><br><slot></slot>",
        ],
    )
    def test_passthrough(self, source: str) -> None:
        assert evaluate(source, {"anything": 1}) == source
