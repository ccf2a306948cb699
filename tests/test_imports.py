"""Tests for import resolution: payloads, slot projection, recursion."""

from __future__ import annotations

import pytest

from tessera import LoadOptions, PayloadError, RenderResult, RenderSession, markup
from tessera.assets import HeadAssets
from tessera.imports import ImportResolver, collect_payload, project_slots
from tessera.utils.constants import BOUND_JSON_ATTR


def project(child: str, caller: str) -> str:
    fragment = markup.parse(child)
    caller_soup = markup.parse(caller)
    project_slots(fragment, caller_soup.contents[0])
    return markup.serialize(fragment)


class TestCollectPayload:
    """Placeholder attributes become the child's custom data."""

    def test_raw_attributes_are_strings(self) -> None:
        element = markup.parse('<x-card title="Hi" count="3" open></x-card>').find("x-card")
        assert collect_payload(element) == {"title": "Hi", "count": "3", "open": ""}

    def test_marked_attributes_are_decoded(self) -> None:
        element = markup.parse(
            f"<x-card items='[1, 2]' flag=\"true\" {BOUND_JSON_ATTR}=\"items flag\"></x-card>"
        ).find("x-card")
        assert collect_payload(element) == {"items": [1, 2], "flag": True}

    def test_invalid_json_is_fatal(self) -> None:
        element = markup.parse(f'<x-card items="[1," {BOUND_JSON_ATTR}="items"></x-card>').find("x-card")
        with pytest.raises(PayloadError, match="Attribute 'items' of <x-card> is not valid JSON"):
            collect_payload(element, uri="page")


class TestProjectSlots:
    """Caller children fill the child's slots."""

    def test_default_slot_receives_all_children(self) -> None:
        assert project("<button><slot></slot></button>", "<x>Click <b>me</b></x>") == (
            "<button>Click <b>me</b></button>"
        )

    def test_children_alias(self) -> None:
        assert project('<div><slot name="children"></slot></div>', "<x><p>a</p></x>") == "<div><p>a</p></div>"

    def test_named_slot(self) -> None:
        child = '<article><h2><slot name="title">Untitled</slot></h2><div><slot></slot></div></article>'
        caller = '<x><span slot="title">Hello</span><p>Body</p></x>'
        assert project(child, caller) == (
            '<article><h2><span slot="title">Hello</span></h2><div><p>Body</p></div></article>'
        )

    def test_named_slot_before_default_slot_order_independent(self) -> None:
        child = '<div><slot></slot><footer><slot name="foot"></slot></footer></div>'
        caller = '<x><i slot="foot">f</i><b>main</b></x>'
        assert project(child, caller) == '<div><b>main</b><footer><i slot="foot">f</i></footer></div>'

    def test_fallback_when_no_children(self) -> None:
        child = '<div><slot>Nothing here</slot><slot name="title">Untitled</slot></div>'
        assert project(child, "<x></x>") == "<div>Nothing hereUntitled</div>"

    def test_whitespace_only_children_use_fallback(self) -> None:
        assert project("<div><slot>empty</slot></div>", "<x>\n   </x>") == "<div>empty</div>"

    def test_unmatched_named_child_goes_to_default_slot(self) -> None:
        assert project("<div><slot></slot></div>", '<x><i slot="nope">a</i></x>') == (
            '<div><i slot="nope">a</i></div>'
        )

    def test_only_first_default_slot_is_filled(self) -> None:
        assert project("<slot>one</slot>|<slot>two</slot>", "<x>A</x>") == "A|two"

    def test_replaced_fallback_slots_are_discarded(self) -> None:
        child = '<div><slot><slot name="inner">deep</slot></slot></div>'
        assert project(child, "<x>A</x>") == "<div>A</div>"

    def test_child_without_slots_drops_children(self) -> None:
        assert project("<hr>", "<x>ignored</x>") == "<hr>"


class FakeRenderer:
    """Render callback returning canned fragments and recording calls."""

    def __init__(self, fragments: dict[str, str], head: dict[str, tuple[str, ...]] | None = None):
        self.fragments = fragments
        self.head = head or {}
        self.calls: list[tuple[str, dict, list[str]]] = []

    async def __call__(self, uri: str, data: dict, session: RenderSession) -> RenderResult:
        self.calls.append((uri, data, list(session.ancestry)))
        head = self.head.get(uri, ())
        session.lift(head)
        return RenderResult(self.fragments[uri], head)


def root_session(uri: str = "page") -> tuple[RenderSession, object]:
    soup = markup.parse("")
    head, _body = markup.ensure_document(soup)
    session = RenderSession.for_root(uri, LoadOptions())
    session.attach_document(HeadAssets(head))
    return session, soup


class TestImportResolver:
    """Walking a tree and splicing rendered children."""

    @pytest.mark.asyncio
    async def test_placeholder_replaced(self) -> None:
        renderer = FakeRenderer({"button": "<button><slot></slot></button>"})
        soup = markup.parse("<main><my-button>Click</my-button></main>")
        session, _ = root_session()
        await ImportResolver({"my-button": "button"}, renderer).resolve(soup, session)
        assert markup.serialize(soup) == "<main><button>Click</button></main>"
        assert renderer.calls == [("button", {}, ["page", "button"])]

    @pytest.mark.asyncio
    async def test_tag_match_is_case_insensitive(self) -> None:
        renderer = FakeRenderer({"button": "<button></button>"})
        soup = markup.parse("<My-Button></My-Button>")
        session, _ = root_session()
        await ImportResolver({"MY-BUTTON": "button"}, renderer).resolve(soup, session)
        assert markup.serialize(soup) == "<button></button>"

    @pytest.mark.asyncio
    async def test_siblings_resolved_in_document_order(self) -> None:
        renderer = FakeRenderer({"item": "<li></li>"})
        soup = markup.parse('<ul><x-item n="1"></x-item><x-item n="2"></x-item></ul>')
        session, _ = root_session()
        await ImportResolver({"x-item": "item"}, renderer).resolve(soup, session)
        assert [data for _, data, _ in renderer.calls] == [{"n": "1"}, {"n": "2"}]

    @pytest.mark.asyncio
    async def test_caller_children_resolved_first(self) -> None:
        renderer = FakeRenderer({"outer": "<section><slot></slot></section>", "inner": "<b>in</b>"})
        soup = markup.parse("<x-outer><x-inner></x-inner></x-outer>")
        session, _ = root_session()
        await ImportResolver({"x-outer": "outer", "x-inner": "inner"}, renderer).resolve(soup, session)
        assert [uri for uri, _, _ in renderer.calls] == ["inner", "outer"]
        assert markup.serialize(soup) == "<section><b>in</b></section>"

    @pytest.mark.asyncio
    async def test_spliced_content_not_rescanned(self) -> None:
        # The child's output contains the caller's own import tag; it must stay put.
        renderer = FakeRenderer({"echo": "<x-echo>literal</x-echo>"})
        soup = markup.parse("<x-echo></x-echo>")
        session, _ = root_session()
        await ImportResolver({"x-echo": "echo"}, renderer).resolve(soup, session)
        assert markup.serialize(soup) == "<x-echo>literal</x-echo>"
        assert len(renderer.calls) == 1

    @pytest.mark.asyncio
    async def test_no_imports_is_noop(self) -> None:
        renderer = FakeRenderer({})
        soup = markup.parse("<x-card></x-card>")
        session, _ = root_session()
        await ImportResolver({}, renderer).resolve(soup, session)
        assert markup.serialize(soup) == "<x-card></x-card>"
        assert renderer.calls == []

    @pytest.mark.asyncio
    async def test_head_recorded_on_parent_frame(self) -> None:
        renderer = FakeRenderer(
            {"card": "<div></div>"}, head={"card": ('<link rel="stylesheet" href="/c.css">',)}
        )
        soup = markup.parse("<x-card></x-card><x-card></x-card>")
        session, document = root_session()
        await ImportResolver({"x-card": "card"}, renderer).resolve(soup, session)
        assert markup.serialize(document.head) == '<head><link rel="stylesheet" href="/c.css"></head>'
        assert session.lifted == ['<link rel="stylesheet" href="/c.css">'] * 2
