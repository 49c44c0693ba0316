"""Tests for the component capability map and element construction."""

from types import MappingProxyType

import pytest

from safemdx.capabilities import NATIVE_TAGS, build_capability_map, resolve_capability
from safemdx.elements import FRAGMENT, DeferredComponent, Element, create_element, normalize_children


class TestCapabilityMap:
    def test_native_tags_map_to_themselves(self) -> None:
        caps = build_capability_map()
        assert all(caps[tag] == tag for tag in NATIVE_TAGS)
        assert "h5" not in caps

    def test_caller_components_override(self) -> None:
        sentinel = object()
        caps = build_capability_map({"a": sentinel, "Card": "card"})
        assert caps["a"] is sentinel
        assert caps["Card"] == "card"
        assert caps["p"] == "p"

    def test_map_is_read_only(self) -> None:
        caps = build_capability_map({"Card": "card"})
        assert isinstance(caps, MappingProxyType)
        with pytest.raises(TypeError):
            caps["x"] = "y"  # type: ignore[index]

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Card", "card"),
            ("Docs.Note", "aside"),
            ("Docs. Note", "aside"),
            ("Docs..Note", "aside"),
            ("Docs.Missing", None),
            ("Card.Inner", None),
            ("Docs.Note.Deeper", None),
            ("", None),
            (".", None),
            ("Unknown", None),
        ],
    )
    def test_resolve(self, name: str, expected: str | None) -> None:
        caps = build_capability_map({"Card": "card", "Docs": {"Note": "aside"}})
        assert resolve_capability(caps, name) == expected

    def test_resolve_returns_nested_mapping(self) -> None:
        docs = {"Note": "aside"}
        caps = build_capability_map({"Docs": docs})
        assert resolve_capability(caps, "Docs") is docs


class TestElements:
    def test_create_element(self) -> None:
        element = create_element("p", {"id": "x"}, "a", "b")
        assert element == Element(type="p", props={"id": "x"}, children=("a", "b"))
        assert element.iter_children() == ("a", "b")

    def test_single_and_missing_children(self) -> None:
        assert create_element("p", None, "a").children == "a"
        assert create_element("hr").children is None
        assert create_element("hr").iter_children() == ()

    def test_props_are_read_only_copies(self) -> None:
        props = {"id": "x"}
        element = create_element("p", props)
        props["id"] = "y"
        assert element.props == {"id": "x"}
        with pytest.raises(TypeError):
            element.props["id"] = "z"  # type: ignore[index]

    def test_normalize_children(self) -> None:
        assert normalize_children([]) is None
        assert normalize_children(["a"]) == "a"
        assert normalize_children(["a", "b"]) == ("a", "b")

    def test_sentinels(self) -> None:
        assert repr(FRAGMENT) == "FRAGMENT"
        assert DeferredComponent("https://esm.sh/x") == DeferredComponent("https://esm.sh/x", "default")
