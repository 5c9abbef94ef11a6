"""Unit tests for identity tokens and descriptors."""

import pytest

from connected_components.core.identity import (
    ComponentDescriptor,
    IdentityToken,
    TokenAllocator,
    parse_token,
)


class Tab:
    pass


class TestTokenAllocator:

    def test_tokens_are_unique_and_increasing(self):
        allocator = TokenAllocator("demo")
        tokens = [allocator.next_token() for _ in range(5)]

        assert len(set(tokens)) == 5
        assert tokens == sorted(tokens)
        assert [token.cid for token in tokens] == [1, 2, 3, 4, 5]

    def test_tokens_carry_coordinator_id(self):
        allocator = TokenAllocator("demo")
        assert allocator.next_token().coordinator_id == "demo"
        assert allocator.coordinator_id == "demo"

    def test_allocators_are_independent(self):
        first = TokenAllocator("a").next_token()
        second = TokenAllocator("b").next_token()
        assert first != second
        assert first.cid == second.cid == 1

    @pytest.mark.parametrize("bad_id", ["", "a:b"])
    def test_invalid_coordinator_id(self, bad_id):
        with pytest.raises(ValueError):
            TokenAllocator(bad_id)


class TestIdentityToken:

    def test_str_format(self):
        assert str(IdentityToken("demo", 3)) == "demo:3"

    def test_hashable(self):
        lookup = {IdentityToken("demo", 1): "tab"}
        assert lookup[IdentityToken("demo", 1)] == "tab"

    def test_parse_round_trip(self):
        token = IdentityToken("coord-1a2b", 42)
        assert parse_token(str(token)) == token

    @pytest.mark.parametrize("text", ["demo", "demo:", ":3", "demo:x", ""])
    def test_parse_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            parse_token(text)


class TestComponentDescriptor:

    def test_equality_by_type_and_id(self):
        assert ComponentDescriptor(Tab, "tab_a") == ComponentDescriptor(Tab, "tab_a")
        assert ComponentDescriptor(Tab, "tab_a") != ComponentDescriptor(Tab, "tab_b")

    def test_str(self):
        assert str(ComponentDescriptor(Tab, "tab_a")) == "Tab#tab_a"
