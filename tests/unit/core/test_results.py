"""Unit tests for callback results and their validation."""

from unittest.mock import MagicMock

import pytest

from connected_components.core.exceptions import CallbackContractError
from connected_components.core.results import Reply, expect_reply, noreply, ok


@pytest.fixture
def socket():
    return MagicMock()


class TestExpectReply:

    def test_ok_accepted(self, socket):
        result = ok(socket)
        assert expect_reply(result, Reply.OK, "update") is result

    def test_noreply_accepted(self, socket):
        result = noreply(socket)
        assert expect_reply(result, Reply.NOREPLY, "handle_info") is result

    def test_setup_only_where_allowed(self, socket):
        result = ok(socket, lambda: None)
        assert expect_reply(result, Reply.OK, "on_mount", allow_setup=True) is result
        with pytest.raises(CallbackContractError):
            expect_reply(result, Reply.OK, "handle_update")

    def test_wrong_reply_raises(self, socket):
        with pytest.raises(CallbackContractError) as exc_info:
            expect_reply(ok(socket), Reply.NOREPLY, "Tab.handle_info")

        error = exc_info.value
        assert error.callback == "Tab.handle_info"
        assert "noreply(socket)" in str(error)

    @pytest.mark.parametrize("value", [None, "ok", ("ok", "socket"), {}])
    def test_arbitrary_values_raise(self, value):
        with pytest.raises(CallbackContractError) as exc_info:
            expect_reply(value, Reply.OK, "Tab.on_mount", allow_setup=True)
        assert exc_info.value.received == value

    def test_contract_error_is_a_type_error(self):
        with pytest.raises(TypeError):
            expect_reply(None, Reply.OK, "update")

    def test_ok_rejects_non_callable_setup(self, socket):
        with pytest.raises(TypeError):
            ok(socket, "not callable")
