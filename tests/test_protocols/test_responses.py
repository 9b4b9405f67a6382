"""Tests for POP3 response parsers."""

import pytest

from pop3wire.protocols.models import (
    Greeting,
    QuitResponse,
    RetrResponse,
    StatResponse,
    StatusIndicator,
    UniqueIdListing,
)
from pop3wire.protocols.responses import (
    parse_apop_response,
    parse_dele_response,
    parse_greeting,
    parse_list_response,
    parse_noop_response,
    parse_pass_response,
    parse_quit_response,
    parse_retr_response,
    parse_rset_response,
    parse_stat_response,
    parse_top_response,
    parse_uidl_response,
    parse_user_response,
)


class TestAuthorizationResponses:
    def test_greeting(self):
        assert parse_greeting(b"+OK POP3 server ready\r\n") == Greeting(
            status=StatusIndicator.OK, message=b"POP3 server ready",
        )

    def test_greeting_with_timestamp(self):
        result = parse_greeting(b"+OK POP3 server ready <1896.697170952@dbc.mtview.ca.us>\r\n")
        assert result.message.endswith(b"<1896.697170952@dbc.mtview.ca.us>")

    def test_quit_authorization(self):
        assert parse_quit_response(b"+OK dewey POP3 server signing off\r\n") == QuitResponse(
            status=StatusIndicator.OK, message=b"dewey POP3 server signing off",
        )

    def test_quit_update(self):
        result = parse_quit_response(b"-ERR some deleted messages not removed\r\n")
        assert result.status is StatusIndicator.ERR
        assert result.message == b"some deleted messages not removed"

    def test_user(self):
        result = parse_user_response(b"-ERR sorry, no mailbox for frated here\r\n")
        assert not result.is_positive

    def test_pass(self):
        result = parse_pass_response(b"+OK mrose's maildrop has 2 messages (320 octets)\r\n")
        assert result.is_positive

    def test_apop(self):
        assert parse_apop_response(b"-ERR permission denied\r\n").message == b"permission denied"

    @pytest.mark.parametrize("payload", [b"+ok\r\n", b"+OK\r\n", b"+Ok\r\n"])
    def test_status_case_insensitive(self, payload):
        assert parse_noop_response(payload).status is StatusIndicator.OK


class TestTransactionResponses:
    def test_stat(self):
        result = parse_stat_response(b"+OK 2 320\r\n")
        assert result == StatResponse(status=StatusIndicator.OK, count=2, size=320, message=b"")

    def test_stat_error(self):
        result = parse_stat_response(b"-ERR failed\r\n")
        assert result == StatResponse(status=StatusIndicator.ERR, count=0, size=0, message=b"failed")

    def test_list_multi_line(self):
        result = parse_list_response(b"+OK 2 messages (320 octets)\r\n1 120\r\n2 200\r\n.\r\n")
        assert result.status is StatusIndicator.OK
        assert list(result.entries) == [(1, 120), (2, 200)]
        assert result.message == b"2 messages (320 octets)"

    def test_list_single_line(self):
        result = parse_list_response(b"+OK 1 60178\r\n")
        assert result.status is StatusIndicator.OK
        assert list(result.entries) == [(1, 60178)]
        assert result.message == b""

    def test_list_error(self):
        result = parse_list_response(b"-ERR no such message, only 2 messages in maildrop\r\n")
        assert result.status is StatusIndicator.ERR
        assert result.entries == ()

    def test_retr(self):
        result = parse_retr_response(
            b"+OK 120 octets\r\n<the POP3 server sends the entire message here>\r\n.\r\n"
        )
        assert result == RetrResponse(
            status=StatusIndicator.OK,
            message=b"120 octets",
            body=b"<the POP3 server sends the entire message here>",
        )

    def test_retr_error(self):
        result = parse_retr_response(b"-ERR no such message\r\n")
        assert result.status is StatusIndicator.ERR
        assert result.body is None

    def test_retr_missing_dot_line(self):
        assert parse_retr_response(b"+OK 120 octets\r\n<body>\r\n") is None

    def test_top(self):
        result = parse_top_response(b"+OK top of message follows\r\nSubject: hi\r\n\r\n.\r\n")
        assert result.verb == "TOP"
        assert result.body == b"Subject: hi\r\n"

    def test_dele(self):
        assert parse_dele_response(b"+OK message 1 deleted\r\n").message == b"message 1 deleted"
        assert not parse_dele_response(b"-ERR message 2 already deleted\r\n").is_positive

    def test_noop(self):
        assert parse_noop_response(b"+OK\r\n").message == b""

    def test_rset(self):
        assert parse_rset_response(b"+OK maildrop has 2 messages (320 octets)\r\n").is_positive

    def test_uidl_multi_line(self):
        result = parse_uidl_response(
            b"+OK\r\n1 whqtswO00WBw418f9t5JxYwZ\r\n2 QhdPYR:00WBw1Ph7x7\r\n.\r\n"
        )
        assert result.entries[1] == UniqueIdListing(2, b"QhdPYR:00WBw1Ph7x7")

    def test_uidl_single_line(self):
        result = parse_uidl_response(b"+OK 2 QhdPYR:00WBw1Ph7x7\r\n")
        assert result.entries == ((2, b"QhdPYR:00WBw1Ph7x7"),)


class TestResponseRobustness:
    @pytest.mark.parametrize("parser, payload", [
        (parse_greeting, b"+OK POP3 server ready"),
        (parse_stat_response, b"+OK 2 320"),
        (parse_list_response, b"+OK 2 messages"),
        (parse_list_response, b"+OK 2 messages (320 octets)\r\n1 120\r\n2 200\r\n"),
        (parse_uidl_response, b"+OK\r\n1 whqtswO00WBw418f9t5JxYwZ\r\n"),
        (parse_retr_response, b"+OK 120 octets\r\n<body>"),
        (parse_top_response, b"+OK\r\n"),
        (parse_uidl_response, b"-ERR"),
    ])
    def test_truncated_is_no_match(self, parser, payload):
        assert parser(payload) is None

    def test_bare_lf_is_not_a_terminator(self):
        assert parse_greeting(b"+OK ready\n") is None

    def test_garbage(self):
        assert parse_stat_response(b"HTTP/1.1 200 OK\r\n") is None
        assert parse_list_response(b"") is None

    def test_idempotent(self):
        payload = b"+OK 2 messages (320 octets)\r\n1 120\r\n2 200\r\n.\r\n"
        assert parse_list_response(payload) == parse_list_response(payload)
