"""pop3wire: POP3 (RFC 1939) 명령/응답 바이트 스트림 디코더."""

from pop3wire.protocols.commands import (
    parse_apop_command,
    parse_dele_command,
    parse_list_command,
    parse_noop_command,
    parse_pass_command,
    parse_quit_command,
    parse_retr_command,
    parse_rset_command,
    parse_stat_command,
    parse_top_command,
    parse_uidl_command,
    parse_user_command,
)
from pop3wire.protocols.decoders import unstuff_body
from pop3wire.protocols.models import StatusIndicator
from pop3wire.protocols.registry import parse_command, parse_response
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

__version__ = "0.1.0"
__all__ = (
    "StatusIndicator", "unstuff_body",
    "parse_command", "parse_response",
    "parse_user_command", "parse_pass_command", "parse_apop_command",
    "parse_stat_command", "parse_list_command", "parse_retr_command",
    "parse_dele_command", "parse_noop_command", "parse_rset_command",
    "parse_top_command", "parse_uidl_command", "parse_quit_command",
    "parse_greeting", "parse_user_response", "parse_pass_response",
    "parse_apop_response", "parse_quit_response", "parse_stat_response",
    "parse_list_response", "parse_retr_response", "parse_dele_response",
    "parse_noop_response", "parse_rset_response", "parse_top_response",
    "parse_uidl_response",
)
