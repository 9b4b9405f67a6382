"""POP3 클라이언트 명령 파서 (RFC 1939).

명령마다 하나의 키워드+인자 문법만 존재하며 대안은 없다.
키워드는 대소문자를 무시하고, 인자는 대소문자를 구분하는 옥텟 데이터다.

    USER name               AUTHORIZATION
    PASS string
    APOP name digest
    QUIT

    STAT                    TRANSACTION
    LIST [msg]
    RETR msg
    DELE msg
    NOOP
    RSET
    TOP msg n
    UIDL [msg]
    QUIT                    (UPDATE 진입)

``parse_*_command`` 함수는 완전히 버퍼링된 명령 한 줄을 받아 레코드를 반환하며,
형식이 잘못되었거나 CRLF가 아직 도착하지 않았으면 None을 반환한다.
"""

from __future__ import annotations

from typing import Any

from pop3wire.protocols import grammar
from pop3wire.protocols.decoders import decode
from pop3wire.protocols.grammar import CRLF, SP
from pop3wire.protocols.models import (
    ApopCommand,
    DeleCommand,
    ListCommand,
    NoopCommand,
    PassCommand,
    QuitCommand,
    RetrCommand,
    RsetCommand,
    StatCommand,
    TopCommand,
    UidlCommand,
    UserCommand,
)


def _verb(data: bytes, pos: int, word: bytes, argument: bool) -> int | None:
    """키워드를 매칭하고 인자가 필요하면 구분 공백까지 소비한다."""
    pos = grammar.keyword(data, pos, word)
    if pos is None:
        return None
    if argument:
        return grammar.literal(data, pos, SP)
    return pos


def _bare(data: bytes, pos: int, word: bytes, record: Any):
    """인자 없는 명령: 키워드 바로 뒤에 CRLF."""
    pos = _verb(data, pos, word, argument=False)
    if pos is None:
        return None
    pos = grammar.literal(data, pos, CRLF)
    if pos is None:
        return None
    return pos, record


def _optional_msg(data: bytes, pos: int, word: bytes):
    """``<word>[ SP <digits>] CRLF``. 메시지 번호가 없으면 None."""
    pos = _verb(data, pos, word, argument=False)
    if pos is None:
        return None
    msg = None
    after_space = grammar.literal(data, pos, SP)
    if after_space is not None:
        number = grammar.decimal(data, after_space)
        if number is None:
            return None
        pos, msg = number
    pos = grammar.literal(data, pos, CRLF)
    if pos is None:
        return None
    return pos, msg


def _required_msg(data: bytes, pos: int, word: bytes):
    """``<word> SP <digits> CRLF``."""
    pos = _verb(data, pos, word, argument=True)
    if pos is None:
        return None
    number = grammar.decimal(data, pos)
    if number is None:
        return None
    pos, msg = number
    pos = grammar.literal(data, pos, CRLF)
    if pos is None:
        return None
    return pos, msg


# ---------------------------------------------------------------------------
# 동사별 문법: (data, pos) -> (end, record) | None
# ---------------------------------------------------------------------------

def user_grammar(data: bytes, pos: int = 0) -> tuple[int, UserCommand] | None:
    pos = _verb(data, pos, b"USER", argument=True)
    if pos is None:
        return None
    name = grammar.line_crlf(data, pos, allow_empty=False)
    if name is None:
        return None
    pos, value = name
    return pos, UserCommand(name=value)


def pass_grammar(data: bytes, pos: int = 0) -> tuple[int, PassCommand] | None:
    # 비밀번호는 공백을 포함할 수 있으므로 줄 나머지 전체가 하나의 토큰이다
    pos = _verb(data, pos, b"PASS", argument=True)
    if pos is None:
        return None
    password = grammar.line_crlf(data, pos, allow_empty=False)
    if password is None:
        return None
    pos, value = password
    return pos, PassCommand(password=value)


def apop_grammar(data: bytes, pos: int = 0) -> tuple[int, ApopCommand] | None:
    pos = _verb(data, pos, b"APOP", argument=True)
    if pos is None:
        return None
    name = grammar.token(data, pos)
    if name is None:
        return None
    pos, name_value = name
    pos = grammar.literal(data, pos, SP)
    if pos is None:
        return None
    digest = grammar.line_crlf(data, pos, allow_empty=False)
    if digest is None:
        return None
    pos, digest_value = digest
    if SP in digest_value:
        return None
    return pos, ApopCommand(name=name_value, digest=digest_value)


def stat_grammar(data: bytes, pos: int = 0) -> tuple[int, StatCommand] | None:
    return _bare(data, pos, b"STAT", StatCommand())


def list_grammar(data: bytes, pos: int = 0) -> tuple[int, ListCommand] | None:
    result = _optional_msg(data, pos, b"LIST")
    if result is None:
        return None
    pos, msg = result
    return pos, ListCommand(msg=msg)


def retr_grammar(data: bytes, pos: int = 0) -> tuple[int, RetrCommand] | None:
    result = _required_msg(data, pos, b"RETR")
    if result is None:
        return None
    pos, msg = result
    return pos, RetrCommand(msg=msg)


def dele_grammar(data: bytes, pos: int = 0) -> tuple[int, DeleCommand] | None:
    result = _required_msg(data, pos, b"DELE")
    if result is None:
        return None
    pos, msg = result
    return pos, DeleCommand(msg=msg)


def noop_grammar(data: bytes, pos: int = 0) -> tuple[int, NoopCommand] | None:
    return _bare(data, pos, b"NOOP", NoopCommand())


def rset_grammar(data: bytes, pos: int = 0) -> tuple[int, RsetCommand] | None:
    return _bare(data, pos, b"RSET", RsetCommand())


def top_grammar(data: bytes, pos: int = 0) -> tuple[int, TopCommand] | None:
    pos = _verb(data, pos, b"TOP", argument=True)
    if pos is None:
        return None
    msg = grammar.decimal(data, pos)
    if msg is None:
        return None
    pos, msg_value = msg
    pos = grammar.literal(data, pos, SP)
    if pos is None:
        return None
    lines = grammar.decimal(data, pos)
    if lines is None:
        return None
    pos, lines_value = lines
    pos = grammar.literal(data, pos, CRLF)
    if pos is None:
        return None
    return pos, TopCommand(msg=msg_value, lines=lines_value)


def uidl_grammar(data: bytes, pos: int = 0) -> tuple[int, UidlCommand] | None:
    result = _optional_msg(data, pos, b"UIDL")
    if result is None:
        return None
    pos, msg = result
    return pos, UidlCommand(msg=msg)


def quit_grammar(data: bytes, pos: int = 0) -> tuple[int, QuitCommand] | None:
    return _bare(data, pos, b"QUIT", QuitCommand())


# ---------------------------------------------------------------------------
# 공개 API
# ---------------------------------------------------------------------------

def parse_user_command(payload: bytes) -> UserCommand | None:
    """USER name"""
    return decode(user_grammar, payload)


def parse_pass_command(payload: bytes) -> PassCommand | None:
    """PASS string (공백 허용)"""
    return decode(pass_grammar, payload)


def parse_apop_command(payload: bytes) -> ApopCommand | None:
    """APOP name digest"""
    return decode(apop_grammar, payload)


def parse_stat_command(payload: bytes) -> StatCommand | None:
    return decode(stat_grammar, payload)


def parse_list_command(payload: bytes) -> ListCommand | None:
    """LIST [msg]"""
    return decode(list_grammar, payload)


def parse_retr_command(payload: bytes) -> RetrCommand | None:
    return decode(retr_grammar, payload)


def parse_dele_command(payload: bytes) -> DeleCommand | None:
    return decode(dele_grammar, payload)


def parse_noop_command(payload: bytes) -> NoopCommand | None:
    return decode(noop_grammar, payload)


def parse_rset_command(payload: bytes) -> RsetCommand | None:
    return decode(rset_grammar, payload)


def parse_top_command(payload: bytes) -> TopCommand | None:
    """TOP msg n"""
    return decode(top_grammar, payload)


def parse_uidl_command(payload: bytes) -> UidlCommand | None:
    """UIDL [msg]"""
    return decode(uidl_grammar, payload)


def parse_quit_command(payload: bytes) -> QuitCommand | None:
    return decode(quit_grammar, payload)
