"""POP3 서버 응답 파서 (RFC 1939).

대부분의 동사는 범용 한 줄 디코더를 재사용한다. STAT/LIST/UIDL은 구조화된
형식을 먼저 시도하고 범용 형식으로 후퇴하며, RETR/TOP은 여러 줄 본문 디코더를 쓴다.

모든 ``parse_*`` 함수는 완전히 버퍼링된 응답을 받아 레코드 또는 None을 반환한다.
종결자(CRLF 또는 CRLF.CRLF)가 아직 없으면 문법 위반과 동일하게 None이다.
"""

from __future__ import annotations

from pop3wire.protocols import decoders
from pop3wire.protocols.decoders import decode
from pop3wire.protocols.models import (
    ApopResponse,
    DeleResponse,
    Greeting,
    ListResponse,
    NoopResponse,
    PassResponse,
    QuitResponse,
    RetrResponse,
    RsetResponse,
    ScanListing,
    StatResponse,
    TopResponse,
    UidlResponse,
    UniqueIdListing,
    UserResponse,
)


# ---------------------------------------------------------------------------
# 동사별 문법: (data, pos) -> (end, record) | None
# ---------------------------------------------------------------------------

def greeting_grammar(data: bytes, pos: int = 0):
    return decoders.one_line(data, pos, Greeting)


def user_grammar(data: bytes, pos: int = 0):
    return decoders.one_line(data, pos, UserResponse)


def pass_grammar(data: bytes, pos: int = 0):
    return decoders.one_line(data, pos, PassResponse)


def apop_grammar(data: bytes, pos: int = 0):
    return decoders.one_line(data, pos, ApopResponse)


def quit_grammar(data: bytes, pos: int = 0):
    return decoders.one_line(data, pos, QuitResponse)


def stat_grammar(data: bytes, pos: int = 0):
    return decoders.stat(data, pos, StatResponse)


def list_grammar(data: bytes, pos: int = 0):
    return decoders.dual_mode_listing(
        data, pos, ListResponse, ScanListing, decoders.size_value,
    )


def retr_grammar(data: bytes, pos: int = 0):
    return decoders.message_body(data, pos, RetrResponse)


def dele_grammar(data: bytes, pos: int = 0):
    return decoders.one_line(data, pos, DeleResponse)


def noop_grammar(data: bytes, pos: int = 0):
    return decoders.one_line(data, pos, NoopResponse)


def rset_grammar(data: bytes, pos: int = 0):
    return decoders.one_line(data, pos, RsetResponse)


def top_grammar(data: bytes, pos: int = 0):
    return decoders.message_body(data, pos, TopResponse)


def uidl_grammar(data: bytes, pos: int = 0):
    return decoders.dual_mode_listing(
        data, pos, UidlResponse, UniqueIdListing, decoders.uid_value,
    )


# ---------------------------------------------------------------------------
# 공개 API
# ---------------------------------------------------------------------------

def parse_greeting(payload: bytes) -> Greeting | None:
    """TCP 연결 직후 서버가 보내는 한 줄 인사말."""
    return decode(greeting_grammar, payload)


def parse_user_response(payload: bytes) -> UserResponse | None:
    return decode(user_grammar, payload)


def parse_pass_response(payload: bytes) -> PassResponse | None:
    return decode(pass_grammar, payload)


def parse_apop_response(payload: bytes) -> ApopResponse | None:
    return decode(apop_grammar, payload)


def parse_quit_response(payload: bytes) -> QuitResponse | None:
    """AUTHORIZATION 단계와 UPDATE 단계의 QUIT 응답 모두에 사용한다."""
    return decode(quit_grammar, payload)


def parse_stat_response(payload: bytes) -> StatResponse | None:
    """``+OK <count> <size>`` 또는 범용 한 줄 응답 (카운터 0)."""
    return decode(stat_grammar, payload)


def parse_list_response(payload: bytes) -> ListResponse | None:
    """여러 줄 목록, 단일 항목 한 줄, 범용 한 줄 응답 순으로 시도한다."""
    return decode(list_grammar, payload)


def parse_retr_response(payload: bytes) -> RetrResponse | None:
    return decode(retr_grammar, payload)


def parse_dele_response(payload: bytes) -> DeleResponse | None:
    return decode(dele_grammar, payload)


def parse_noop_response(payload: bytes) -> NoopResponse | None:
    return decode(noop_grammar, payload)


def parse_rset_response(payload: bytes) -> RsetResponse | None:
    return decode(rset_grammar, payload)


def parse_top_response(payload: bytes) -> TopResponse | None:
    return decode(top_grammar, payload)


def parse_uidl_response(payload: bytes) -> UidlResponse | None:
    """LIST와 같은 대안 순서, 항목 값은 불투명 식별자."""
    return decode(uidl_grammar, payload)
