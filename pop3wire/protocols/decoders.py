"""여러 동사가 공유하는 POP3 응답 디코더.

세 가지 응답 형태를 다룬다.

- 한 줄 두 부분: ``<status>[ SP <text>] CRLF``
- 여러 줄 본문: ``<status> SP <header> CRLF [<body>] CRLF . CRLF``
- 이중 모드 목록(LIST/UIDL)과 STAT: 순서가 정해진 대안을 차례로 시도하고
  처음 성공한 대안을 채택한다. 대안 간 역추적은 없다.

각 디코더는 (data, pos)를 받아 (새 오프셋, 레코드) 또는 None을 반환한다.
디코더는 로그를 남기지 않으며 잘못된 입력에도 예외를 던지지 않는다.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from pop3wire.protocols import grammar
from pop3wire.protocols.grammar import CRLF, DOT_LINE, SP, TERMINATOR
from pop3wire.protocols.models import (
    MultiLineResponse,
    OneLineResponse,
    Record,
    StatResponse,
    StatusIndicator,
)

R = TypeVar("R", bound=Record)
OL = TypeVar("OL", bound=OneLineResponse)
ML = TypeVar("ML", bound=MultiLineResponse)

# (data, pos) -> (end, value) | None
Grammar = Callable[[bytes, int], Optional[tuple]]

_STATUS_LITERALS = (
    (b"+OK", StatusIndicator.OK),
    (b"-ERR", StatusIndicator.ERR),
)


# ---------------------------------------------------------------------------
# 실행 도우미
# ---------------------------------------------------------------------------

def as_bytes(payload: Any) -> bytes:
    """bytes / bytearray / memoryview를 소유 bytes로 변환한다."""
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, (bytearray, memoryview)):
        return bytes(payload)
    raise TypeError(f"expected a bytes-like payload, got {type(payload).__name__}")


def parse_prefix(rule: Grammar, payload: Any) -> tuple[bytes, Any] | None:
    """입력 앞부분에 rule을 적용하여 (남은 입력, 레코드)를 반환한다."""
    try:
        data = as_bytes(payload)
        result = rule(data, 0)
        if result is None:
            return None
        end, record = result
        return data[end:], record
    except (TypeError, ValueError):
        return None


def decode(rule: Grammar, payload: Any) -> Any:
    """rule로 하나의 논리 단위를 디코딩한다. 매칭 실패는 None."""
    result = parse_prefix(rule, payload)
    if result is None:
        return None
    return result[1]


# ---------------------------------------------------------------------------
# 상태 표시자
# ---------------------------------------------------------------------------

def status(data: bytes, pos: int) -> tuple[int, StatusIndicator] | None:
    """'+OK' 또는 '-ERR'를 대소문자 무시로 매칭한다."""
    for text, indicator in _STATUS_LITERALS:
        end = grammar.keyword(data, pos, text)
        if end is not None:
            return end, indicator
    return None


def positive(data: bytes, pos: int) -> int | None:
    return grammar.keyword(data, pos, b"+OK")


# ---------------------------------------------------------------------------
# 한 줄 두 부분 디코더
# ---------------------------------------------------------------------------

def one_line(data: bytes, pos: int, record_cls: type[OL]) -> tuple[int, OL] | None:
    """``<status>[ SP <free-text>] CRLF``를 record_cls로 디코딩한다.

    공백과 텍스트가 없으면 message는 빈 bytes다.
    """
    result = status(data, pos)
    if result is None:
        return None
    pos, indicator = result

    message = b""
    after_space = grammar.literal(data, pos, SP)
    if after_space is not None:
        text = grammar.line(data, after_space)
        if text is None:
            return None
        pos, message = text

    end = grammar.literal(data, pos, CRLF)
    if end is None:
        return None
    return end, record_cls(status=indicator, message=message)


# ---------------------------------------------------------------------------
# 여러 줄 본문 디코더 (RETR / TOP)
# ---------------------------------------------------------------------------

def multi_line(data: bytes, pos: int, record_cls: type[ML]) -> tuple[int, ML] | None:
    """``<status> SP <header> CRLF [<body>] CRLF . CRLF``를 디코딩한다.

    헤더 줄 바로 다음이 '.CRLF'이면 본문 없음(None)이다. 그 외에는
    첫 번째 'CRLF.CRLF' 직전까지가 하나의 불투명한 본문이다.
    """
    result = status(data, pos)
    if result is None:
        return None
    pos, indicator = result

    pos = grammar.literal(data, pos, SP)
    if pos is None:
        return None
    header = grammar.line_crlf(data, pos)
    if header is None:
        return None
    pos, message = header

    if data.startswith(DOT_LINE, pos):
        return pos + len(DOT_LINE), record_cls(status=indicator, message=message, body=None)

    end = data.find(TERMINATOR, pos)
    if end < 0:
        return None
    return end + len(TERMINATOR), record_cls(
        status=indicator, message=message, body=data[pos:end],
    )


def message_body(data: bytes, pos: int, record_cls: type[ML]) -> tuple[int, ML] | None:
    """여러 줄 본문 응답, 실패하면 한 줄 부정 응답(-ERR)을 시도한다."""
    result = multi_line(data, pos, record_cls)
    if result is not None:
        return result
    result = one_line(data, pos, record_cls)
    if result is not None and not result[1].is_positive:
        return result
    return None


def unstuff_body(body: bytes) -> bytes:
    """본문 각 줄의 byte-stuffing('..' -> '.')을 제거한다."""
    lines = body.split(CRLF)
    return CRLF.join(
        line[1:] if line.startswith(b"..") else line
        for line in lines
    )


# ---------------------------------------------------------------------------
# 이중 모드 목록 디코더 (LIST / UIDL)
# ---------------------------------------------------------------------------

def size_value(data: bytes, pos: int) -> tuple[int, int] | None:
    """LIST 항목 값: 10진 크기."""
    return grammar.decimal(data, pos)


def uid_value(data: bytes, pos: int) -> tuple[int, bytes] | None:
    """UIDL 항목 값: 다음 CRLF 직전까지의 불투명 식별자."""
    return grammar.line(data, pos, allow_empty=False)


def listing_entry(
    data: bytes, pos: int, entry_cls: type, value_rule: Grammar,
) -> tuple[int, Any] | None:
    """``<digits> SP <value> CRLF`` 한 항목."""
    number = grammar.decimal(data, pos)
    if number is None:
        return None
    pos, msg = number
    pos = grammar.literal(data, pos, SP)
    if pos is None:
        return None
    value = value_rule(data, pos)
    if value is None:
        return None
    pos, payload = value
    pos = grammar.literal(data, pos, CRLF)
    if pos is None:
        return None
    return pos, entry_cls(msg, payload)


def _multi_line_listing(data, pos, record_cls, entry_cls, value_rule):
    """대안 1: ``+OK[ SP <header>] CRLF`` + 항목 1개 이상 + '.CRLF'."""
    pos = positive(data, pos)
    if pos is None:
        return None

    header = b""
    after_space = grammar.literal(data, pos, SP)
    if after_space is not None:
        text = grammar.line(data, after_space)
        if text is None:
            return None
        pos, header = text
    pos = grammar.literal(data, pos, CRLF)
    if pos is None:
        return None

    entries = []
    while not data.startswith(DOT_LINE, pos):
        entry = listing_entry(data, pos, entry_cls, value_rule)
        if entry is None:
            return None
        pos, item = entry
        entries.append(item)

    # 빈 목록은 대안 3(한 줄 응답)으로 처리된다
    if not entries:
        return None
    return pos + len(DOT_LINE), record_cls(
        status=StatusIndicator.OK, message=header, entries=tuple(entries),
    )


def _single_line_listing(data, pos, record_cls, entry_cls, value_rule):
    """대안 2: ``+OK SP <digits> SP <value> CRLF``."""
    pos = positive(data, pos)
    if pos is None:
        return None
    pos = grammar.literal(data, pos, SP)
    if pos is None:
        return None
    entry = listing_entry(data, pos, entry_cls, value_rule)
    if entry is None:
        return None
    pos, item = entry
    return pos, record_cls(status=StatusIndicator.OK, entries=(item,))


def _fallback_listing(data, pos, record_cls, entry_cls, value_rule):
    """대안 3: 범용 한 줄 응답 (부정 응답, 텍스트만 있는 긍정 응답).

    긍정 응답 뒤에 항목 줄(``<digits> SP``)이 이어지면 '.CRLF'가 빠진 여러 줄
    목록이므로 일치하지 않는다.
    """
    result = one_line(data, pos, record_cls)
    if result is None:
        return None
    end, record = result
    if record.is_positive and _starts_entry_line(data, end):
        return None
    return result


def _starts_entry_line(data: bytes, pos: int) -> bool:
    run = grammar.digit_run(data, pos)
    return run is not None and data.startswith(SP, run[0])


# 순서가 의미를 가진다: 대안 1은 첫 항목 앞에 CRLF를 요구하므로
# 대안 2용 입력을 잘못 소비하지 않는다.
_LISTING_ALTERNATIVES = (
    _multi_line_listing,
    _single_line_listing,
    _fallback_listing,
)


def dual_mode_listing(
    data: bytes, pos: int, record_cls: type[OL], entry_cls: type, value_rule: Grammar,
) -> tuple[int, OL] | None:
    """LIST/UIDL 응답을 디코딩한다. 처음 성공한 대안을 채택한다."""
    for alternative in _LISTING_ALTERNATIVES:
        result = alternative(data, pos, record_cls, entry_cls, value_rule)
        if result is not None:
            return result
    return None


# ---------------------------------------------------------------------------
# STAT 디코더
# ---------------------------------------------------------------------------

def _structured_stat(data, pos, record_cls):
    """``+OK SP <count> SP <size> CRLF``."""
    pos = positive(data, pos)
    if pos is None:
        return None
    pos = grammar.literal(data, pos, SP)
    if pos is None:
        return None
    count = grammar.decimal(data, pos)
    if count is None:
        return None
    pos, number_of_messages = count
    pos = grammar.literal(data, pos, SP)
    if pos is None:
        return None
    size = grammar.decimal(data, pos)
    if size is None:
        return None
    pos, size_in_octets = size
    pos = grammar.literal(data, pos, CRLF)
    if pos is None:
        return None
    return pos, record_cls(
        status=StatusIndicator.OK, count=number_of_messages, size=size_in_octets,
    )


def _fallback_stat(data, pos, record_cls):
    return one_line(data, pos, record_cls)


_STAT_ALTERNATIVES = (_structured_stat, _fallback_stat)


def stat(
    data: bytes, pos: int, record_cls: type[StatResponse] = StatResponse,
) -> tuple[int, StatResponse] | None:
    """STAT 응답을 디코딩한다. 구조화 형식이 아니면 카운터는 0이다."""
    for alternative in _STAT_ALTERNATIVES:
        result = alternative(data, pos, record_cls)
        if result is not None:
            return result
    return None
