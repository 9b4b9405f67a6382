"""POP3 문법 기본 요소.

모든 함수는 (data, pos) 오프셋 위에서 동작하며 입력을 복사하지 않는다.
성공하면 새 오프셋(과 값)을, 매칭에 실패하면 None을 반환한다.
실패 시 오프셋은 소비되지 않으므로 호출자는 같은 위치에서 다른 대안을 시도할 수 있다.
"""

from __future__ import annotations

CRLF = b"\r\n"
SP = b" "
DOT_LINE = b".\r\n"
TERMINATOR = b"\r\n.\r\n"

# usize 범위를 넘는 숫자열은 변환 실패(0)로 취급한다
MAX_DECIMAL = 2**64 - 1


def keyword(data: bytes, pos: int, literal: bytes) -> int | None:
    """대소문자 무시 리터럴을 소비한다."""
    end = pos + len(literal)
    if data[pos:end].upper() == literal.upper():
        return end
    return None


def literal(data: bytes, pos: int, expected: bytes) -> int | None:
    """대소문자를 구분하는 리터럴(SP, CRLF 등)을 소비한다."""
    if data.startswith(expected, pos):
        return pos + len(expected)
    return None


def line(data: bytes, pos: int, allow_empty: bool = True) -> tuple[int, bytes] | None:
    """다음 CRLF 직전까지 소비한다. CRLF는 남겨둔다."""
    end = data.find(CRLF, pos)
    if end < 0:
        return None
    if end == pos and not allow_empty:
        return None
    return end, data[pos:end]


def line_crlf(data: bytes, pos: int, allow_empty: bool = True) -> tuple[int, bytes] | None:
    """다음 CRLF까지 소비하고 CRLF도 함께 소비한다."""
    result = line(data, pos, allow_empty)
    if result is None:
        return None
    end, value = result
    return end + len(CRLF), value


def token(data: bytes, pos: int) -> tuple[int, bytes] | None:
    """현재 줄에서 첫 번째 공백 직전까지의 비어 있지 않은 토큰을 소비한다.

    공백은 소비하지 않는다. 공백이 CRLF보다 먼저 나오지 않으면 실패한다.
    """
    line_end = data.find(CRLF, pos)
    if line_end < 0:
        return None
    space = data.find(SP, pos, line_end)
    if space <= pos:
        return None
    return space, data[pos:space]


def digit_run(data: bytes, pos: int) -> tuple[int, bytes] | None:
    """하나 이상의 ASCII 10진 숫자를 소비한다."""
    end = pos
    size = len(data)
    while end < size and 0x30 <= data[end] <= 0x39:
        end += 1
    if end == pos:
        return None
    return end, data[pos:end]


def to_decimal(run: bytes) -> int:
    """숫자열을 음이 아닌 정수로 변환한다. 비었거나 범위를 넘으면 0을 반환한다."""
    if not run or not run.isdigit():
        return 0
    value = int(run)
    if value > MAX_DECIMAL:
        return 0
    return value


def decimal(data: bytes, pos: int) -> tuple[int, int] | None:
    """관대한 10진 파서: 숫자열은 필수, 변환 실패는 0."""
    result = digit_run(data, pos)
    if result is None:
        return None
    end, run = result
    return end, to_decimal(run)
