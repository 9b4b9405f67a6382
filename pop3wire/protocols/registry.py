"""동사 -> 문법 매핑과 동사 판별 디스패치.

세션 계층은 명령 키워드로 어떤 응답 문법을 적용할지 결정한다.
응답만으로는 단일/여러 줄 형식을 구분할 수 없기 때문이다.
"""

from __future__ import annotations

from typing import Any

from pop3wire.protocols import commands, responses
from pop3wire.protocols.decoders import Grammar, as_bytes, parse_prefix

GREETING = "GREETING"

COMMAND_GRAMMARS: dict[str, Grammar] = {
    "USER": commands.user_grammar,
    "PASS": commands.pass_grammar,
    "APOP": commands.apop_grammar,
    "STAT": commands.stat_grammar,
    "LIST": commands.list_grammar,
    "RETR": commands.retr_grammar,
    "DELE": commands.dele_grammar,
    "NOOP": commands.noop_grammar,
    "RSET": commands.rset_grammar,
    "TOP":  commands.top_grammar,
    "UIDL": commands.uidl_grammar,
    "QUIT": commands.quit_grammar,
}

RESPONSE_GRAMMARS: dict[str, Grammar] = {
    GREETING: responses.greeting_grammar,
    "USER": responses.user_grammar,
    "PASS": responses.pass_grammar,
    "APOP": responses.apop_grammar,
    "STAT": responses.stat_grammar,
    "LIST": responses.list_grammar,
    "RETR": responses.retr_grammar,
    "DELE": responses.dele_grammar,
    "NOOP": responses.noop_grammar,
    "RSET": responses.rset_grammar,
    "TOP":  responses.top_grammar,
    "UIDL": responses.uidl_grammar,
    "QUIT": responses.quit_grammar,
}

# 가장 긴 키워드 + 구분자
_SNIFF_BYTES = 5


def sniff_verb(payload: Any) -> str | None:
    """명령 줄 선두의 키워드를 대문자로 반환한다. 알 수 없으면 None."""
    try:
        data = as_bytes(payload)
    except TypeError:
        return None
    head = data[:_SNIFF_BYTES]
    for separator in (b" ", b"\r"):
        idx = head.find(separator)
        if idx > 0:
            head = head[:idx]
            break
    verb = head.decode("ascii", errors="replace").upper()
    if verb in COMMAND_GRAMMARS:
        return verb
    return None


def parse_command_prefix(payload: Any) -> tuple[bytes, Any] | None:
    """키워드로 동사를 판별해 명령 하나를 디코딩하고 (남은 입력, 레코드)를 반환한다."""
    verb = sniff_verb(payload)
    if verb is None:
        return None
    return parse_prefix(COMMAND_GRAMMARS[verb], payload)


def parse_command(payload: Any) -> Any:
    """키워드로 동사를 판별해 명령 하나를 디코딩한다."""
    result = parse_command_prefix(payload)
    if result is None:
        return None
    return result[1]


def parse_response_prefix(verb: str, payload: Any) -> tuple[bytes, Any] | None:
    """주어진 동사의 응답 하나를 디코딩하고 (남은 입력, 레코드)를 반환한다."""
    rule = RESPONSE_GRAMMARS.get(verb.upper()) if isinstance(verb, str) else None
    if rule is None:
        return None
    return parse_prefix(rule, payload)


def parse_response(verb: str, payload: Any) -> Any:
    """주어진 동사('GREETING' 포함)의 응답 하나를 디코딩한다."""
    result = parse_response_prefix(verb, payload)
    if result is None:
        return None
    return result[1]
