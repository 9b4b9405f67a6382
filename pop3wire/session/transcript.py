"""캡처된 클라이언트/서버 바이트 스트림을 명령-응답 교환 목록으로 복원한다.

응답 형식은 직전 명령에 따라 결정되므로 두 스트림을 번갈아 디코딩한다.
세션 단계별 명령 허용 여부는 검사하지 않는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from pop3wire.protocols.decoders import unstuff_body
from pop3wire.protocols.grammar import DOT_LINE
from pop3wire.protocols.models import (
    Greeting,
    MultiLineResponse,
    OneLineResponse,
    Record,
)
from pop3wire.protocols.registry import (
    GREETING,
    parse_command_prefix,
    parse_response_prefix,
    sniff_verb,
)

logger = logging.getLogger("pop3wire.session.transcript")

# 인자 없이 보내면 여러 줄 응답이 오는 명령
_MULTI_LINE_LISTINGS = frozenset({"LIST", "UIDL"})


@dataclass(frozen=True)
class Exchange:
    """명령 하나와 그에 대한 서버 응답."""
    command: Record
    response: OneLineResponse | None

    def to_dict(self, mask_credentials: bool = False) -> dict[str, Any]:
        return {
            "command": self.command.to_dict(mask_credentials),
            "response": self.response.to_dict() if self.response is not None else None,
        }


@dataclass
class Transcript:
    """디코딩된 POP3 대화."""
    greeting: Greeting | None = None
    exchanges: list[Exchange] = field(default_factory=list)
    client_remainder: bytes = b""
    server_remainder: bytes = b""

    @property
    def complete(self) -> bool:
        """두 스트림이 모두 남김없이 소비되었는지 여부."""
        return not self.client_remainder and not self.server_remainder

    def to_dict(self, mask_credentials: bool = False) -> dict[str, Any]:
        return {
            "greeting": self.greeting.to_dict() if self.greeting is not None else None,
            "exchanges": [x.to_dict(mask_credentials) for x in self.exchanges],
            "complete": self.complete,
            "client_remainder": len(self.client_remainder),
            "server_remainder": len(self.server_remainder),
        }


def _needs_dot_line(command: Record, response: OneLineResponse) -> bool:
    """인자 없는 LIST/UIDL 긍정 응답 뒤에 남은 '.CRLF'를 소비해야 하는지 판단한다.

    인자 없는 응답은 항상 여러 줄이다. ``+OK 0 0`` 같은 헤더는 한 줄 목록 형식의 항목
    하나로 해석되므로 항목 유무로는 판단하지 않는다.
    """
    if command.verb not in _MULTI_LINE_LISTINGS:
        return False
    if getattr(command, "msg", None) is not None:
        return False
    return response.is_positive


def decode_transcript(
    client: bytes,
    server: bytes,
    *,
    unstuff_bodies: bool = True,
) -> Transcript:
    """클라이언트/서버 스트림 쌍을 Transcript로 디코딩한다.

    인사말을 먼저 읽고, 이후 명령 하나와 그 응답 하나를 번갈아 디코딩한다.
    알 수 없는 명령이나 디코딩할 수 없는 단위를 만나면 중단하고
    남은 바이트를 remainder에 보관한다. 예외를 던지지 않는다.
    """
    transcript = Transcript(client_remainder=bytes(client), server_remainder=bytes(server))

    result = parse_response_prefix(GREETING, transcript.server_remainder)
    if result is None:
        logger.warning("No POP3 greeting in server stream (%d bytes)", len(server))
        return transcript
    transcript.server_remainder, transcript.greeting = result

    while transcript.client_remainder:
        verb = sniff_verb(transcript.client_remainder)
        if verb is None:
            logger.warning(
                "Unknown command after %d exchanges: %r",
                len(transcript.exchanges), transcript.client_remainder[:16],
            )
            break

        parsed = parse_command_prefix(transcript.client_remainder)
        if parsed is None:
            logger.warning("Malformed or truncated %s command", verb)
            break
        client_rest, command = parsed

        response_result = parse_response_prefix(verb, transcript.server_remainder)
        if response_result is None:
            # 응답 없이 끝난 캡처: 명령만 기록한다
            if not transcript.server_remainder:
                transcript.client_remainder = client_rest
                transcript.exchanges.append(Exchange(command, None))
                logger.debug("%s without response (capture ended)", verb)
            else:
                logger.warning("Malformed or truncated %s response", verb)
            break
        server_rest, response = response_result

        if _needs_dot_line(command, response) and server_rest.startswith(DOT_LINE):
            server_rest = server_rest[len(DOT_LINE):]

        if (
            unstuff_bodies
            and isinstance(response, MultiLineResponse)
            and response.body is not None
        ):
            response = replace(response, body=unstuff_body(response.body))

        transcript.client_remainder = client_rest
        transcript.server_remainder = server_rest
        transcript.exchanges.append(Exchange(command, response))
        logger.debug("Decoded %s -> %s", verb, response.status.value)

    return transcript
