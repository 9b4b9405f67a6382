"""POP3 명령/응답 레코드 모델.

모든 레코드는 불변(frozen) dataclass이며 페이로드 바이트 필드는
입력 버퍼의 사본(bytes)을 보유한다. 따라서 입력 버퍼보다 오래 살아도 안전하다.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, fields
from typing import Any, ClassVar, NamedTuple

MASK = "***"


class StatusIndicator(str, enum.Enum):
    """서버 응답 선두의 상태 표시자."""
    OK = "+OK"
    ERR = "-ERR"

    @property
    def is_positive(self) -> bool:
        return self is StatusIndicator.OK


class ScanListing(NamedTuple):
    """LIST 항목: 메시지 번호와 옥텟 단위 크기."""
    number: int
    size: int


class UniqueIdListing(NamedTuple):
    """UIDL 항목: 메시지 번호와 불투명한 고유 식별자."""
    number: int
    uid: bytes


def _render(value: Any) -> Any:
    """JSON 직렬화 가능한 형태로 값을 변환한다."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, tuple):
        return [_render(item) for item in value]
    return value


@dataclass(frozen=True)
class Record:
    """모든 명령/응답 레코드의 기반 클래스."""

    verb: ClassVar[str] = ""
    # to_dict(mask_credentials=True)일 때 가려지는 필드
    sensitive_fields: ClassVar[tuple[str, ...]] = ()

    def to_dict(self, mask_credentials: bool = False) -> dict[str, Any]:
        """레코드를 딕셔너리로 직렬화한다."""
        result: dict[str, Any] = {"verb": self.verb}
        for f in fields(self):
            if mask_credentials and f.name in self.sensitive_fields:
                result[f.name] = MASK
            else:
                result[f.name] = _render(getattr(self, f.name))
        return result


# ---------------------------------------------------------------------------
# 명령 (클라이언트 -> 서버). 상태 표시자가 없다.
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserCommand(Record):
    verb: ClassVar[str] = "USER"
    name: bytes


@dataclass(frozen=True)
class PassCommand(Record):
    """PASS 인자는 공백을 포함할 수 있는 줄 나머지 전체다."""
    verb: ClassVar[str] = "PASS"
    sensitive_fields: ClassVar[tuple[str, ...]] = ("password",)
    password: bytes


@dataclass(frozen=True)
class ApopCommand(Record):
    verb: ClassVar[str] = "APOP"
    sensitive_fields: ClassVar[tuple[str, ...]] = ("digest",)
    name: bytes
    digest: bytes


@dataclass(frozen=True)
class StatCommand(Record):
    verb: ClassVar[str] = "STAT"


@dataclass(frozen=True)
class ListCommand(Record):
    verb: ClassVar[str] = "LIST"
    msg: int | None = None


@dataclass(frozen=True)
class RetrCommand(Record):
    verb: ClassVar[str] = "RETR"
    msg: int


@dataclass(frozen=True)
class DeleCommand(Record):
    verb: ClassVar[str] = "DELE"
    msg: int


@dataclass(frozen=True)
class NoopCommand(Record):
    verb: ClassVar[str] = "NOOP"


@dataclass(frozen=True)
class RsetCommand(Record):
    verb: ClassVar[str] = "RSET"


@dataclass(frozen=True)
class TopCommand(Record):
    verb: ClassVar[str] = "TOP"
    msg: int
    lines: int


@dataclass(frozen=True)
class UidlCommand(Record):
    verb: ClassVar[str] = "UIDL"
    msg: int | None = None


@dataclass(frozen=True)
class QuitCommand(Record):
    verb: ClassVar[str] = "QUIT"


# ---------------------------------------------------------------------------
# 응답 (서버 -> 클라이언트)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OneLineResponse(Record):
    """상태 표시자 + 자유 텍스트 한 줄 응답.

    범용 한 줄 디코더는 이 클래스의 어떤 서브클래스든 status/message
    키워드 인자로 생성한다. 서브클래스의 추가 필드는 모두 기본값을 가져야 한다.
    """
    status: StatusIndicator
    message: bytes = b""

    @property
    def is_positive(self) -> bool:
        return self.status.is_positive


@dataclass(frozen=True)
class Greeting(OneLineResponse):
    verb: ClassVar[str] = "GREETING"


@dataclass(frozen=True)
class UserResponse(OneLineResponse):
    verb: ClassVar[str] = "USER"


@dataclass(frozen=True)
class PassResponse(OneLineResponse):
    verb: ClassVar[str] = "PASS"


@dataclass(frozen=True)
class ApopResponse(OneLineResponse):
    verb: ClassVar[str] = "APOP"


@dataclass(frozen=True)
class QuitResponse(OneLineResponse):
    """AUTHORIZATION / UPDATE 양쪽 단계의 QUIT 응답."""
    verb: ClassVar[str] = "QUIT"


@dataclass(frozen=True)
class DeleResponse(OneLineResponse):
    verb: ClassVar[str] = "DELE"


@dataclass(frozen=True)
class NoopResponse(OneLineResponse):
    verb: ClassVar[str] = "NOOP"


@dataclass(frozen=True)
class RsetResponse(OneLineResponse):
    verb: ClassVar[str] = "RSET"


@dataclass(frozen=True)
class StatResponse(OneLineResponse):
    """STAT 응답. 구조화된 형식이 아니면 count/size는 0이다."""
    verb: ClassVar[str] = "STAT"
    count: int = 0
    size: int = 0


@dataclass(frozen=True)
class ListResponse(OneLineResponse):
    """LIST 응답. entries는 수신 순서를 그대로 유지한다."""
    verb: ClassVar[str] = "LIST"
    entries: tuple[ScanListing, ...] = ()


@dataclass(frozen=True)
class UidlResponse(OneLineResponse):
    verb: ClassVar[str] = "UIDL"
    entries: tuple[UniqueIdListing, ...] = ()


@dataclass(frozen=True)
class MultiLineResponse(OneLineResponse):
    """상태 + 헤더 줄(message) + 선택적 본문.

    body가 None이면 본문이 없는 것이고, b""이면 본문은 있으나 비어 있는 것이다.
    본문은 수신된 그대로(byte-stuffing 포함) 보관한다.
    """
    body: bytes | None = None


@dataclass(frozen=True)
class RetrResponse(MultiLineResponse):
    verb: ClassVar[str] = "RETR"


@dataclass(frozen=True)
class TopResponse(MultiLineResponse):
    verb: ClassVar[str] = "TOP"
