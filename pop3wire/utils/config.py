"""기본값 병합 기능을 갖춘 YAML 설정 로더."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Callable

import yaml
from dotenv import load_dotenv


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_ports(value: str) -> list[int]:
    return [int(part) for part in value.split(",") if part.strip()]


_DEFAULTS: dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "format": "text",
        "directory": None,
        "max_bytes": 10_485_760,
        "backup_count": 5,
    },
    "capture": {
        "ports": [110],
    },
    "transcript": {
        "unstuff_bodies": True,
    },
    "output": {
        "mask_credentials": True,
        "body_preview_bytes": 512,
    },
}

# 환경변수 → Config 경로 매핑
_ENV_OVERRIDES: list[tuple[str, str, Callable[[str], Any]]] = [
    ("POP3WIRE_LOG_LEVEL", "logging.level", str),
    ("POP3WIRE_LOG_FORMAT", "logging.format", str),
    ("POP3WIRE_LOG_DIR", "logging.directory", str),
    ("POP3WIRE_CAPTURE_PORTS", "capture.ports", _as_ports),
    ("POP3WIRE_UNSTUFF_BODIES", "transcript.unstuff_bodies", _as_bool),
    ("POP3WIRE_MASK_CREDENTIALS", "output.mask_credentials", _as_bool),
]


def _deep_merge(base: dict, override: dict) -> dict:
    """override를 base에 재귀적으로 병합하여 새 dict를 반환한다."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _set_nested(data: dict, dotted_key: str, value: Any) -> None:
    """점 표기법을 사용하여 중첩 dict에 값을 설정한다."""
    keys = dotted_key.split(".")
    current = data
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def _apply_env_overrides(data: dict) -> None:
    """환경변수가 설정되어 있으면 YAML 값을 오버라이드한다."""
    for env_var, config_path, cast in _ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if value is not None:
            _set_nested(data, config_path, cast(value))


class Config:
    """YAML 파일에서 로드된 불변 설정 컨테이너."""

    def __init__(self, data: dict[str, Any], config_path: str | Path | None = None) -> None:
        self._data = data
        self.config_path: str | None = str(config_path) if config_path else None

    @classmethod
    def defaults(cls) -> Config:
        """파일 없이 내장 기본값만으로 설정을 만든다."""
        return cls(copy.deepcopy(_DEFAULTS))

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """YAML 파일에서 설정을 로드한다.

        경로가 없으면 환경변수 POP3WIRE_CONFIG, 그다음 프로젝트 루트 기준
        config/default.yaml을 사용한다. 기본 경로의 파일이 없으면 내장 기본값만
        사용하지만, 명시적으로 지정한 파일이 없으면 FileNotFoundError를 던진다.
        .env 파일이 존재하면 자동으로 로드하여 환경변수를 설정한다.
        """
        load_dotenv()

        explicit = True
        if config_path is None:
            config_path = os.environ.get("POP3WIRE_CONFIG")
        if config_path is None:
            explicit = False
            project_root = Path(__file__).resolve().parent.parent.parent
            config_path = project_root / "config" / "default.yaml"

        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif explicit:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        else:
            data = {}
            config_path = None

        inner = _deep_merge(copy.deepcopy(_DEFAULTS), data.get("pop3wire", data))
        _apply_env_overrides(inner)

        return cls(inner, config_path=config_path)

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """점 표기법으로 값을 조회한다: 'capture.ports' -> config['capture']['ports']."""
        keys = dotted_key.split(".")
        current = self._data
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current
