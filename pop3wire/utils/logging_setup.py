"""선택적 로테이팅 파일 핸들러와 JSON 포맷을 지원하는 로깅 설정."""

from __future__ import annotations

import json as json_mod
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pop3wire.utils.config import Config

LOG_FORMAT  = "%(asctime)s [%(levelname)-8s] %(name)-32s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """기계 파싱 가능한 출력을 위한 구조화된 JSON 로그 포매터."""

    def format(self, record: logging.LogRecord) -> str:
        """로그 레코드를 JSON 문자열로 포맷한다."""
        log_obj = {
            "ts": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json_mod.dumps(log_obj, ensure_ascii=False)


def setup_logging(config: Config) -> logging.Logger:
    """stderr 콘솔 + (선택) 로테이팅 파일 핸들러로 pop3wire 로거를 설정한다.

    stdout은 CLI 출력(JSON)에 쓰이므로 콘솔 로그는 stderr로 보낸다.
    """
    level_str    = config.get("logging.level", "INFO")
    log_dir      = config.get("logging.directory")
    max_bytes    = config.get("logging.max_bytes", 10_485_760)
    backup_count = config.get("logging.backup_count", 5)
    log_format   = config.get("logging.format", "text")

    root = logging.getLogger("pop3wire")
    root.setLevel(getattr(logging, str(level_str).upper(), logging.INFO))

    # 반복 호출 시 핸들러 중복 방지
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if log_format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # 콘솔 핸들러
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    # 로테이팅 파일 핸들러
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path / "pop3wire.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
