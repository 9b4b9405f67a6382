"""Shared fixtures for pop3wire tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from pop3wire.utils.config import Config

_ENV_VARS = (
    "POP3WIRE_CONFIG",
    "POP3WIRE_LOG_LEVEL",
    "POP3WIRE_LOG_FORMAT",
    "POP3WIRE_LOG_DIR",
    "POP3WIRE_CAPTURE_PORTS",
    "POP3WIRE_UNSTUFF_BODIES",
    "POP3WIRE_MASK_CREDENTIALS",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """개발자 셸이나 .env의 POP3WIRE_* 값이 테스트에 새어 들어오지 않도록 한다."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("pop3wire.utils.config.load_dotenv", lambda *a, **kw: False)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config pointing logs to a test-specific directory."""
    yaml_content = f"""
pop3wire:
  logging:
    level: DEBUG
    format: text
    directory: "{tmp_path / 'logs'}"
  capture:
    ports: [110, 1110]
  transcript:
    unstuff_bodies: true
  output:
    mask_credentials: true
    body_preview_bytes: 64
"""
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(yaml_content)
    return Config.load(config_file)


@pytest.fixture
def session_bytes() -> tuple[bytes, bytes]:
    """RFC 1939 example session as (client stream, server stream)."""
    client = (
        b"APOP mrose c4c9334bac560ecc979e58001b3e22fb\r\n"
        b"STAT\r\n"
        b"LIST\r\n"
        b"RETR 1\r\n"
        b"DELE 1\r\n"
        b"RETR 2\r\n"
        b"DELE 2\r\n"
        b"QUIT\r\n"
    )
    server = (
        b"+OK POP3 server ready <1896.697170952@dbc.mtview.ca.us>\r\n"
        b"+OK mrose's maildrop has 2 messages (320 octets)\r\n"
        b"+OK 2 320\r\n"
        b"+OK 2 messages (320 octets)\r\n1 120\r\n2 200\r\n.\r\n"
        b"+OK 120 octets\r\nSubject: one\r\n\r\n..dotted line\r\n.\r\n"
        b"+OK message 1 deleted\r\n"
        b"+OK 200 octets\r\nSubject: two\r\n.\r\n"
        b"+OK message 2 deleted\r\n"
        b"+OK dewey POP3 server signing off (maildrop empty)\r\n"
    )
    return client, server
