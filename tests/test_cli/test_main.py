"""Tests for the pop3wire command line."""

from __future__ import annotations

import json
import logging

import pytest
from scapy.all import IP, TCP, Ether, Raw, wrpcap

from pop3wire.__main__ import EXIT_NO_MATCH, EXIT_OK, EXIT_USAGE, main


@pytest.fixture(autouse=True)
def _reset_pop3wire_logger():
    yield
    root = logging.getLogger("pop3wire")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def config_file(config) -> str:
    return config.config_path


def _lines(capsys) -> list[dict]:
    out = capsys.readouterr().out
    return [json.loads(line) for line in out.splitlines() if line]


class TestDecodeCommand:
    def test_command(self, tmp_path, config_file, capsys):
        path = tmp_path / "cmd.bin"
        path.write_bytes(b"TOP 1 10\r\n")
        assert main(["-c", config_file, "decode", "command", str(path)]) == EXIT_OK
        assert _lines(capsys) == [{"verb": "TOP", "msg": 1, "lines": 10}]

    def test_password_masked(self, tmp_path, config_file, capsys):
        path = tmp_path / "cmd.bin"
        path.write_bytes(b"PASS secret\r\n")
        assert main(["-c", config_file, "decode", "command", str(path)]) == EXIT_OK
        assert _lines(capsys)[0]["password"] == "***"

    def test_no_match(self, tmp_path, config_file, capsys):
        path = tmp_path / "cmd.bin"
        path.write_bytes(b"CAPA\r\n")
        assert main(["-c", config_file, "decode", "command", str(path)]) == EXIT_NO_MATCH
        assert capsys.readouterr().out == ""


class TestDecodeResponse:
    def test_response(self, tmp_path, config_file, capsys):
        path = tmp_path / "resp.bin"
        path.write_bytes(b"+OK 2 320\r\n")
        code = main(["-c", config_file, "decode", "response", "--verb", "stat", str(path)])
        assert code == EXIT_OK
        assert _lines(capsys) == [
            {"verb": "STAT", "status": "+OK", "message": "", "count": 2, "size": 320},
        ]

    def test_body_truncated(self, tmp_path, config_file, capsys):
        path = tmp_path / "resp.bin"
        path.write_bytes(b"+OK 100 octets\r\n" + b"x" * 100 + b"\r\n.\r\n")
        code = main(["-c", config_file, "decode", "response", "--verb", "RETR", str(path)])
        assert code == EXIT_OK
        record = _lines(capsys)[0]
        assert len(record["body"]) == 64
        assert record["body_truncated"] is True
        assert record["body_length"] == 100

    def test_verb_required(self, tmp_path, config_file):
        path = tmp_path / "resp.bin"
        path.write_bytes(b"+OK\r\n")
        assert main(["-c", config_file, "decode", "response", str(path)]) == EXIT_USAGE

    def test_missing_input_file(self, tmp_path, config_file):
        code = main(["-c", config_file, "decode", "command", str(tmp_path / "missing.bin")])
        assert code == EXIT_USAGE


class TestPcap:
    def test_transcript_per_stream(self, tmp_path, config_file, capsys):
        client, server = ("192.168.1.22", 50000), ("192.168.1.10", 110)
        packets = [
            Ether() / IP(src=server[0], dst=client[0])
            / TCP(sport=110, dport=50000, seq=1) / Raw(load=b"+OK ready\r\n"),
            Ether() / IP(src=client[0], dst=server[0])
            / TCP(sport=50000, dport=110, seq=1) / Raw(load=b"STAT\r\n"),
            Ether() / IP(src=server[0], dst=client[0])
            / TCP(sport=110, dport=50000, seq=12) / Raw(load=b"+OK 2 320\r\n"),
        ]
        path = tmp_path / "pop3.pcap"
        wrpcap(str(path), packets)

        assert main(["-c", config_file, "pcap", str(path)]) == EXIT_OK
        [stream] = _lines(capsys)
        assert stream["client"] == "192.168.1.22:50000"
        assert stream["server"] == "192.168.1.10:110"
        assert stream["greeting"]["message"] == "ready"
        assert stream["exchanges"][0]["response"]["count"] == 2
        assert stream["complete"] is True

    def test_missing_pcap(self, tmp_path, config_file):
        assert main(["-c", config_file, "pcap", str(tmp_path / "missing.pcap")]) == EXIT_USAGE

    def test_missing_config(self, tmp_path):
        assert main(["-c", str(tmp_path / "nope.yaml"), "pcap", "x.pcap"]) == EXIT_USAGE
