"""진입점: python -m pop3wire"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

logger = logging.getLogger("pop3wire.cli")

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_USAGE = 2


def _truncate_bodies(obj: Any, limit: int) -> Any:
    """출력용으로 긴 본문을 limit 문자로 자른다."""
    if isinstance(obj, dict):
        result = {key: _truncate_bodies(value, limit) for key, value in obj.items()}
        body = result.get("body")
        if isinstance(body, str) and len(body) > limit:
            result["body"] = body[:limit]
            result["body_truncated"] = True
            result["body_length"] = len(body)
        return result
    if isinstance(obj, list):
        return [_truncate_bodies(item, limit) for item in obj]
    return obj


def _emit(obj: dict[str, Any], limit: int) -> None:
    sys.stdout.write(json.dumps(_truncate_bodies(obj, limit), ensure_ascii=False) + "\n")


def _read_input(path: str | None) -> bytes:
    if path is None or path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def _run_decode(args: argparse.Namespace, config) -> int:
    """단일 명령/응답 디코딩."""
    from pop3wire.protocols.registry import RESPONSE_GRAMMARS, parse_command, parse_response

    payload = _read_input(args.file)
    if args.direction == "command":
        record = parse_command(payload)
    else:
        if args.verb is None or args.verb.upper() not in RESPONSE_GRAMMARS:
            logger.error("--verb is required for responses (one of %s)", ", ".join(RESPONSE_GRAMMARS))
            return EXIT_USAGE
        record = parse_response(args.verb, payload)

    if record is None:
        logger.warning("No match for %d input bytes", len(payload))
        return EXIT_NO_MATCH

    _emit(
        record.to_dict(config.get("output.mask_credentials", True)),
        config.get("output.body_preview_bytes", 512),
    )
    return EXIT_OK


def _run_pcap(args: argparse.Namespace, config) -> int:
    """PCAP의 POP3 스트림별 대화를 디코딩한다."""
    from pop3wire.capture.pcap_reader import read_pop3_streams
    from pop3wire.session.transcript import decode_transcript

    streams = read_pop3_streams(args.file, config.get("capture.ports", [110]))
    mask = config.get("output.mask_credentials", True)
    limit = config.get("output.body_preview_bytes", 512)
    unstuff = config.get("transcript.unstuff_bodies", True)

    for stream in streams:
        transcript = decode_transcript(
            stream.client_data, stream.server_data, unstuff_bodies=unstuff,
        )
        if not transcript.complete:
            logger.warning(
                "Partial transcript for %s:%d -> %s:%d",
                stream.client[0], stream.client[1], stream.server[0], stream.server[1],
            )
        out = {
            "client": f"{stream.client[0]}:{stream.client[1]}",
            "server": f"{stream.server[0]}:{stream.server[1]}",
        }
        out.update(transcript.to_dict(mask))
        _emit(out, limit)

    if not streams:
        return EXIT_NO_MATCH
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pop3wire",
        description="pop3wire - POP3 (RFC 1939) wire decoder",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to configuration YAML file (default: config/default.yaml)",
    )
    sub = parser.add_subparsers(dest="action", required=True)

    decode = sub.add_parser("decode", help="Decode one command or response")
    decode.add_argument("direction", choices=("command", "response"))
    decode.add_argument("--verb", default=None, help="Response verb (GREETING, STAT, LIST, ...)")
    decode.add_argument("file", nargs="?", default=None, help="Input file (default: stdin)")

    pcap = sub.add_parser("pcap", help="Decode POP3 sessions from a PCAP file")
    pcap.add_argument("file", help="PCAP file")
    return parser


def main(argv: list[str] | None = None) -> int:
    """pop3wire CLI 진입점. 설정을 로드하고 하위 명령을 실행한다."""
    args = build_parser().parse_args(argv)

    from pop3wire.utils.config import Config
    from pop3wire.utils.logging_setup import setup_logging

    try:
        config = Config.load(args.config)
    except FileNotFoundError as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_USAGE
    setup_logging(config)

    try:
        if args.action == "decode":
            return _run_decode(args, config)
        return _run_pcap(args, config)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
