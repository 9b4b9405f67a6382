"""PCAP 파일에서 POP3 TCP 스트림을 재조립한다."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from scapy.all import IP, TCP, IPv6, Packet, PcapReader, Raw

logger = logging.getLogger("pop3wire.capture.pcap_reader")

DEFAULT_POP3_PORTS = (110,)

Endpoint = tuple[str, int]


SEQ_SPACE = 2 ** 32


def _seq_before(a: int, b: int) -> bool:
    """32비트 시퀀스 공간에서 a가 b보다 앞서는지 (RFC 1982 직렬 비교)."""
    return a != b and (b - a) % SEQ_SPACE < SEQ_SPACE // 2


@dataclass
class _Segments:
    """한 방향의 TCP 세그먼트. 같은 시퀀스 번호는 가장 긴 페이로드만 유지한다."""
    by_seq: dict[int, bytes] = field(default_factory=dict)
    retransmissions: int = 0

    def add(self, seq: int, payload: bytes) -> None:
        seq %= SEQ_SPACE
        known = self.by_seq.get(seq)
        if known is not None:
            self.retransmissions += 1
            # 재전송이 여러 세그먼트를 합쳐 더 길어질 수 있다
            if len(payload) <= len(known):
                return
        self.by_seq[seq] = payload

    def _base(self) -> int:
        base = None
        for seq in self.by_seq:
            if base is None or _seq_before(seq, base):
                base = seq
        return base

    def assemble(self) -> bytes:
        """시퀀스 순으로 이어 붙인다. 겹치는 구간은 한 번만 포함한다.

        순서는 가장 앞선 시퀀스 번호로부터의 오프셋으로 정하므로 2**32
        경계를 넘는 스트림도 이어진다.
        """
        if not self.by_seq:
            return b""
        base = self._base()
        data = bytearray()
        next_offset: int | None = None
        for offset, seq in sorted(((seq - base) % SEQ_SPACE, seq) for seq in self.by_seq):
            payload = self.by_seq[seq]
            if next_offset is not None and offset < next_offset:
                overlap = next_offset - offset
                if overlap >= len(payload):
                    continue
                payload = payload[overlap:]
                offset = next_offset
            elif next_offset is not None and offset > next_offset:
                logger.debug("Gap of %d bytes in TCP stream", offset - next_offset)
            data += payload
            next_offset = offset + len(payload)
        return bytes(data)


@dataclass
class Pop3Stream:
    """하나의 POP3 TCP 연결에서 재조립된 양방향 바이트."""
    client: Endpoint
    server: Endpoint
    client_data: bytes = b""
    server_data: bytes = b""


def _ip_addrs(packet: Packet) -> tuple[str | None, str | None]:
    """패킷에서 (src_ip, dst_ip) 추출. IPv4/IPv6 모두 지원."""
    if packet.haslayer(IP):
        return packet[IP].src, packet[IP].dst
    if packet.haslayer(IPv6):
        return packet[IPv6].src, packet[IPv6].dst
    return None, None


def extract_pop3_streams(
    packets: Iterable[Packet],
    ports: Iterable[int] = DEFAULT_POP3_PORTS,
) -> list[Pop3Stream]:
    """패킷 목록에서 POP3 연결별 스트림을 처음 관측된 순서로 반환한다."""
    pop3_ports = frozenset(ports)
    flows: dict[tuple[Endpoint, Endpoint], tuple[_Segments, _Segments]] = {}

    for packet in packets:
        if not packet.haslayer(TCP) or not packet.haslayer(Raw):
            continue
        src_ip, dst_ip = _ip_addrs(packet)
        if src_ip is None:
            continue

        tcp = packet[TCP]
        if tcp.dport in pop3_ports:
            client, server = (src_ip, tcp.sport), (dst_ip, tcp.dport)
            from_client = True
        elif tcp.sport in pop3_ports:
            client, server = (dst_ip, tcp.dport), (src_ip, tcp.sport)
            from_client = False
        else:
            continue

        to_server, to_client = flows.setdefault((client, server), (_Segments(), _Segments()))
        segments = to_server if from_client else to_client
        segments.add(tcp.seq, bytes(packet[Raw].load))

    streams: list[Pop3Stream] = []
    for (client, server), (to_server, to_client) in flows.items():
        retransmissions = to_server.retransmissions + to_client.retransmissions
        if retransmissions:
            logger.debug(
                "Merged %d retransmitted segments in %s:%d -> %s:%d",
                retransmissions, client[0], client[1], server[0], server[1],
            )
        streams.append(Pop3Stream(
            client=client,
            server=server,
            client_data=to_server.assemble(),
            server_data=to_client.assemble(),
        ))
    return streams


def read_pop3_streams(
    path: str | Path,
    ports: Iterable[int] = DEFAULT_POP3_PORTS,
) -> list[Pop3Stream]:
    """PCAP 파일을 읽어 POP3 스트림 목록을 반환한다.

    Raises:
        FileNotFoundError: 파일이 존재하지 않는 경우.
    """
    pcap = Path(path)
    if not pcap.exists():
        raise FileNotFoundError(f"PCAP file not found: {pcap}")

    with PcapReader(str(pcap)) as reader:
        streams = extract_pop3_streams(reader, ports)

    logger.info("Reassembled %d POP3 streams from %s", len(streams), pcap)
    return streams
