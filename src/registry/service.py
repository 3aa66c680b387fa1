import ipaddress
import re

from src.network.address import format_peer, remote_ip
from src.registry.clock import ServerClock
from src.registry.config import Settings
from src.registry.decay import DecayScheduler
from src.registry.errors import InvalidArgument
from src.registry.peer_table import PeerTable
from src.registry.record import PORT_MAX, TIMESTAMP_MAX, TIMESTAMP_MIN

INTEGER_RE = re.compile(r'[+-]?[0-9]+', re.ASCII)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_int(value, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidArgument(f"Invalid {name}: '{value}'")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not INTEGER_RE.fullmatch(text):
        raise InvalidArgument(f"Invalid {name}: '{value}' is not an integer")
    return int(text)


def parse_port(value, name: str = 'port'):
    """None for a missing value, else an unsigned 16-bit port."""
    if _is_blank(value):
        return None
    port = _parse_int(value, name)
    if not 0 <= port <= PORT_MAX:
        raise InvalidArgument(f'Invalid {name}: {port} is outside 0-{PORT_MAX}')
    return port


def parse_timestamp(value) -> int:
    if _is_blank(value):
        return 0
    timestamp = _parse_int(value, 'timestamp')
    if not TIMESTAMP_MIN <= timestamp <= TIMESTAMP_MAX:
        raise InvalidArgument(f'Invalid timestamp: {timestamp} is out of range')
    return timestamp


def parse_family(value) -> int:
    if _is_blank(value):
        return 4
    family = str(value).strip()
    if family not in ('4', '6'):
        raise InvalidArgument(f"Expected address family '4' or '6', got '{value}'")
    return int(family)


def parse_subnet(value, family: int):
    """None (match everything) for a missing value, else a network of the given family."""
    if _is_blank(value):
        return None
    if isinstance(value, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        network = value
    else:
        text = str(value).strip()
        if '/' not in text:
            raise InvalidArgument(f"Invalid CIDR '{value}': missing prefix length")
        try:
            network = ipaddress.ip_network(text, strict=False)
        except ValueError as exc:
            raise InvalidArgument(f"Invalid CIDR '{value}': {exc}") from exc
    if network.version != family:
        raise InvalidArgument(f"CIDR '{value}' is not an IPv{family} subnet")
    return network


class Registry:
    """
    Register and Query over one PeerTable per address family.

    Inputs arrive as raw strings from the transport; every check runs before
    a table is touched, so an InvalidArgument never leaves partial state.
    """

    def __init__(self, settings: Settings | None = None, clock: ServerClock | None = None):
        self.settings = settings or Settings()
        self.clock = clock or ServerClock()
        self.shards = {4: PeerTable(4), 6: PeerTable(6)}

    def scheduler(self) -> DecayScheduler:
        return DecayScheduler(self.shards.values(), self.settings.expire_period)

    def register(self, caller_ip, declared_port=None) -> dict:
        port = parse_port(declared_port)
        if port is None:
            port = self.settings.default_port
        ip = remote_ip(caller_ip)

        ttl = self.settings.initial_ttl
        timestamp = self.shards[ip.version].upsert(ip.packed, self.clock.now(), port, ttl)
        peer_id = format_peer(ip, port)
        print(f'[REGISTER] {peer_id} (since={timestamp}, ttl={ttl})')
        return {'peer_id': peer_id, 'timestamp': timestamp, 'ttl': ttl}

    def query(
        self,
        timestamp_floor=None,
        prefer_family=None,
        port_filter=None,
        subnet4=None,
        subnet6=None,
    ) -> dict:
        floor = parse_timestamp(timestamp_floor)
        prefer = parse_family(prefer_family)
        port = parse_port(port_filter, 'port filter') or 0
        subnets = {4: parse_subnet(subnet4, 4), 6: parse_subnet(subnet6, 6)}

        order = (prefer, 6 if prefer == 4 else 4)
        peers = []
        for family in order:
            rows = self.shards[family].list(floor, port, subnets[family])
            rows.sort()
            peers.extend(format_peer(ipaddress.ip_address(key), p) for key, p in rows)

        print(f'[QUERY] {len(peers)} peer(s) (since={floor}, prefer={prefer}, port={port or "any"})')
        return {'now': self.clock.now(), 'peers': peers}
