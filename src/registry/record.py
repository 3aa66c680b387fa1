from typing import NamedTuple

TIMESTAMP_BITS = 32
PORT_BITS = 16
TTL_BITS = 8

TIMESTAMP_MIN = -(1 << (TIMESTAMP_BITS - 1))
TIMESTAMP_MAX = (1 << (TIMESTAMP_BITS - 1)) - 1
PORT_MAX = (1 << PORT_BITS) - 1
TTL_MAX = (1 << TTL_BITS) - 1

_PORT_SHIFT = TTL_BITS
_TIMESTAMP_SHIFT = TTL_BITS + PORT_BITS
_TIMESTAMP_MASK = (1 << TIMESTAMP_BITS) - 1


def encode(timestamp: int, port: int, ttl: int) -> int:
    """
    Pack a liveness record into a single integer.
    Layout (low to high): ttl 8 bits, port 16 bits, timestamp 32 bits signed.
    """
    if not TIMESTAMP_MIN <= timestamp <= TIMESTAMP_MAX:
        raise ValueError(f'timestamp out of range: {timestamp}')
    if not 0 <= port <= PORT_MAX:
        raise ValueError(f'port out of range: {port}')
    if not 0 <= ttl <= TTL_MAX:
        raise ValueError(f'ttl out of range: {ttl}')
    return ((timestamp & _TIMESTAMP_MASK) << _TIMESTAMP_SHIFT) | (port << _PORT_SHIFT) | ttl


def decode(packed: int) -> tuple:
    """Inverse of encode(): returns (timestamp, port, ttl)."""
    ttl = packed & TTL_MAX
    port = (packed >> _PORT_SHIFT) & PORT_MAX
    timestamp = (packed >> _TIMESTAMP_SHIFT) & _TIMESTAMP_MASK
    if timestamp > TIMESTAMP_MAX:
        timestamp -= 1 << TIMESTAMP_BITS
    return timestamp, port, ttl


class LivenessRecord(NamedTuple):
    timestamp: int
    port: int
    ttl: int

    def pack(self) -> int:
        return encode(self.timestamp, self.port, self.ttl)

    @classmethod
    def unpack(cls, packed: int) -> 'LivenessRecord':
        return cls(*decode(packed))
