import ipaddress
from typing import Dict, List, Optional, Tuple

from src.registry.record import LivenessRecord, decode, encode
from src.registry.rwlock import ReadWriteLock


class PeerTable:
    """
    Peers of one address family, keyed by packed IP bytes.

    Records are stored bit-packed (see record.encode). upsert() and decay()
    hold the write lock, list() and get() the read lock, so every listing
    sees the table between two whole writes.
    """

    def __init__(self, family: int = 4):
        if family not in (4, 6):
            raise ValueError(f'Unknown address family: {family}')
        self.family = family
        self._lock = ReadWriteLock()
        self._peers: Dict[bytes, int] = {}

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._peers)

    def upsert(self, key: bytes, observed_timestamp: int, port: int, initial_ttl: int) -> int:
        """
        Insert or refresh a peer and return the timestamp left in the table.

        Same port as the stored record: timestamp is kept, ttl is reset.
        New peer or different port: the observed timestamp is stored.
        """
        with self._lock.write():
            packed = self._peers.get(key)
            timestamp = observed_timestamp
            if packed is not None:
                stored_ts, stored_port, _ttl = decode(packed)
                if stored_port == port:
                    timestamp = stored_ts
            self._peers[key] = encode(timestamp, port, initial_ttl)
            return timestamp

    def decay(self, delta: int) -> List[bytes]:
        """Subtract delta from every ttl; drop and return the keys that reach zero."""
        if delta <= 0:
            raise ValueError(f'decay delta must be positive, got {delta}')
        expired = []
        with self._lock.write():
            for key, packed in list(self._peers.items()):
                timestamp, port, ttl = decode(packed)
                if ttl <= delta:
                    del self._peers[key]
                    expired.append(key)
                else:
                    self._peers[key] = encode(timestamp, port, ttl - delta)
        return expired

    def list(
        self,
        timestamp_floor: int = 0,
        port_filter: int = 0,
        subnet_filter=None,
    ) -> List[Tuple[bytes, int]]:
        """
        Return (key, port) for every record with timestamp >= timestamp_floor,
        port equal to port_filter (0 = any) and address inside subnet_filter
        (None or a /0 network = any). Order is unspecified.
        """
        if subnet_filter is not None and subnet_filter.prefixlen == 0:
            subnet_filter = None

        matches = []
        with self._lock.read():
            for key, packed in self._peers.items():
                timestamp, port, _ttl = decode(packed)
                if timestamp < timestamp_floor:
                    continue
                if port_filter and port != port_filter:
                    continue
                if subnet_filter is not None and ipaddress.ip_address(key) not in subnet_filter:
                    continue
                matches.append((key, port))
        return matches

    def get(self, key: bytes) -> Optional[LivenessRecord]:
        with self._lock.read():
            packed = self._peers.get(key)
        return LivenessRecord.unpack(packed) if packed is not None else None
