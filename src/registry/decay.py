import ipaddress
import threading
from typing import Dict, Iterable, List

from src.registry.peer_table import PeerTable


class DecayScheduler:
    """
    Periodic sweep over every shard.

    Each tick subtracts the nominal expire_period from every ttl, even when
    the tick itself fired late.
    """

    def __init__(self, shards: Iterable[PeerTable], expire_period: int = 10):
        if expire_period <= 0:
            raise ValueError(f'expire_period must be positive, got {expire_period}')
        self.shards = list(shards)
        self.expire_period = expire_period
        self._stop = threading.Event()
        self._thread = None

    def tick(self) -> Dict[int, List[bytes]]:
        expired = {}
        for shard in self.shards:
            keys = shard.decay(self.expire_period)
            for key in keys:
                print(f'[DECAY] Peer expired: {ipaddress.ip_address(key)}')
            expired[shard.family] = keys
        return expired

    def _run(self):
        print(f'[DECAY] Sweeping {len(self.shards)} shard(s) every {self.expire_period}s')
        while not self._stop.wait(self.expire_period):
            try:
                self.tick()
            except Exception as e:
                print(f'[DECAY] Sweep error: {e}')

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='decay-scheduler', daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
