"""Tests for the periodic decay sweep."""

import ipaddress
import time

import pytest

from src.registry.decay import DecayScheduler
from src.registry.peer_table import PeerTable


def key(ip: str) -> bytes:
    return ipaddress.ip_address(ip).packed


class TestDecayScheduler:
    def test_tick_sweeps_every_shard(self):
        v4, v6 = PeerTable(4), PeerTable(6)
        v4.upsert(key('203.0.113.7'), 0, 443, 10)
        v6.upsert(key('2001:db8::7'), 0, 443, 20)
        scheduler = DecayScheduler([v4, v6], expire_period=10)

        assert scheduler.tick() == {4: [key('203.0.113.7')], 6: []}
        assert len(v4) == 0
        assert v6.get(key('2001:db8::7')).ttl == 10

        assert scheduler.tick() == {4: [], 6: [key('2001:db8::7')]}
        assert len(v6) == 0

    def test_six_ticks_expire_sixty_second_peer(self):
        table = PeerTable(4)
        table.upsert(key('203.0.113.7'), 100, 443, 60)
        scheduler = DecayScheduler([table], expire_period=10)

        for _ in range(5):
            scheduler.tick()
            assert len(table) == 1
        scheduler.tick()
        assert table.list() == []

    def test_rejects_non_positive_period(self):
        with pytest.raises(ValueError):
            DecayScheduler([PeerTable(4)], expire_period=0)

    def test_background_thread_decays(self):
        table = PeerTable(4)
        table.upsert(key('10.0.0.1'), 0, 80, 1)
        scheduler = DecayScheduler([table], expire_period=1)
        scheduler.start()
        try:
            assert scheduler.running
            deadline = time.monotonic() + 5
            while len(table) and time.monotonic() < deadline:
                time.sleep(0.05)
            assert len(table) == 0
        finally:
            scheduler.stop(timeout=2)
        assert not scheduler.running

    def test_failed_sweep_keeps_thread_alive(self, capsys):
        table = PeerTable(4)
        table.upsert(key('10.0.0.1'), 0, 80, 2)
        scheduler = DecayScheduler([table], expire_period=1)
        calls = []
        real_tick = scheduler.tick

        def flaky_tick():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError('boom')
            return real_tick()

        scheduler.tick = flaky_tick
        scheduler.start()
        try:
            deadline = time.monotonic() + 6
            while len(table) and time.monotonic() < deadline:
                time.sleep(0.05)
            assert scheduler.running
            assert len(table) == 0
        finally:
            scheduler.stop(timeout=2)
        assert '[DECAY] Sweep error: boom' in capsys.readouterr().out

    def test_start_twice_keeps_one_thread(self):
        scheduler = DecayScheduler([PeerTable(4)], expire_period=60)
        scheduler.start()
        first = scheduler._thread
        scheduler.start()
        assert scheduler._thread is first
        scheduler.stop(timeout=2)

    def test_stop_without_start(self):
        DecayScheduler([PeerTable(4)], expire_period=10).stop()
