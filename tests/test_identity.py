from __future__ import annotations

import logging
import uuid

import pytest

from snowid.core import identity
from snowid.core.layout import get_layout
from snowid.errors import InvalidIdentity


def test_derive_from_hardware_bytes(caplog):
    caplog.set_level(logging.INFO, logger=identity.__name__)
    mac = bytes([0x00, 0x1A, 0x2B, 0x3C, 0x4D, 0x5E])
    assert identity.derive_worker_id(31, lambda: mac) == sum(mac) % 32
    assert "MAC address" in caplog.text


def test_derive_is_deterministic():
    mac = bytes([0xFF] * 6)
    assert identity.derive_worker_id(31, lambda: mac) == identity.derive_worker_id(31, lambda: mac)
    assert identity.derive_worker_id(1023, lambda: mac) == (0xFF * 6) % 1024


def test_missing_hardware_id_falls_back_to_random(caplog, monkeypatch):
    monkeypatch.setattr(identity.secrets, "randbelow", lambda n: n - 1)
    with caplog.at_level(logging.WARNING, logger=identity.__name__):
        assert identity.derive_worker_id(31, lambda: None) == 31
    assert "random worker id" in caplog.text


def test_provider_error_falls_back_to_random(caplog):
    def broken() -> bytes:
        raise OSError("no interface")

    with caplog.at_level(logging.WARNING, logger=identity.__name__):
        worker_id = identity.derive_worker_id(31, broken)
    assert 0 <= worker_id <= 31
    assert "no interface" in caplog.text


def test_mac_address_bytes(monkeypatch):
    monkeypatch.setattr(uuid, "getnode", lambda: 0x001A2B3C4D5E)
    assert identity.mac_address_bytes() == bytes([0x00, 0x1A, 0x2B, 0x3C, 0x4D, 0x5E])

    # Random node from getnode() has the multicast bit set.
    monkeypatch.setattr(uuid, "getnode", lambda: 0x011A2B3C4D5E)
    assert identity.mac_address_bytes() is None


def test_split_machine_id():
    layout = get_layout("standard")
    assert identity.split_machine_id(0, layout) == (0, 0)
    assert identity.split_machine_id(1023, layout) == (31, 31)
    assert identity.split_machine_id((4 << 5) | 9, layout) == (4, 9)

    with pytest.raises(InvalidIdentity) as excinfo:
        identity.split_machine_id(-1, layout)
    assert excinfo.value.field == "machine_id"
    assert excinfo.value.maximum == 1023
