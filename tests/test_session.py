"""Unit tests for network ID resolution."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import re
from dataclasses import FrozenInstanceError

import pytest

from app.session import NETWORK_ID_KEY, SessionConfig, generate_network_id, resolve_session


class TestNetworkId:
    def test_generated_format(self):
        assert re.fullmatch(r"FLEET-[A-Z0-9]{5}", generate_network_id())

    def test_requested_id_wins_and_is_remembered(self, cache):
        cache.set_meta(NETWORK_ID_KEY, "FLEET-OLD01")

        session = resolve_session(cache, "  FLEET-LINK1 ")

        assert session.network_id == "FLEET-LINK1"
        assert cache.get_meta(NETWORK_ID_KEY) == "FLEET-LINK1"

    def test_remembered_id_used_when_none_requested(self, cache):
        cache.set_meta(NETWORK_ID_KEY, "FLEET-OLD01")
        assert resolve_session(cache).network_id == "FLEET-OLD01"

    def test_blank_request_treated_as_absent(self, cache):
        cache.set_meta(NETWORK_ID_KEY, "FLEET-OLD01")
        assert resolve_session(cache, "   ").network_id == "FLEET-OLD01"

    def test_new_client_generates_and_persists(self, cache):
        first = resolve_session(cache)
        second = resolve_session(cache)

        assert re.fullmatch(r"FLEET-[A-Z0-9]{5}", first.network_id)
        assert second.network_id == first.network_id

    def test_session_is_immutable(self):
        session = SessionConfig(network_id="FLEET-AAAAA")
        with pytest.raises(FrozenInstanceError):
            session.network_id = "FLEET-BBBBB"
