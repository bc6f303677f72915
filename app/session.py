# app/session.py
"""
Per-client session configuration.

Built once at startup and handed to the sync engine, the booking service and
the routers. The network ID decides which partition of the shared document
this client reads and writes; it never changes while the process runs.
"""

import secrets
import string
from dataclasses import dataclass
from typing import Optional

from app.services.local_cache import LocalCache
from app.utils.logger import get_logger

logger = get_logger(__name__)

NETWORK_ID_KEY = "network_id"
_TOKEN_ALPHABET = string.ascii_uppercase + string.digits


def generate_network_id() -> str:
    return "FLEET-" + "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(5))


@dataclass(frozen=True)
class SessionConfig:
    network_id: str


def resolve_session(cache: LocalCache, requested_network_id: Optional[str] = None) -> SessionConfig:
    """
    Resolution order: explicitly requested ID (shared link / NETWORK_ID),
    then the ID this client used last time, then a freshly generated one.
    The winner is persisted so the next start lands in the same office.
    """
    requested = (requested_network_id or "").strip()
    if requested:
        network_id, source = requested, "requested"
    else:
        remembered = cache.get_meta(NETWORK_ID_KEY)
        if remembered:
            network_id, source = remembered, "remembered"
        else:
            network_id, source = generate_network_id(), "generated"

    cache.set_meta(NETWORK_ID_KEY, network_id)
    logger.info(f"🏢 Network ID {network_id} ({source})")
    return SessionConfig(network_id=network_id)
