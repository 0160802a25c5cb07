"""
Meeting room provider client.

Wraps the Daily.co REST API used for video and audio sessions. Without an
API key the client stays offline and hands out deterministic room URLs on the
configured Daily domain, which is enough for local development.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from emotions_app.core.exceptions import ExternalServiceError
from emotions_app.core.logging_config import get_logger
from emotions_app.server.core.config import DailyConfig

logger = get_logger(__name__)

_ROOM_NAME_UNSAFE = re.compile(r"[^A-Za-z0-9-]")


@dataclass(frozen=True)
class MeetingRoom:
    name: str
    url: str


def epoch_millis() -> int:
    return int(time.time() * 1000)


def appointment_room_name(patient_id: str, mentor_id: str, stamp: Optional[int] = None) -> str:
    """Room name used when an appointment is booked."""
    return f"appointment-{patient_id[:8]}-{mentor_id[:8]}-{stamp if stamp is not None else epoch_millis()}"


def session_room_name(prefix: str, entity_id: str, stamp: Optional[int] = None) -> str:
    """Room name for a live session; a fresh name per start avoids stale rooms."""
    safe_id = _ROOM_NAME_UNSAFE.sub("", entity_id)
    return f"{prefix}-{safe_id}-{stamp if stamp is not None else epoch_millis()}"


class MeetingRoomClient:
    """Create rooms on Daily.co."""

    def __init__(self, config: DailyConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.config = config
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    def fallback_url(self, name: str) -> str:
        return f"{self.config.domain_url.rstrip('/')}/{name}"

    async def create_room(
        self,
        name: str,
        privacy: str = "public",
        expiry_seconds: Optional[int] = None,
        properties: Optional[Dict[str, Any]] = None,
    ) -> MeetingRoom:
        """Create a room and return its public URL.

        Args:
            name: Room name, unique per provider domain
            privacy: ``public`` or ``private``
            expiry_seconds: Room lifetime from now; no expiry when omitted
            properties: Extra Daily.co room properties (e.g. ``start_video_off``)

        Raises:
            ExternalServiceError: when the provider rejects the request or is unreachable.
        """
        if not self.is_configured:
            logger.debug(f"Daily.co API key not configured, using fallback URL for room {name}")
            return MeetingRoom(name=name, url=self.fallback_url(name))

        room_properties: Dict[str, Any] = {"enable_chat": True, "enable_screenshare": True}
        if expiry_seconds:
            room_properties["exp"] = int(time.time()) + expiry_seconds
        room_properties.update(properties or {})
        payload = {"name": name, "privacy": privacy, "properties": room_properties}

        try:
            async with httpx.AsyncClient(
                base_url=self.config.api_url,
                headers={"Authorization": f"Bearer {self.config.api_key}"},
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post("/rooms", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Daily.co rejected room {name}: {e.response.status_code} {e.response.text}")
            raise ExternalServiceError(f"Meeting room provider returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Daily.co request for room {name} failed: {e}")
            raise ExternalServiceError("Meeting room provider is unreachable") from e

        url = data.get("url") or self.fallback_url(data.get("name", name))
        logger.info(f"Created meeting room {name}")
        return MeetingRoom(name=data.get("name", name), url=url)
