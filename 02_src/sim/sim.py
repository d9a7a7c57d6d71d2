"""SIM implementation - simulated IoT sensors publishing readings."""

import asyncio
import random
from typing import Protocol

import httpx

from mqtt_bridge.logging_config import get_logger
from mqtt_bridge.tracker import ITracker

logger = get_logger(__name__)


class ISim(Protocol):
    """Generate sensor traffic for the bridge."""

    async def start(self) -> None:
        """Start publishing readings."""
        ...

    async def stop(self) -> None:
        """Stop publishing."""
        ...


class Sim:
    """Publishes temperature readings for a fixed set of devices."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        topic: str = "sensors/readings",
        device_ids: list[str] | None = None,
        rounds: int = 5,
        tracker: ITracker | None = None,
    ):
        self._api_url = api_url
        self._topic = topic
        self._device_ids = device_ids or ["sensor-1", "sensor-2", "sensor-3"]
        self._rounds = rounds
        self._tracker = tracker
        self._running = False
        self._task: asyncio.Task | None = None
        self._client: httpx.AsyncClient | None = None

    def set_tracker(self, tracker: ITracker) -> None:
        """Inject tracker for SIM trace events."""
        self._tracker = tracker

    async def start(self) -> None:
        """Start publishing readings."""
        if self._running:
            return

        self._running = True
        self._client = httpx.AsyncClient()
        self._task = asyncio.create_task(self._run_scenario())

    async def stop(self) -> None:
        """Stop publishing."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        if self._client:
            await self._client.aclose()

    @staticmethod
    def make_reading(device_id: str) -> dict:
        """Build one sensor reading payload."""
        return {
            "device_id": device_id,
            "temperature": round(random.uniform(18.0, 40.0), 1),
            "humidity": round(random.uniform(20.0, 80.0), 1),
        }

    async def _run_scenario(self) -> None:
        """Publish `rounds` readings per device with jittered delays."""
        summary = {
            "topic": self._topic,
            "device_count": len(self._device_ids),
            "rounds": self._rounds,
        }
        try:
            if self._tracker:
                await self._tracker.track("sim_started", "sim", summary)

            for _ in range(self._rounds):
                if not self._running:
                    break

                for device_id in self._device_ids:
                    if not self._running:
                        break
                    await self._send_reading(self.make_reading(device_id))
                    await asyncio.sleep(random.uniform(0.5, 1.5))

        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("SIM scenario error: %s", e)
        finally:
            if self._tracker:
                await self._tracker.track("sim_completed", "sim", summary)

    async def _send_reading(self, reading: dict) -> None:
        """Publish one reading through the HTTP API."""
        if not self._client:
            return

        try:
            response = await self._client.post(
                f"{self._api_url}/api/messages",
                json={"topic": self._topic, "payload": reading},
                timeout=10.0,
            )

            if response.status_code == 200:
                logger.info("SIM: %s -> %s", reading["device_id"], self._topic)
            else:
                logger.error(
                    "SIM: Error publishing reading: %s",
                    response.status_code,
                )

        except httpx.HTTPError as e:
            logger.error("SIM: Failed to publish reading: %s", e)
