"""Button semantics for a hardware control surface."""

from __future__ import annotations

import time
import logging
from collections.abc import Callable

from deckbridge.protocol.envelope import Envelope
from deckbridge.state.settings import ReconnectSettings
from deckbridge.config.reconnect import DEFAULT_VOLUME_STEP, DOUBLE_TAP_THRESHOLD_S
from deckbridge.config.protocol import (
    ACTION_PLAY,
    ACTION_STOP,
    ACTION_PAUSE,
    ACTION_SWITCH_TAB,
    ACTION_SET_VOLUME,
    ACTION_TOGGLE_LOOP,
    ACTION_TOGGLE_MUTE,
)

from .backoff import BackoffPolicy
from .engine import ReconnectionEngine
from .surface import LocalSurfaceState

logger = logging.getLogger(__name__)


class ControlSurfaceClient:
    """Every press first checks the link; commands never wait for confirmation.

    While disconnected, two play/pause presses within the double-tap window
    force a reconnect; any other press just kicks off an immediate attempt.
    """

    def __init__(
        self,
        url: str,
        *,
        engine: ReconnectionEngine | None = None,
        settings: ReconnectSettings | None = None,
        volume_step: float = DEFAULT_VOLUME_STEP,
        double_tap_s: float = DOUBLE_TAP_THRESHOLD_S,
        now_fn: Callable[[], float] | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> None:
        self.state = LocalSurfaceState()
        if engine is None:
            policy = BackoffPolicy.from_settings(settings) if settings is not None else BackoffPolicy()
            engine = ReconnectionEngine(
                url,
                policy=policy,
                on_status=on_status,
                health_ping_interval_s=settings.health_ping_interval_s if settings is not None else 30.0,
                connect_timeout_s=settings.connect_timeout_s if settings is not None else 5.0,
            )
        self.engine = engine
        self.engine.on_message = self.handle_envelope
        self.volume_step = float(volume_step)
        self.double_tap_s = float(double_tap_s)
        self._now = now_fn or time.monotonic
        self._last_play_pause = 0.0

    def handle_envelope(self, envelope: Envelope) -> None:
        self.state.apply_authoritative(envelope)

    async def start(self) -> bool:
        return await self.engine.start()

    async def stop(self) -> None:
        await self.engine.stop()

    def status_text(self) -> str:
        return self.engine.status_text()

    async def play_pause(self) -> bool:
        now = self._now()
        if not self.engine.ensure_connected("play_pause"):
            if self._last_play_pause and (now - self._last_play_pause) < self.double_tap_s:
                logger.info("double-tap on play/pause while disconnected; forcing reconnect")
                self._last_play_pause = 0.0
                await self.engine.force_reconnect()
            else:
                self._last_play_pause = now
            return False

        self._last_play_pause = now
        if self.state.is_playing:
            sent = await self.engine.send_action(ACTION_PAUSE)
            self.state.optimistic_pause()
        else:
            sent = await self.engine.send_action(ACTION_PLAY)
            self.state.optimistic_play()
        return sent

    async def stop_playback(self) -> bool:
        if not self.engine.ensure_connected("stop"):
            return False
        sent = await self.engine.send_action(ACTION_STOP)
        self.state.optimistic_stop()
        return sent

    async def volume_up(self) -> bool:
        return await self._set_volume(min(1.0, self.state.volume + self.volume_step), "volume_up")

    async def volume_down(self) -> bool:
        return await self._set_volume(max(0.0, self.state.volume - self.volume_step), "volume_down")

    async def _set_volume(self, volume: float, label: str) -> bool:
        if not self.engine.ensure_connected(label):
            return False
        return await self.engine.send_action(ACTION_SET_VOLUME, {"volume": round(volume, 4)})

    async def toggle_loop(self) -> bool:
        if not self.engine.ensure_connected("loop"):
            return False
        enabled = not self.state.loop_enabled
        sent = await self.engine.send_action(ACTION_TOGGLE_LOOP, {"enabled": enabled})
        self.state.optimistic_loop(enabled)
        return sent

    async def toggle_mute(self) -> bool:
        if not self.engine.ensure_connected("mute"):
            return False
        enabled = not self.state.mute_enabled
        sent = await self.engine.send_action(ACTION_TOGGLE_MUTE, {"enabled": enabled})
        self.state.optimistic_mute(enabled)
        return sent

    async def change_tab(self, tab_number: int) -> bool:
        if not self.engine.ensure_connected("change_tab"):
            return False
        return await self.engine.send_action(ACTION_SWITCH_TAB, {"tabNumber": tab_number})

    async def play_song(self, *, song_id: str | None = None, file_path: str | None = None) -> bool:
        if not self.engine.ensure_connected("play_song"):
            return False
        payload = {}
        if song_id:
            payload["songId"] = song_id
        if file_path:
            payload["filePath"] = file_path
        sent = await self.engine.send_action(ACTION_PLAY, payload)
        self.state.optimistic_play()
        return sent


__all__ = ["ControlSurfaceClient"]
