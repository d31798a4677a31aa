"""
Timing App Handoff

Client-side state machine for "start timing": dispatch the deep link, then
decide after a fixed delay whether the native app took over.

    idle -> ready -> [awaiting_confirmation] -> link_dispatched
         -> app_opened | fallback_shown

There is no acknowledgement channel from the native app. When the timer
fires, a page that is still visible means the app did not open (fallback
offered: retry or copy the raw link); a hidden page means it did.

Usage:
    handoff = TimingHandoff(navigate=open_url, is_page_visible=page_visible)
    handoff.select(track_id='abc-123', ui_conditions='dry_warm')
    handoff.request_open()        # first time: awaiting_confirmation
    handoff.confirm(dont_show_again=True)
    ...
    handoff.leave()               # cancels the pending fallback timer
"""

import logging
import threading
from functools import partial
from enum import Enum
from typing import Callable, Dict, Optional

from ..config import DEFAULT_DEEP_LINK_TIMEOUT_MS
from .deeplinks import build_timing_deep_link, normalize_conditions

logger = logging.getLogger(__name__)

CONFIRMED_PREFERENCE_KEY = 'hasConfirmedTimingDeepLink'


class HandoffState(str, Enum):
    IDLE = 'idle'
    READY = 'ready'
    AWAITING_CONFIRMATION = 'awaiting_confirmation'
    LINK_DISPATCHED = 'link_dispatched'
    APP_OPENED = 'app_opened'
    FALLBACK_SHOWN = 'fallback_shown'


class MemoryPreferences:
    """Key/value preference store kept in memory"""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class TimingHandoff:
    """
    Deep-link handoff to the native Timing app

    Args:
        navigate: Called with the deep link URL on dispatch
        is_page_visible: Sampled when the fallback timer fires
        preferences: Store for the "don't show again" confirmation
        timeout_ms: Delay before deciding the app did not open
        timer_factory: threading.Timer-compatible factory (interval_s, callback)
    """

    def __init__(self,
                 navigate: Callable[[str], None],
                 is_page_visible: Callable[[], bool],
                 preferences=None,
                 timeout_ms: int = DEFAULT_DEEP_LINK_TIMEOUT_MS,
                 timer_factory=threading.Timer):
        self._navigate = navigate
        self._is_page_visible = is_page_visible
        self._preferences = preferences if preferences is not None else MemoryPreferences()
        self._timeout_ms = timeout_ms
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._timer = None
        self._auto_opened = False
        self._dispatch_id = 0

        self.state = HandoffState.IDLE
        self.track_id: Optional[str] = None
        self.car_id: Optional[str] = None
        self.conditions: Optional[str] = None
        self.last_deep_link: Optional[str] = None

    @classmethod
    def from_settings(cls, settings, navigate, is_page_visible, **kwargs) -> 'TimingHandoff':
        """Handoff using the configured fallback delay (TRACKMATE_DEEP_LINK_TIMEOUT_MS)"""
        return cls(navigate, is_page_visible, timeout_ms=settings.deep_link_timeout_ms, **kwargs)

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def has_confirmed(self) -> bool:
        return self._preferences.get(CONFIRMED_PREFERENCE_KEY) == 'true'

    @property
    def deep_link(self) -> Optional[str]:
        """Link for the current selection"""
        return build_timing_deep_link(self.track_id, self.car_id, self.conditions)

    @property
    def copyable_link(self) -> Optional[str]:
        """Link offered for copying in the fallback view"""
        return self.last_deep_link or self.deep_link

    def select(self, track_id: Optional[str], car_id: Optional[str] = None,
               ui_conditions: Optional[str] = None) -> HandoffState:
        """Update the selection; a track is what makes the handoff ready"""
        with self._lock:
            self.track_id = track_id or None
            self.car_id = car_id or None
            self.conditions = normalize_conditions(ui_conditions) if ui_conditions else None
            if self.state in (HandoffState.IDLE, HandoffState.READY):
                self.state = HandoffState.READY if self.track_id else HandoffState.IDLE
            return self.state

    def request_open(self) -> HandoffState:
        """'Open Timing app' pressed"""
        with self._lock:
            if not self.track_id:
                return self.state
            if not self.has_confirmed:
                self.state = HandoffState.AWAITING_CONFIRMATION
                return self.state
            self._dispatch()
            return self.state

    def maybe_auto_open(self) -> bool:
        """
        Open once per page visit for drivers who already confirmed

        Returns:
            True if the link was dispatched
        """
        with self._lock:
            if self._auto_opened or not self.has_confirmed or not self.track_id:
                return False
            self._auto_opened = True
            self._dispatch()
            return True

    def confirm(self, dont_show_again: bool = False) -> HandoffState:
        with self._lock:
            if self.state != HandoffState.AWAITING_CONFIRMATION:
                return self.state
            if dont_show_again:
                self._preferences.set(CONFIRMED_PREFERENCE_KEY, 'true')
            self._dispatch()
            return self.state

    def cancel_confirmation(self) -> HandoffState:
        with self._lock:
            if self.state == HandoffState.AWAITING_CONFIRMATION:
                self.state = HandoffState.READY
            return self.state

    def retry(self) -> HandoffState:
        """'Try again' in the fallback view"""
        with self._lock:
            if self.state == HandoffState.FALLBACK_SHOWN:
                self._dispatch()
            return self.state

    def dismiss_fallback(self) -> HandoffState:
        with self._lock:
            if self.state == HandoffState.FALLBACK_SHOWN:
                self.state = HandoffState.READY
            return self.state

    def leave(self) -> None:
        """Leaving the timing page clears the pending fallback timer"""
        with self._lock:
            self._cancel_timer()
            self.state = HandoffState.IDLE

    def _dispatch(self):
        url = self.deep_link
        if not url:
            return

        self._cancel_timer()
        self.last_deep_link = url
        self.state = HandoffState.LINK_DISPATCHED
        logger.info("[Handoff] Dispatching %s", url)
        self._navigate(url)

        self._dispatch_id += 1
        callback = partial(self._on_timeout, self._dispatch_id)
        self._timer = self._timer_factory(self._timeout_ms / 1000.0, callback)
        self._timer.start()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timeout(self, dispatch_id: int):
        with self._lock:
            # A cancelled timer may still fire once it is already waiting on the lock
            if dispatch_id != self._dispatch_id:
                return
            self._timer = None
            if self.state != HandoffState.LINK_DISPATCHED:
                return
            if self._is_page_visible():
                self.state = HandoffState.FALLBACK_SHOWN
                logger.info("[Handoff] Page still visible after %sms, showing fallback", self._timeout_ms)
            else:
                self.state = HandoffState.APP_OPENED
