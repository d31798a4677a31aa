import pytest

from trackmate.timing import CONFIRMED_PREFERENCE_KEY, HandoffState, MemoryPreferences, TimingHandoff


class FakeTimer:
    """Timer that only fires when the test says so"""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


class Page:

    def __init__(self):
        self.visible = True
        self.opened = []
        self.timers = []

    def navigate(self, url):
        self.opened.append(url)

    def timer(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer


@pytest.fixture
def page():
    return Page()


def make_handoff(page, preferences=None, timeout_ms=1200):
    return TimingHandoff(
        navigate=page.navigate,
        is_page_visible=lambda: page.visible,
        preferences=preferences,
        timeout_ms=timeout_ms,
        timer_factory=page.timer
    )


def test_track_selection_makes_ready(page):
    handoff = make_handoff(page)
    assert handoff.state == HandoffState.IDLE
    assert handoff.select('t1', ui_conditions='dry_cool') == HandoffState.READY
    assert handoff.deep_link == 'trackmate://timing?v=1&trackId=t1&conditions=dry'
    assert handoff.select(None) == HandoffState.IDLE


def test_open_without_track_does_nothing(page):
    handoff = make_handoff(page)
    assert handoff.request_open() == HandoffState.IDLE
    assert page.opened == []


def test_first_open_asks_for_confirmation(page):
    handoff = make_handoff(page)
    handoff.select('t1', car_id='c1')
    assert handoff.request_open() == HandoffState.AWAITING_CONFIRMATION
    assert page.opened == []

    assert handoff.confirm() == HandoffState.LINK_DISPATCHED
    assert page.opened == ['trackmate://timing?v=1&trackId=t1&carId=c1']
    assert page.timers[0].interval == pytest.approx(1.2)
    assert page.timers[0].started
    assert not handoff.has_confirmed


def test_cancel_confirmation_returns_to_ready(page):
    handoff = make_handoff(page)
    handoff.select('t1')
    handoff.request_open()
    assert handoff.cancel_confirmation() == HandoffState.READY
    assert page.opened == []


def test_dont_show_again_is_remembered(page):
    preferences = MemoryPreferences()
    handoff = make_handoff(page, preferences)
    handoff.select('t1')
    handoff.request_open()
    handoff.confirm(dont_show_again=True)
    assert preferences.get(CONFIRMED_PREFERENCE_KEY) == 'true'

    again = make_handoff(page, preferences)
    again.select('t2')
    assert again.request_open() == HandoffState.LINK_DISPATCHED
    assert page.opened[-1] == 'trackmate://timing?v=1&trackId=t2'


def test_visible_page_after_timeout_shows_fallback(page):
    handoff = make_handoff(page, MemoryPreferences({CONFIRMED_PREFERENCE_KEY: 'true'}))
    handoff.select('t1')
    handoff.request_open()
    page.timers[-1].fire()
    assert handoff.state == HandoffState.FALLBACK_SHOWN
    assert handoff.copyable_link == 'trackmate://timing?v=1&trackId=t1'

    assert handoff.retry() == HandoffState.LINK_DISPATCHED
    assert len(page.opened) == 2
    assert page.timers[0].cancelled is False
    assert len(page.timers) == 2


def test_hidden_page_after_timeout_means_app_opened(page):
    handoff = make_handoff(page, MemoryPreferences({CONFIRMED_PREFERENCE_KEY: 'true'}))
    handoff.select('t1')
    handoff.request_open()
    page.visible = False
    page.timers[-1].fire()
    assert handoff.state == HandoffState.APP_OPENED


def test_dismiss_fallback(page):
    handoff = make_handoff(page, MemoryPreferences({CONFIRMED_PREFERENCE_KEY: 'true'}))
    handoff.select('t1')
    handoff.request_open()
    page.timers[-1].fire()
    assert handoff.dismiss_fallback() == HandoffState.READY


def test_leave_cancels_pending_timer(page):
    handoff = make_handoff(page, MemoryPreferences({CONFIRMED_PREFERENCE_KEY: 'true'}))
    handoff.select('t1')
    handoff.request_open()
    timer = page.timers[-1]

    handoff.leave()
    assert timer.cancelled
    timer.fire()
    assert handoff.state == HandoffState.IDLE


def test_redispatch_cancels_previous_timer(page):
    handoff = make_handoff(page, MemoryPreferences({CONFIRMED_PREFERENCE_KEY: 'true'}))
    handoff.select('t1')
    handoff.request_open()
    handoff.request_open()
    assert page.timers[0].cancelled
    assert not page.timers[1].cancelled


def test_auto_open_once_per_visit(page):
    handoff = make_handoff(page, MemoryPreferences({CONFIRMED_PREFERENCE_KEY: 'true'}))
    handoff.select('t1')
    assert handoff.maybe_auto_open() is True
    assert handoff.maybe_auto_open() is False
    assert len(page.opened) == 1


def test_auto_open_needs_prior_confirmation(page):
    handoff = make_handoff(page)
    handoff.select('t1')
    assert handoff.maybe_auto_open() is False
    assert page.opened == []


def test_superseded_timer_callback_is_ignored(page):
    handoff = make_handoff(page, MemoryPreferences({CONFIRMED_PREFERENCE_KEY: 'true'}))
    handoff.select('t1')
    handoff.request_open()
    first = page.timers[0]
    first.fire()
    assert handoff.state == HandoffState.FALLBACK_SHOWN

    handoff.retry()
    second = page.timers[1]
    # Fires even though cancelled, as a real timer already waiting on the lock would
    first.callback()
    assert handoff.state == HandoffState.LINK_DISPATCHED

    handoff.leave()
    assert second.cancelled


def test_configured_timeout_drives_timer(page):
    handoff = make_handoff(page, MemoryPreferences({CONFIRMED_PREFERENCE_KEY: 'true'}), timeout_ms=3000)
    handoff.select('t1')
    handoff.request_open()
    assert page.timers[-1].interval == pytest.approx(3.0)
