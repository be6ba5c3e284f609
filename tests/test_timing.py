from PySide6.QtTest import QTest

from planviewer.controller.timing import RateLimiter, TrailingDebounce


class TestRateLimiter:
    def test_first_event_passes(self):
        assert RateLimiter(20).allow(now=5.0)

    def test_interval(self):
        limiter = RateLimiter(20)
        assert limiter.allow(now=1.000)
        assert not limiter.allow(now=1.005)
        assert not limiter.allow(now=1.019)
        assert limiter.allow(now=1.021)
        # rejected events do not move the window
        assert not limiter.allow(now=1.030)
        assert limiter.allow(now=1.045)

    def test_uses_clock(self):
        t = [0.0]
        limiter = RateLimiter(20, clock=lambda: t[0])
        assert limiter.allow()
        t[0] = 0.01
        assert not limiter.allow()
        t[0] = 0.5
        assert limiter.allow()

    def test_reset(self):
        limiter = RateLimiter(1000)
        assert limiter.allow(now=0.0)
        limiter.reset()
        assert limiter.allow(now=0.1)


class TestTrailingDebounce:
    def test_fires_once_after_last_schedule(self, qapp):
        debounce = TrailingDebounce(100)
        fired = []
        debounce.triggered.connect(lambda: fired.append(True))

        for _ in range(5):
            debounce.schedule()
            QTest.qWait(10)
        assert fired == []
        assert debounce.is_pending

        QTest.qWait(400)
        assert fired == [True]
        assert not debounce.is_pending

    def test_cancel(self, qapp):
        debounce = TrailingDebounce(20)
        fired = []
        debounce.triggered.connect(lambda: fired.append(True))
        debounce.schedule()
        debounce.cancel()
        QTest.qWait(100)
        assert fired == []

    def test_flush(self, qapp):
        debounce = TrailingDebounce(10_000)
        fired = []
        debounce.triggered.connect(lambda: fired.append(True))

        debounce.flush()
        assert fired == []

        debounce.schedule()
        debounce.flush()
        assert fired == [True]
        assert not debounce.is_pending

    def test_schedule_overrides_interval(self, qapp):
        debounce = TrailingDebounce(10_000)
        fired = []
        debounce.triggered.connect(lambda: fired.append(True))
        debounce.schedule(10)
        QTest.qWait(200)
        assert fired == [True]
