import unittest

from georoute.rate_limit import MinIntervalLimiter


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestMinIntervalLimiter(unittest.TestCase):
    def test_first_call_does_not_wait(self):
        clock = FakeClock()
        limiter = MinIntervalLimiter(1.0, clock=clock, sleep=clock.sleep)
        self.assertEqual(limiter.acquire(), 0.0)
        self.assertEqual(clock.sleeps, [])

    def test_back_to_back_calls_are_spaced(self):
        clock = FakeClock()
        limiter = MinIntervalLimiter(1.0, clock=clock, sleep=clock.sleep)
        limiter.acquire()
        clock.now += 0.25
        waited = limiter.acquire()
        self.assertAlmostEqual(waited, 0.75)
        limiter.acquire()
        self.assertAlmostEqual(sum(clock.sleeps), 1.75)

    def test_no_wait_after_idle_period(self):
        clock = FakeClock()
        limiter = MinIntervalLimiter(1.0, clock=clock, sleep=clock.sleep)
        limiter.acquire()
        clock.now += 5
        self.assertEqual(limiter.acquire(), 0.0)


if __name__ == "__main__":
    unittest.main()
