"""Request spacing and backoff tests."""

import asyncio

import pytest

from tokenimpact.venues.rate_limit import RequestSpacer, backoff_delay


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_backoff_is_exponential():
    assert backoff_delay(0) == 1.0
    assert backoff_delay(1) == 2.0
    assert backoff_delay(2) == 4.0
    assert backoff_delay(3, base_delay=0.5) == 4.0


def test_spacer_first_request_is_immediate():
    clock = FakeClock()
    spacer = RequestSpacer(1.1, clock=clock, sleep=clock.sleep)

    async def call():
        return "ok"

    assert asyncio.run(spacer.run(call)) == "ok"
    assert clock.sleeps == []


def test_spacer_enforces_interval_in_arrival_order():
    clock = FakeClock()
    spacer = RequestSpacer(1.1, clock=clock, sleep=clock.sleep)
    started: list[tuple[int, float]] = []

    def make(i):
        async def call():
            started.append((i, clock.now))
            return i

        return call

    async def main():
        return await asyncio.gather(*(spacer.run(make(i)) for i in range(3)))

    assert asyncio.run(main()) == [0, 1, 2]
    assert [i for i, _ in started] == [0, 1, 2]
    times = [t for _, t in started]
    assert times[1] - times[0] == pytest.approx(1.1)
    assert times[2] - times[1] == pytest.approx(1.1)


def test_spacer_skips_wait_when_interval_already_elapsed():
    clock = FakeClock()
    spacer = RequestSpacer(1.1, clock=clock, sleep=clock.sleep)

    async def call():
        return None

    async def main():
        await spacer.run(call)
        clock.now += 5.0
        await spacer.run(call)

    asyncio.run(main())
    assert clock.sleeps == []


def test_spacer_rejects_negative_interval():
    with pytest.raises(ValueError):
        RequestSpacer(-1)
