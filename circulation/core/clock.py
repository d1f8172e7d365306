import datetime


class Clock:
    """Supplies the current time. Engines take one so tests can pin dates."""

    def now(self) -> datetime.datetime:
        raise NotImplementedError


class SystemClock(Clock):

    def now(self):
        return datetime.datetime.now(datetime.timezone.utc)


class FixedClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, start):
        if type(start) is datetime.date:
            start = datetime.datetime.combine(start, datetime.time())
        self._now = start

    def now(self):
        return self._now

    def set(self, when):
        self._now = FixedClock(when).now()

    def advance(self, days=0, **kwargs):
        self._now += datetime.timedelta(days=days, **kwargs)
        return self._now
