import functools
import re
import time
from collections.abc import Iterable

from omnidef import log


def as_list(value):
    """ None as an empty list, a string or other scalar as a one-item list. """
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return [value]
    return list(value)


def call_and_catch(f, *args, **kwargs):
    """ Best-effort call. Returns None instead of raising. """
    try:
        return f(*args, **kwargs)
    except Exception:
        return None


def canonical(s):
    """ The string with every non-word character replaced by an underscore. """
    return re.sub(r"\W", "_", s)


def expand(string, *args, **kwargs):
    """
    Expand ``{macro}`` fields of a template.

    Raises KeyError for a macro without a value, so that a misspelled
    field in a recipe never ends up verbatim in a build command.
    """
    return str(string).format(*args, **kwargs)


class duration(object):
    """ Time elapsed since creation, printed as ``1h 02min 03s``, ``2min 03s`` or ``3s``. """

    def __init__(self):
        self._start = time.monotonic()

    @property
    def seconds(self):
        return time.monotonic() - self._start

    def __str__(self):
        minutes, seconds = divmod(int(self.seconds), 60)
        hours, minutes = divmod(minutes, 60)
        if hours:
            return "{0}h {1:02}min {2:02}s".format(hours, minutes, seconds)
        if minutes:
            return "{0}min {1:02}s".format(minutes, seconds)
        return "{0}s".format(seconds)


def retried(exc_types, attempts=3, backoff=(1, 4)):
    """
    Decorator retrying a call which raises one of ``exc_types``.

    The call is made at most ``attempts`` times. Before retry ``n`` the
    caller sleeps ``backoff[n - 1]`` seconds, or the last backoff value
    once the sequence is exhausted. The exception of the final attempt
    propagates.
    """

    def decorate(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exc_types as e:
                    if attempt >= attempts:
                        raise
                    delay = backoff[min(attempt, len(backoff)) - 1]
                    log.verbose("Attempt {0}/{1} failed ({2}), retrying in {3}s", attempt, attempts, e, delay)
                    time.sleep(delay)
        return wrapper
    return decorate


def Singleton(cls):
    """ Class decorator adding a ``get()`` accessor to a lazily created shared instance. """

    cls._instance = None

    def get():
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    cls.get = staticmethod(get)
    return cls
