"""
The ``omnidef`` logger.

Messages are ``str.format`` templates with positional arguments. Output
of build commands is logged line by line at the STDOUT and STDERR levels
and printed to the console without a level prefix. Everything, including
tracebacks at the EXCEPTION level, can also be written to a file log.
"""

import glob
import logging
import os
import sys
import traceback
from datetime import datetime

import tqdm

from omnidef import colors
from omnidef import config
from omnidef import filesystem as fs
from omnidef.error import OmnidefError


ERROR = logging.ERROR
WARNING = logging.WARNING
STDERR = 21
INFO = logging.INFO
STDOUT = 19
VERBOSE = 15
DEBUG = logging.DEBUG
EXCEPTION = 5

_LEVELS = [ERROR, WARNING, STDERR, INFO, STDOUT, VERBOSE, DEBUG, EXCEPTION]

logging.addLevelName(STDERR, "STDERR")
logging.addLevelName(STDOUT, "STDOUT")
logging.addLevelName(VERBOSE, "VERBOSE")
logging.addLevelName(EXCEPTION, "EXCEPT")


class _Formatter(logging.Formatter):
    def __init__(self, fmt, console=False):
        super().__init__()
        self.fmt = fmt
        self.console = console

    def format(self, record):
        try:
            message = record.msg.format(*record.args)
        except (AttributeError, IndexError, KeyError, ValueError):
            message = str(record.msg)
        if self.console:
            if record.levelno in (STDOUT, STDERR):
                return message
            if record.levelno >= ERROR:
                message = colors.error(message)
            elif record.levelno >= WARNING:
                message = colors.warning(message)
        return self.fmt.format(
            asctime=self.formatTime(record),
            levelname=record.levelname,
            message=message)


class _ConsoleHandler(logging.StreamHandler):
    """ Writes around any active download progress bar instead of through it. """

    def __init__(self, stream, accept):
        super().__init__(stream)
        self.setFormatter(_Formatter("[{levelname:>7}] {message}", console=True))
        self.addFilter(lambda record: accept(record.levelno))

    def emit(self, record):
        with tqdm.tqdm.external_write_mode(file=self.stream):
            super().emit(record)


def _to_stderr(levelno):
    return levelno >= ERROR or levelno in (STDERR, EXCEPTION)


_logger = logging.getLogger("omnidef")
_logger.setLevel(EXCEPTION)
_logger.propagate = False

_stdout = _ConsoleHandler(sys.stdout, lambda levelno: not _to_stderr(levelno))
_stderr = _ConsoleHandler(sys.stderr, _to_stderr)
_logger.addHandler(_stdout)
_logger.addHandler(_stderr)


def start_file_log():
    """
    Log everything to a new timestamped file in the log directory.

    Only the newest ``omnidef.logcount`` files (default 100) are kept.

    Returns:
        str: Path of the new log file.
    """
    logpath = config.get_logpath()
    logcount = max(1, config.getint("omnidef", "logcount", 100))
    fs.makedirs(logpath)

    previous = sorted(glob.glob(fs.path.join(logpath, "*T*.log")))
    for outdated in previous[:max(0, len(previous) - logcount + 1)]:
        try:
            os.unlink(outdated)
        except OSError as e:
            warning("Failed to remove old log file {0}: {1}", outdated, e)

    logfile = fs.path.join(logpath, datetime.now().strftime("%Y-%m-%dT%H%M%S.%f") + ".log")
    handler = logging.FileHandler(logfile)
    handler.setLevel(EXCEPTION)
    handler.setFormatter(_Formatter("{asctime} [{levelname:>7}] {message}"))
    _logger.addHandler(handler)
    return logfile


def error(fmt, *args):
    _logger.log(ERROR, fmt, *args)


def warning(fmt, *args):
    _logger.log(WARNING, fmt, *args)


def info(fmt, *args):
    _logger.log(INFO, fmt, *args)


def verbose(fmt, *args):
    _logger.log(VERBOSE, fmt, *args)


def debug(fmt, *args):
    _logger.log(DEBUG, fmt, *args)


def stdout(line):
    _logger.log(STDOUT, "{0}", line)


def stderr(line):
    _logger.log(STDERR, "{0}", line)


def exception(exc):
    """ Log exc as an error, followed by its traceback at the EXCEPTION level. """
    if isinstance(exc, OmnidefError):
        error("{0}", exc)
    else:
        error("{0}: {1}", type(exc).__name__, exc)
    for chunk in traceback.format_exception(type(exc), exc, exc.__traceback__):
        for line in chunk.rstrip().splitlines():
            _logger.log(EXCEPTION, "{0}", line)


class _Progress(object):
    def __init__(self, name):
        verbose("Fetching {0}", name)

    def __enter__(self):
        return self

    def __exit__(self, type, value, tb):
        return False

    def update(self, count):
        pass


def progress(name, size=None):
    """
    Progress of a source archive transfer, counted in bytes.

    Shown as a tqdm bar on an interactive terminal unless verbose output
    is enabled, otherwise announced with a single verbose message. A size
    of 0 or None means the size is unknown.
    """
    if not is_interactive() or is_verbose():
        return _Progress(name)
    bar = tqdm.tqdm(
        total=size or None,
        unit="B",
        unit_scale=True,
        unit_divisor=1024,
        dynamic_ncols=True,
        leave=False)
    bar.set_description("[   INFO] Fetching " + name)
    return bar


def set_level(level):
    """ Set the lowest level printed on the console. """
    if level not in _LEVELS:
        raise ValueError("invalid log level")
    _stdout.setLevel(level)
    _stderr.setLevel(level)


def is_verbose():
    return _stdout.level <= VERBOSE


def is_interactive():
    return sys.stdout.isatty() and sys.stderr.isatty()


set_level(STDOUT)
