import sys

from colorama import Fore, Style

from omnidef import config


def enabled(stream):
    """ Colors are used on terminals unless ``omnidef.colors`` is off. """
    return stream.isatty() and config.getboolean("omnidef", "colors", "on")


def _style(s, stream, *codes):
    return "".join(codes) + s + Style.RESET_ALL if enabled(stream) else s


def error(s):
    return _style(s, sys.stderr, Fore.RED, Style.BRIGHT)


def warning(s):
    return _style(s, sys.stdout, Fore.YELLOW, Style.BRIGHT)


def title(s):
    return _style(s, sys.stdout, Style.BRIGHT)
