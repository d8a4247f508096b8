"""
Layered INI configuration.

Settings are looked up in, from highest to lowest precedence:

- ``section.key=value`` overrides given on the command line with ``-c``
- files given on the command line with ``-c``, the last one first
- the user file, ``~/.config/omnidef/user``
- the global file, ``~/.config/omnidef/config``

``OMNIDEF_CONFIG_PATH`` replaces the ``~/.config/omnidef`` directory.
All of omnidef's own keys live in the ``[omnidef]`` section.
"""

from configparser import ConfigParser, Error, NoOptionError, NoSectionError
import os

from omnidef import filesystem as fs
from omnidef.error import raise_error, raise_error_if


_confdir = os.getenv("OMNIDEF_CONFIG_PATH") or \
    fs.path.join(fs.userhome(), ".config", "omnidef")


def _parser():
    return ConfigParser(interpolation=None)


class _Layers(object):
    def __init__(self):
        self._files = []
        self._overrides = _parser()

    def add_file(self, location):
        parser = _parser()
        try:
            parser.read(location)
        except Error as e:
            raise_error("Config: failed to parse '{0}': {1}", location, e)
        self._files.append(parser)

    def override(self, section, key, value):
        if not self._overrides.has_section(section):
            self._overrides.add_section(section)
        self._overrides.set(section, key, value)

    def get(self, section, key, default):
        for parser in [self._overrides] + self._files[::-1]:
            try:
                return parser.get(section, key)
            except (NoOptionError, NoSectionError):
                continue
        return default


_layers = _Layers()
_layers.add_file(fs.path.join(_confdir, "config"))
_layers.add_file(fs.path.join(_confdir, "user"))


def get(section, key, default=None):
    return _layers.get(section, key, default)


def getint(section, key, default=None):
    value = get(section, key, default)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise_error("Config: value '{0}' invalid for '{1}.{2}', expected integer", value, section, key)


def getboolean(section, key, default=None):
    value = get(section, key, default)
    return value is not None and str(value).lower() in ["true", "yes", "on", "1"]


def _getpath(key, default):
    return fs.path.expanduser(get("omnidef", key, default))


def get_logpath():
    """ Directory of the per-invocation log files. """
    return _getpath("logpath", fs.path.join("~", ".omnidef"))


def get_cachedir():
    """ Directory where downloaded source archives are kept. """
    return _getpath("cachedir", fs.path.join("~", ".cache", "omnidef"))


def get_definitions_path():
    """ Search path of additional definition files, or None. """
    return get("omnidef", "definitions")


def load_or_set(file_or_str):
    """ Apply a ``-c`` command line argument: a config file or a ``section.key=value`` pair. """
    if fs.path.exists(file_or_str):
        _layers.add_file(file_or_str)
        return
    setting, sep, value = file_or_str.partition("=")
    section, dot, key = setting.partition(".")
    raise_error_if(not sep or not dot or not section or not key,
                   "Syntax error in configuration: '{}'", file_or_str)
    _layers.override(section, key, value)
