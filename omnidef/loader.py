import glob
import sys
from importlib.machinery import SourceFileLoader
from types import ModuleType

from omnidef import config
from omnidef import filesystem as fs
from omnidef import log
from omnidef import utils
from omnidef.error import raise_error_if
from omnidef.registry import SoftwareRegistry, is_abstract
from omnidef.software import Software


class Recipe(object):
    """
    A Python file with software definitions.

    Every concrete subclass of :class:`Software` found in the module after
    it has been executed is collected in :attr:`software`.
    """

    def __init__(self, path):
        self.path = fs.path.abspath(path)
        self.software = []

    @staticmethod
    def _is_software(cls):
        return isinstance(cls, type) and \
            issubclass(cls, Software) and \
            not is_abstract(cls)

    def load(self):
        name = utils.canonical(self.path)
        loader = SourceFileLoader("omnidef_recipe_{0}".format(name), self.path)
        module = ModuleType(loader.name)
        module.__file__ = self.path
        loader.exec_module(module)
        sys.modules[loader.name] = module

        for obj in module.__dict__.values():
            if self._is_software(obj) and obj.__module__ == module.__name__:
                obj.name = obj.name or obj.__name__.lower()
                self.software.append(obj)

        log.verbose("Loaded: {0}", self.path)
        return self.software


def find_recipes(searchpath):
    """ Returns recipe file paths in a directory, or the path itself if it is a file. """

    if fs.path.isdir(searchpath):
        return sorted(glob.glob(fs.path.join(searchpath, "*.py")))

    _, ext = fs.path.splitext(searchpath)
    raise_error_if(not fs.path.exists(searchpath), "File does not exist: {}", searchpath)
    raise_error_if(ext != ".py", "Invalid file extension: {}", ext)
    return [searchpath]


def load(searchpaths=None, registry=None):
    """
    Load software definitions and register them.

    The built-in definitions are always registered. Additional recipe
    files are loaded from the given search paths, or from the
    ``omnidef.definitions`` configuration key.

    Returns:
        List of software definition classes loaded from recipe files.
    """

    import omnidef.pkgs  # noqa: F401

    registry = registry or SoftwareRegistry.get()
    if not searchpaths:
        definitions = config.get_definitions_path()
        searchpaths = definitions.split(fs.pathsep) if definitions else []

    loaded = []
    for searchpath in searchpaths:
        for path in find_recipes(searchpath):
            for cls in Recipe(path).load():
                registry.add_software_class(cls)
                loaded.append(cls)
    return loaded
