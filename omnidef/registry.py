from omnidef import log
from omnidef import utils
from omnidef.error import UnknownSoftwareError, raise_error_if


def is_abstract(cls):
    return cls.__dict__.get("abstract", False) or cls.__name__.startswith("_")


@utils.Singleton
class SoftwareRegistry(object):
    """ Registry of software definition classes, indexed by name. """

    def __init__(self):
        self._software = {}

    def add_software_class(self, cls):
        from omnidef.software import Software

        raise_error_if(
            not isinstance(cls, type) or not issubclass(cls, Software),
            "{0} is not a software definition", cls)
        raise_error_if(is_abstract(cls), "Abstract software definitions can't be registered: {0}", cls.__name__)

        cls.name = cls.name or cls.__name__.lower()
        existing = self._software.get(cls.name)
        if existing is not None and existing is not cls:
            log.verbose("Software definition '{0}' replaced by {1}", cls.name, cls.__module__)
        self._software[cls.name] = cls
        return cls

    def get_software_class(self, name):
        return self._software.get(name)

    def get_software_classes(self):
        return [self._software[name] for name in sorted(self._software)]

    def get_software(self, name):
        cls = self.get_software_class(name)
        if cls is None:
            raise UnknownSoftwareError(name)
        return cls()
