from .error import OmnidefError
from .error import CommandError
from .error import TimeoutError
from .error import UnknownSoftwareError
from .error import UnknownVersionError
from .error import IntegrityMismatchError
from .error import BuildError
from .error import ConfigureFailedError
from .error import MakeFailedError
from .error import InstallFailedError

from .software import Autotools
from .software import BuildContext
from .software import Software
from .software import VersionSpec

from .steps import Configure
from .steps import Install
from .steps import Make

from .registry import SoftwareRegistry
from .tools import Tools

from .version import __version__

__all__ = (
    "Autotools",
    "BuildContext",
    "BuildError",
    "CommandError",
    "Configure",
    "ConfigureFailedError",
    "Install",
    "InstallFailedError",
    "IntegrityMismatchError",
    "Make",
    "MakeFailedError",
    "OmnidefError",
    "Software",
    "SoftwareRegistry",
    "TimeoutError",
    "Tools",
    "UnknownSoftwareError",
    "UnknownVersionError",
    "VersionSpec",
    "__version__",
)

name = "omnidef"
