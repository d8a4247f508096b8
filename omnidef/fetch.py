import fasteners
import ftplib
from requests.exceptions import RequestException

from omnidef import config
from omnidef import filesystem as fs
from omnidef import log
from omnidef import utils
from omnidef.error import IntegrityMismatchError, raise_error_if
from omnidef.tools import Tools


class Fetcher(object):
    """
    Downloads, verifies and extracts the source archive of a software definition.

    Archives are stored in a per-software directory of the download cache
    (``omnidef.cachedir``). A cached archive is reused as long as its sha256
    digest still matches the declared one. An archive which fails verification
    is deleted and never extracted.

    Example:

        .. code-block:: python

            software = SoftwareRegistry.get().get_software("readline")
            fetcher = Fetcher(software)
            srcdir = fetcher.fetch(software.resolve("8.0"), "/tmp/src")

    """

    def __init__(self, software, cachedir=None, tools=None):
        self.software = software
        self.cachedir = cachedir or config.get_cachedir()
        self.tools = tools or Tools()

    def _archive_path(self, spec):
        filename = fs.path.basename(spec.url)
        return fs.path.join(self.cachedir, utils.canonical(str(self.software)), filename)

    def _lock(self, path):
        return fasteners.InterProcessLock(path + ".lock")

    @utils.retried((RequestException,) + ftplib.all_errors)
    def _transfer(self, url, path):
        self.tools.download(url, path)

    def download(self, spec=None):
        """ Download the source archive of a version into the cache and return its path. """

        spec = spec if spec is not None else self.software.resolve()
        url = self.software.fetch_url(spec)
        path = self._archive_path(spec)
        fs.makedirs(fs.path.dirname(path))

        with self._lock(path):
            if fs.path.exists(path):
                if self.software.verify(path, spec, exceptions=False):
                    log.verbose("Using cached archive {0}", path)
                    return path
                log.warning("Removing corrupt cached archive {0}", path)
                self.tools.unlink(path)

            log.info("Fetching {0}-{1} from {2}", self.software, spec.version, url)
            self._transfer(url, path)
            try:
                self.software.verify(path, spec)
            except IntegrityMismatchError:
                utils.call_and_catch(self.tools.unlink, path)
                raise
        return path

    def fetch(self, spec=None, destdir=None):
        """
        Download, verify and extract the source archive.

        Args:
            spec (VersionSpec, optional): Version to fetch. Defaults to the
                default version.
            destdir (str, optional): Extraction root. Defaults to the
                current working directory.

        Returns:
            str: Path of the extracted source tree, ``destdir/<relative_path>``.
        """

        spec = spec if spec is not None else self.software.resolve()
        path = self.download(spec)
        destdir = self.tools.expand_path(destdir or self.tools.getcwd())

        log.info("Extracting {0} into {1}", fs.path.basename(path), destdir)
        self.tools.extract(path, destdir)

        srcdir = fs.path.join(destdir, spec.relative_path) if spec.relative_path else destdir
        raise_error_if(
            not fs.path.isdir(srcdir),
            "Source directory '{0}' not found in archive {1}", spec.relative_path, fs.path.basename(path))
        return srcdir
