"""
Software definitions.

A software definition is a declarative record describing one external
component: the versions that may be fetched, the sha256 digest that each
downloaded source archive must match, the license metadata surfaced to
the packaging step and the ordered build procedure that installs the
component under ``<install_dir>/embedded``.

Example:

    .. code-block:: python

        from omnidef import Autotools, SoftwareRegistry

        class Zlib(Autotools):
            name = "zlib"
            default_version = "1.3.1"
            license = "Zlib"
            license_file = "LICENSE"
            versions = {
                "1.3.1": "9a93b2b7dfdac77ceba5a558a580e74667dd6fede4585b91eefb60f03b72df23",
            }
            source_url = "https://zlib.net/zlib-{version}.tar.gz"
            relative_path = "zlib-{version}"

        SoftwareRegistry.get().add_software_class(Zlib)

"""

import hashlib
import os

from omnidef import filesystem as fs
from omnidef import log
from omnidef import utils
from omnidef.error import IntegrityMismatchError, UnknownVersionError
from omnidef.error import raise_error_if
from omnidef.steps import Configure, Install, Make
from omnidef.tools import Tools


class VersionSpec(object):
    """ One fetchable version of a software definition. """

    def __init__(self, version, sha256, url_template, relative_path_template=None):
        self.version = version
        self.sha256 = sha256
        self.url_template = url_template
        self.relative_path_template = relative_path_template

    def _expand(self, template):
        return utils.expand(template, version=self.version)

    @property
    def url(self):
        """ Source URL with the version substituted. """
        return self._expand(self.url_template)

    @property
    def relative_path(self):
        """ Directory of the extracted source tree, relative to the extraction root. """
        if not self.relative_path_template:
            return None
        return self._expand(self.relative_path_template)

    def __eq__(self, other):
        if not isinstance(other, VersionSpec):
            return NotImplemented
        return (self.version, self.sha256, self.url_template, self.relative_path_template) == \
            (other.version, other.sha256, other.url_template, other.relative_path_template)

    def __hash__(self):
        return hash((self.version, self.sha256, self.url_template, self.relative_path_template))

    def __repr__(self):
        return "VersionSpec({0!r}, sha256={1!r})".format(self.version, self.sha256)


class BuildContext(object):
    """
    Parameters of a single build, supplied by the caller.

    Args:
        install_dir (str): Installation root. The software is installed
            into ``<install_dir>/embedded``. A relative path is made absolute.
        workers (int, optional): Number of parallel jobs passed to the
            build tool. Defaults to the configured thread count.
        env (dict, optional): Environment of the build commands.
            Defaults to the environment of the current process.
        source_dir (str, optional): Directory with the extracted source
            tree. Defaults to the current working directory.
    """

    def __init__(self, install_dir, workers=None, env=None, source_dir=None):
        raise_error_if(not install_dir, "An install directory is required")
        self.install_dir = fs.path.abspath(str(install_dir))
        self.workers = int(workers) if workers is not None else Tools().thread_count()
        raise_error_if(self.workers < 1, "Invalid number of workers: {0}", self.workers)
        self.env = dict(env if env is not None else os.environ)
        self.source_dir = fs.path.abspath(str(source_dir or os.getcwd()))

    @property
    def embedded_dir(self):
        return self.install_dir + "/embedded"

    def expand(self, string):
        return utils.expand(
            string,
            install_dir=self.install_dir,
            embedded_dir=self.embedded_dir,
            source_dir=self.source_dir,
            workers=str(self.workers))


class Software(object):
    """ Base class of software definitions. """

    abstract = True
    """ Abstract definitions are never registered. """

    name = None
    """ Name of the software. Defaults to the lowercase class name. """

    default_version = None
    """ Version selected when none is requested. """

    license = "Unspecified"
    """ License identifier surfaced to the packaging step. """

    license_file = None
    """ Path of the license text inside the source tree. """

    skip_transitive_dependency_licensing = False
    """ Whether license collection should stop at this software. """

    versions = {}
    """ Mapping of declared version strings to sha256 digests of their source archives. """

    source_url = None
    """ Source archive URL template. ``{version}`` is substituted. """

    relative_path = None
    """ Extracted source directory template. ``{version}`` is substituted. """

    def __str__(self):
        return str(self.name or type(self).__name__.lower())

    def resolve(self, version=None):
        """
        Look up a declared version.

        Args:
            version (str, optional): Requested version. Defaults to
                :attr:`default_version`.

        Returns:
            VersionSpec: The matching version.

        Raises:
            UnknownVersionError: The version is not declared.
        """
        version = version if version is not None else self.default_version
        sha256 = self.versions.get(version) if version is not None else None
        if sha256 is None:
            raise UnknownVersionError(str(self), version, self.versions.keys())
        return VersionSpec(version, sha256, self.source_url, self.relative_path)

    def fetch_url(self, spec=None):
        """ Returns the source URL of a version, the default version if None. """
        spec = spec if spec is not None else self.resolve()
        raise_error_if(not spec.url_template, "No source URL declared for '{0}'", self)
        return spec.url

    def verify(self, artifact, spec=None, exceptions=True):
        """
        Verify the integrity of a source archive.

        Args:
            artifact (bytes, str): Archive content, or the path of an
                archive file.
            spec (VersionSpec, optional): Version to verify against.
                Defaults to the default version.
            exceptions (bool): Raise on mismatch instead of returning False.

        Returns:
            bool: True if the sha256 digest of the artifact matches.

        Raises:
            IntegrityMismatchError: The digest doesn't match and
                ``exceptions`` is True.
        """
        spec = spec if spec is not None else self.resolve()
        if isinstance(artifact, (bytes, bytearray, memoryview)):
            what = "{0}-{1}".format(self, spec.version)
            actual = hashlib.sha256(artifact).hexdigest()
        else:
            what = "'{0}'".format(artifact)
            actual = Tools().checksum_file(str(artifact), hashfn=hashlib.sha256)

        if actual == spec.sha256.lower():
            log.debug("Verified {0}: {1}", what, actual)
            return True
        if exceptions:
            raise IntegrityMismatchError(what, spec.sha256, actual)
        log.warning("SHA256 hash mismatch for {0}: expected {1}, got {2}", what, spec.sha256, actual)
        return False

    def metadata(self, spec=None):
        """ Returns the fields surfaced to the packaging step. """
        spec = spec if spec is not None else self.resolve()
        return {
            "name": str(self),
            "version": spec.version,
            "url": spec.url,
            "sha256": spec.sha256,
            "relative_path": spec.relative_path,
            "license": self.license,
            "license_file": self.license_file,
            "skip_transitive_dependency_licensing": bool(self.skip_transitive_dependency_licensing),
        }

    def steps(self):
        """ Returns the ordered build procedure. """
        return []

    def build(self, context):
        """
        Run the build procedure.

        Steps run strictly in order, each blocking until its command exits.
        The first failing step aborts the build and its error is raised;
        later steps are not run and nothing is rolled back.

        Args:
            context (BuildContext): Build parameters.

        Raises:
            BuildError: A step failed. The concrete type identifies the step.
        """
        raise_error_if(
            not fs.path.isdir(context.source_dir),
            "Source directory '{0}' of '{1}' does not exist", context.source_dir, self)

        tools = Tools(cwd=context.source_dir, env=context.env)
        elapsed = utils.duration()
        log.info("Building {0} in {1}", self, context.source_dir)
        for step in self.steps():
            step.execute(self, tools, context)
        log.info("Installed {0} into {1} in {2}", self, context.embedded_dir, elapsed)


class Autotools(Software):
    """ Base class of software built with configure and make. """

    abstract = True

    configure_options = ["--prefix={install_dir}/embedded"]
    """ Options passed to the ``configure`` script. """

    make_options = ["-j {workers}"]
    """ Arguments passed to ``make``. """

    def steps(self):
        return [
            Configure(self.configure_options),
            Make(self.make_options),
            Install(),
        ]
