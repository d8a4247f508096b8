import click
import json
import os
import sys

from omnidef import colors
from omnidef import config
from omnidef import filesystem as fs
from omnidef import loader
from omnidef import log
from omnidef import __version__
from omnidef.fetch import Fetcher
from omnidef.registry import SoftwareRegistry
from omnidef.software import BuildContext


class LoadingGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        if ctx.params.get("verbose", 0) >= 3:
            log.set_level(log.EXCEPTION)
        elif ctx.params.get("verbose", 0) >= 2:
            log.set_level(log.DEBUG)
        elif ctx.params.get("verbose", 0) >= 1:
            log.set_level(log.VERBOSE)

        for config_file in ctx.params.get("config_file") or []:
            log.verbose("Config: {0}", config_file)
            config.load_or_set(config_file)

        return click.Group.get_command(self, ctx, cmd_name)


@click.group(cls=LoadingGroup)
@click.version_option(__version__)
@click.option("-v", "--verbose", count=True, help="Verbose output (repeat to raise verbosity).")
@click.option("-c", "--config", "config_file", multiple=True, type=str,
              help="Load a configuration file or set a configuration key.")
@click.option("-p", "--path", "searchpath", multiple=True, type=click.Path(exists=True),
              help="Load software definitions from file or directory.")
@click.option("--no-log", is_flag=True, default=False, help="Don't write a log file.")
@click.pass_context
def cli(ctx, verbose, config_file, searchpath, no_log):
    """
    Fetch, verify and build software definitions.

    A software definition declares the versions of an external component,
    the sha256 digest of each source archive and the procedure that builds
    and installs it into an embedded prefix.
    """

    if not no_log:
        logfile = log.start_file_log()
        log.verbose("Log file: {}", logfile)

    log.verbose("Omnidef version: {}", __version__)
    log.verbose("Omnidef command: {}", " ".join([fs.path.basename(sys.argv[0])] + sys.argv[1:]))

    ctx.ensure_object(dict)
    ctx.obj["loaded"] = loader.load(list(searchpath) or None)


def _get_software(name):
    return SoftwareRegistry.get().get_software(name)


@cli.command(name="list")
def _list():
    """
    List all software definitions.
    """

    for cls in SoftwareRegistry.get().get_software_classes():
        print("{0:<24} {1:<12} {2}".format(cls.name, cls.default_version or "-", cls.license))


@cli.command()
@click.argument("name", type=str)
@click.option("-V", "--version", "version", type=str, help="Software version [default version].")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON.")
def info(name, version, as_json):
    """
    Show the source and license metadata of a software definition.
    """

    software = _get_software(name)
    spec = software.resolve(version)
    metadata = software.metadata(spec)

    if as_json:
        print(json.dumps(metadata, indent=2))
        return

    print(colors.title(metadata["name"]) + " " + metadata["version"])
    print()
    print("  Versions:      {0}".format(", ".join(sorted(software.versions))))
    for key in ["url", "sha256", "relative_path", "license", "license_file",
                "skip_transitive_dependency_licensing"]:
        print("  {0:<14} {1}".format(key.replace("_", " ").capitalize() + ":", metadata[key]))


@cli.command()
@click.argument("name", type=str)
@click.option("-V", "--version", "version", type=str, help="Software version [default version].")
@click.option("-d", "--destdir", type=click.Path(), help="Extraction directory [current directory].")
@click.option("--no-extract", is_flag=True, default=False, help="Only download and verify the archive.")
def fetch(name, version, destdir, no_extract):
    """
    Download, verify and extract the source of a software definition.
    """

    software = _get_software(name)
    spec = software.resolve(version)
    fetcher = Fetcher(software)
    if no_extract:
        print(fetcher.download(spec))
    else:
        print(fetcher.fetch(spec, destdir or os.getcwd()))


@cli.command()
@click.argument("name", type=str)
@click.argument("archive", type=click.Path(exists=True, dir_okay=False))
@click.option("-V", "--version", "version", type=str, help="Software version [default version].")
def verify(name, archive, version):
    """
    Verify a source archive against the declared sha256 digest.
    """

    software = _get_software(name)
    spec = software.resolve(version)
    software.verify(archive, spec)
    log.info("{0}: OK", archive)


@cli.command()
@click.argument("name", type=str)
@click.option("-i", "--install-dir", type=click.Path(), required=True,
              help="Installation root. Files are installed into INSTALL_DIR/embedded.")
@click.option("-V", "--version", "version", type=str, help="Software version [default version].")
@click.option("-j", "--workers", type=click.IntRange(min=1), help="Number of parallel make jobs [CPU count].")
@click.option("-s", "--source-dir", type=click.Path(exists=True, file_okay=False),
              help="Build an already extracted source tree instead of fetching it.")
@click.option("-d", "--destdir", type=click.Path(), help="Extraction directory when fetching [current directory].")
def build(name, install_dir, version, workers, source_dir, destdir):
    """
    Build and install a software definition.

    The source is fetched and verified first unless an extracted source
    tree is given with --source-dir. Build commands inherit the current
    environment.
    """

    software = _get_software(name)
    spec = software.resolve(version)
    if source_dir is None:
        source_dir = Fetcher(software).fetch(spec, destdir or os.getcwd())

    context = BuildContext(
        install_dir=install_dir,
        workers=workers,
        source_dir=source_dir)
    software.build(context)
