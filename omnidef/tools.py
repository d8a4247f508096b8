import bz2file
import hashlib
import multiprocessing
import os
import subprocess
import tarfile
import threading
import zipfile
from contextlib import contextmanager
from ftplib import FTP
from urllib.parse import urlparse, urlunparse

import psutil
from requests import Session
from requests.auth import HTTPBasicAuth

from omnidef import config
from omnidef import filesystem as fs
from omnidef import log
from omnidef import utils
from omnidef.error import CommandError, TimeoutError
from omnidef.error import raise_error, raise_error_if


http_session = Session()

FTP_PORT = 21
FTP_TIMEOUT = 30

# Seconds a timed out command tree gets to exit after SIGTERM before it is killed.
KILL_TIMEOUT = 10

SUPPORTED_ARCHIVE_TYPES = [
    ".tar",
    ".tar.bz2",
    ".tar.gz",
    ".tar.xz",
    ".tgz",
    ".zip",
]


class _OutputReader(threading.Thread):
    """ Collects the lines of one output stream of a command, echoing them to the log. """

    def __init__(self, stream, lines, echo=None):
        super().__init__(daemon=True)
        self.stream = stream
        self.lines = lines
        self.echo = echo
        self.start()

    def run(self):
        for raw in iter(self.stream.readline, b''):
            line = raw.rstrip().decode(errors="ignore")
            if self.echo:
                self.echo(line)
            self.lines.append(line)


def _format_cmd(cmd):
    return " ".join(cmd) if type(cmd) is list else cmd


def _command_timeout():
    timeout = config.getint("omnidef", "command_timeout", 0)
    return timeout if timeout > 0 else None


def _signal_all(procs, action):
    for proc in procs:
        try:
            getattr(proc, action)()
        except psutil.NoSuchProcess:
            continue


def _stop(proc):
    """ Terminate a command and all of its descendants, killing what survives. """
    try:
        tree = [psutil.Process(proc.pid)]
        tree += tree[0].children(recursive=True)
    except psutil.NoSuchProcess:
        tree = []
    _signal_all(tree, "terminate")
    _, alive = psutil.wait_procs(tree, timeout=KILL_TIMEOUT)
    _signal_all(alive, "kill")
    proc.wait()


def _run(cmd, cwd, env, output=True, timeout=None):
    log.debug("Running: '{0}' (CWD: {1})", _format_cmd(cmd), cwd)
    stdout, stderr = [], []
    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            shell=type(cmd) is not list,
            cwd=cwd,
            env=env)
    except OSError as e:
        raise CommandError(
            "Command failed: {0}: {1}".format(_format_cmd(cmd), e.strerror or e),
            [], [str(e)], None)

    readers = [
        _OutputReader(proc.stdout, stdout, log.stdout if output else None),
        _OutputReader(proc.stderr, stderr, log.stderr if output else None),
    ]
    timedout = False
    try:
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        timedout = True
        _stop(proc)
    except KeyboardInterrupt:
        _stop(proc)
        raise
    finally:
        for reader in readers:
            reader.join()
        proc.stdout.close()
        proc.stderr.close()

    if timedout:
        raise TimeoutError("Command timeout: {0}".format(_format_cmd(cmd)))
    if proc.returncode != 0:
        raise CommandError(
            "Command failed: {0}".format(_format_cmd(cmd)),
            stdout, stderr, proc.returncode)
    return "\n".join(stdout)


def _extract_tar(tar, path):
    if hasattr(tarfile, "data_filter"):
        tar.extractall(path, filter="data")
        return
    root = fs.path.realpath(path)
    for member in tar.getmembers():
        target = fs.path.realpath(fs.path.join(path, member.name))
        raise_error_if(
            target != root and not target.startswith(root + fs.sep),
            "Archive member '{0}' would be extracted outside of '{1}'", member.name, path)
    tar.extractall(path)


def _redacted(url):
    """ The URL with any password masked, for log and error messages. """
    if not url.password:
        return urlunparse(url)
    return urlunparse(url._replace(netloc=url.netloc.replace(url.password, "****")))


class Tools(object):
    """
    Runs build commands and handles source archives.

    Relative paths are resolved against the working directory of the
    tools object, never the one of the process, and commands run with
    the environment given at construction.
    """

    def __init__(self, cwd=None, env=None):
        self._cwd = fs.path.abspath(cwd or os.getcwd())
        self._env = dict(env if env is not None else os.environ)

    def checksum_file(self, pathname, hashfn=hashlib.sha256):
        """ Hex digest of a file, read in blocks. """
        checksum = hashfn()
        with open(self.expand_path(pathname), "rb") as f:
            for block in iter(lambda: f.read(0x10000), b''):
                checksum.update(block)
        return checksum.hexdigest()

    def thread_count(self):
        """
        Number of parallel jobs to pass to build tools.

        Configured with ``omnidef.threads`` or the ``OMNIDEF_THREADS``
        environment variable. Defaults to the number of CPUs.
        """
        threads = config.getint("omnidef", "threads", self.getenv("OMNIDEF_THREADS"))
        return threads or multiprocessing.cpu_count()

    def download(self, url, pathname, **kwargs):
        """
        Download a file over HTTP(S) or FTP.

        Credentials in the URL are used for HTTP basic authentication or
        the FTP login. FTP servers are otherwise logged into anonymously.
        A partially written file is removed if the transfer fails.

        Args:
           url (str): URL of the file.
           pathname (str): Destination path.
           kwargs (optional): Passed on to ``requests.get()`` for HTTP(S).
        """
        pathname = self.expand_path(pathname)
        parsed = urlparse(url)
        raise_error_if(not parsed.scheme or not parsed.netloc, "Invalid URL: '{}'", url)
        raise_error_if(
            parsed.scheme not in ["ftp", "http", "https"],
            "Unsupported URL scheme: '{}'", parsed.scheme)

        try:
            if parsed.scheme == "ftp":
                self._download_ftp(parsed, pathname)
            else:
                self._download_http(url, parsed, pathname, **kwargs)
        except Exception:
            utils.call_and_catch(fs.unlink, pathname)
            raise

    @contextmanager
    def _receive(self, url, pathname, size):
        name = fs.path.basename(pathname)
        log.verbose("{0} -> {1}", _redacted(url), pathname)
        with log.progress(name, size) as bar, open(pathname, "wb") as out:
            def write(block):
                out.write(block)
                bar.update(len(block))
            yield write
        actual = self.file_size(pathname)
        raise_error_if(
            size and size != actual,
            "Download of {0} was truncated to {1}/{2} bytes", name, actual, size)

    def _download_http(self, url, parsed, pathname, **kwargs):
        auth = None
        if parsed.username and parsed.password:
            auth = HTTPBasicAuth(parsed.username, parsed.password)
        response = http_session.get(url, stream=True, auth=auth, **kwargs)
        raise_error_if(
            response.status_code != 200,
            "Download from '{0}' failed with status '{1}'", _redacted(parsed), response.status_code)
        size = int(response.headers.get("content-length", 0))
        with self._receive(parsed, pathname, size) as write:
            for chunk in response.iter_content(chunk_size=0x10000):
                write(chunk)

    def _download_ftp(self, parsed, pathname):
        with FTP(timeout=FTP_TIMEOUT) as ftp:
            ftp.connect(parsed.hostname, parsed.port or FTP_PORT)
            ftp.login(parsed.username or "anonymous", parsed.password or "")
            ftp.voidcmd("TYPE I")
            size = utils.call_and_catch(ftp.size, parsed.path) or 0
            with self._receive(parsed, pathname, size) as write:
                ftp.retrbinary("RETR {0}".format(parsed.path), callback=write)

    def expand_path(self, pathname):
        """ Absolute path of pathname relative to the working directory of the tools object. """
        return fs.path.normpath(fs.path.join(self._cwd, str(pathname)))

    def extract(self, filename, pathname):
        """
        Extract all files of a source archive into a directory.

        Supported formats are tar, tar.gz/tgz, tar.bz2, tar.xz and zip.
        Members which would end up outside of the directory are refused.
        """
        filename = self.expand_path(filename)
        pathname = self.expand_path(pathname)
        name = fs.path.basename(filename)
        raise_error_if(
            not any(name.endswith(ext) for ext in SUPPORTED_ARCHIVE_TYPES),
            "Unsupported archive type: {0}", name)

        fs.makedirs(pathname)
        try:
            if name.endswith(".zip"):
                with zipfile.ZipFile(filename) as archive:
                    archive.extractall(pathname)
            elif name.endswith(".tar.bz2"):
                # bz2file reads multi-stream archives
                with bz2file.open(filename) as stream, tarfile.open(fileobj=stream) as tar:
                    _extract_tar(tar, pathname)
            else:
                with tarfile.open(filename) as tar:
                    _extract_tar(tar, pathname)
        except (OSError, EOFError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise_error("Failed to extract archive '{0}': {1}", filename, e)

    def file_size(self, pathname):
        """ Size of a file in bytes. """
        pathname = self.expand_path(pathname)
        try:
            return os.stat(pathname).st_size
        except OSError:
            raise_error("File not found: '{0}'", pathname)

    def getcwd(self):
        """ The working directory of the tools object. """
        return self._cwd

    def getenv(self, key, default=None):
        """ Value of a variable in the environment of the tools object. """
        return self._env.get(key, default)

    def run(self, cmd, *args, output=True, **kwargs):
        """
        Run a command in the working directory of the tools object.

        A string command is expanded with the given arguments and run by
        the shell. A list command is executed directly, as is.

        Args:
            cmd (str, list): Command format string or argument list.
            output (boolean, optional): Echo the command's output lines
                to the log. Default: True.

        Returns:
            str: The command's standard output.

        Raises:
            CommandError: The command could not be started or exited
                with a non-zero status.
            TimeoutError: ``omnidef.command_timeout`` seconds passed
                before the command exited.
        """
        if type(cmd) is not list:
            cmd = utils.expand(cmd, *args, **kwargs)
        return _run(cmd, self._cwd, self._env, output=output, timeout=_command_timeout())

    def unlink(self, pathname):
        """ Remove a file. """
        fs.unlink(self.expand_path(pathname))
