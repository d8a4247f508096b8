import hashlib
import io
import os
import shutil
import stat
import tarfile
import tempfile
import unittest

from omnidef import Autotools


def sha256(data):
    return hashlib.sha256(data).hexdigest()


def make_tarball(path, topdir, files):
    """ Write a .tar.gz archive with the given files below topdir. """
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name="{0}/{1}".format(topdir, name))
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    with open(path, "rb") as f:
        return sha256(f.read())


def write_script(path, content):
    with open(path, "w") as f:
        f.write("#!/bin/sh\n" + content + "\n")
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class TempDirTest(unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.tmpdir = tempfile.mkdtemp(prefix="omnidef-test-")
        self.addCleanup(shutil.rmtree, self.tmpdir, True)

    def path(self, *args):
        return os.path.join(self.tmpdir, *args)


class FakeBuildTest(TempDirTest):
    """
    Provides a source tree with a fake configure script and a fake make
    tool on PATH. Both append their command lines to a call log.
    """

    configure_script = 'echo "configure $*" >> "$CALL_LOG"'
    make_script = 'echo "make $*" >> "$CALL_LOG"'

    def setUp(self):
        super().setUp()
        self.srcdir = self.path("src")
        self.bindir = self.path("bin")
        self.calllog = self.path("calls.log")
        os.makedirs(self.srcdir)
        os.makedirs(self.bindir)
        write_script(os.path.join(self.srcdir, "configure"), self.configure_script)
        write_script(os.path.join(self.bindir, "make"), self.make_script)

    @property
    def env(self):
        env = dict(os.environ)
        env["PATH"] = self.bindir + os.pathsep + env.get("PATH", os.defpath)
        env["CALL_LOG"] = self.calllog
        return env

    def calls(self):
        if not os.path.exists(self.calllog):
            return []
        with open(self.calllog) as f:
            return [line.rstrip("\n") for line in f]


class Example(Autotools):
    name = "example"
    default_version = "1.0"
    license = "MIT"
    license_file = "LICENSE"
    versions = {
        "1.0": sha256(b"example-1.0"),
        "2.0": sha256(b"example-2.0"),
    }
    source_url = "https://example.com/dist/example-{version}.tar.gz"
    relative_path = "example-{version}"
