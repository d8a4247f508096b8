#!/usr/bin/env python

import unittest

from testsupport import Example, TempDirTest, sha256

from omnidef import IntegrityMismatchError, UnknownVersionError, VersionSpec
from omnidef.pkgs.readline import Readline


READLINE_63 = "56ba6071b9462f980c5a72ab0023893b65ba6debb4eeb475d7a563dc65cafd43"
READLINE_80 = "e339f51971478d369f8a053a330a190781acb9864cf4c541060f12078948e461"


class ReadlineDefinition(unittest.TestCase):
    def setUp(self):
        self.software = Readline()

    def test_declarations(self):
        self.assertEqual(str(self.software), "readline")
        self.assertEqual(self.software.default_version, "6.3")
        self.assertEqual(self.software.license, "GPLv3+")
        self.assertEqual(self.software.license_file, "COPYING")
        self.assertTrue(self.software.skip_transitive_dependency_licensing)

    def test_resolve_declared_versions(self):
        for version, digest in [("6.3", READLINE_63), ("8.0", READLINE_80)]:
            spec = self.software.resolve(version)
            self.assertEqual(spec.version, version)
            self.assertEqual(spec.sha256, digest)

    def test_resolve_default_version(self):
        spec = self.software.resolve()
        self.assertEqual(spec.version, "6.3")
        self.assertEqual(spec, self.software.resolve("6.3"))

    def test_resolve_unknown_version(self):
        with self.assertRaises(UnknownVersionError) as cm:
            self.software.resolve("7.0")
        self.assertEqual(cm.exception.version, "7.0")
        self.assertEqual(cm.exception.known, ["6.3", "8.0"])
        self.assertIn("7.0", str(cm.exception))

    def test_fetch_url(self):
        self.assertEqual(
            self.software.fetch_url(self.software.resolve("8.0")),
            "ftp://ftp.gnu.org/gnu/readline/readline-8.0.tar.gz")
        self.assertEqual(
            self.software.fetch_url(),
            "ftp://ftp.gnu.org/gnu/readline/readline-6.3.tar.gz")

    def test_relative_path(self):
        self.assertEqual(self.software.resolve("8.0").relative_path, "readline-8.0")

    def test_digests_are_sha256_length(self):
        for digest in self.software.versions.values():
            self.assertEqual(len(digest), 64)
            int(digest, 16)

    def test_verify_mismatch_raises(self):
        for version in ["6.3", "8.0"]:
            spec = self.software.resolve(version)
            with self.assertRaises(IntegrityMismatchError) as cm:
                self.software.verify(b"not the readline tarball", spec)
            self.assertEqual(cm.exception.expected, spec.sha256)
            self.assertEqual(cm.exception.actual, sha256(b"not the readline tarball"))

    def test_verify_mismatch_returns_false(self):
        for version in ["6.3", "8.0"]:
            spec = self.software.resolve(version)
            self.assertFalse(self.software.verify(b"corrupt", spec, exceptions=False))

    def test_metadata(self):
        metadata = self.software.metadata(self.software.resolve("8.0"))
        self.assertEqual(metadata, {
            "name": "readline",
            "version": "8.0",
            "url": "ftp://ftp.gnu.org/gnu/readline/readline-8.0.tar.gz",
            "sha256": READLINE_80,
            "relative_path": "readline-8.0",
            "license": "GPLv3+",
            "license_file": "COPYING",
            "skip_transitive_dependency_licensing": True,
        })


class Verify(TempDirTest):
    def setUp(self):
        super().setUp()
        self.software = Example()

    def test_verify_bytes(self):
        self.assertTrue(self.software.verify(b"example-1.0"))
        self.assertTrue(self.software.verify(b"example-2.0", self.software.resolve("2.0")))

    def test_verify_is_bound_to_version(self):
        self.assertFalse(self.software.verify(b"example-2.0", self.software.resolve("1.0"), exceptions=False))

    def test_verify_file(self):
        path = self.path("example-1.0.tar.gz")
        with open(path, "wb") as f:
            f.write(b"example-1.0")
        self.assertTrue(self.software.verify(path))

        with open(path, "wb") as f:
            f.write(b"example-1.0 but truncated")
        with self.assertRaises(IntegrityMismatchError):
            self.software.verify(path)

    def test_uppercase_digest(self):
        spec = VersionSpec("1.0", sha256(b"abc").upper(), "https://example.com/{version}")
        self.assertTrue(self.software.verify(b"abc", spec))


if __name__ == "__main__":
    unittest.main()
