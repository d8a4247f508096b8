#!/usr/bin/env python

import unittest

from testsupport import Example, TempDirTest

from omnidef import OmnidefError, Software, SoftwareRegistry, UnknownSoftwareError
from omnidef import loader
from omnidef.pkgs.readline import Readline


RECIPE = """
from omnidef import Autotools, Software


class Base(Software):
    abstract = True


class _Helper(Autotools):
    pass


class Zlib(Autotools):
    default_version = "1.3.1"
    license = "Zlib"
    license_file = "LICENSE"
    versions = {
        "1.3.1": "9a93b2b7dfdac77ceba5a558a580e74667dd6fede4585b91eefb60f03b72df23",
    }
    source_url = "https://zlib.net/zlib-{version}.tar.gz"
    relative_path = "zlib-{version}"
    configure_options = ["--prefix={install_dir}/embedded", "--static"]
"""


class Registry(unittest.TestCase):
    def test_builtin_readline(self):
        loader.load([])
        registry = SoftwareRegistry.get()
        self.assertIs(registry.get_software_class("readline"), Readline)
        self.assertIsInstance(registry.get_software("readline"), Readline)

    def test_unknown_software(self):
        with self.assertRaises(UnknownSoftwareError):
            SoftwareRegistry().get_software("openssl")

    def test_add_and_list(self):
        registry = SoftwareRegistry()
        registry.add_software_class(Readline)
        registry.add_software_class(Example)
        self.assertEqual(registry.get_software_classes(), [Example, Readline])

    def test_abstract_rejected(self):
        class Base(Software):
            abstract = True

        with self.assertRaises(OmnidefError):
            SoftwareRegistry().add_software_class(Base)

    def test_not_software_rejected(self):
        with self.assertRaises(OmnidefError):
            SoftwareRegistry().add_software_class(object)


class Loader(TempDirTest):
    def write_recipe(self, filename, content=RECIPE):
        with open(self.path(filename), "w") as f:
            f.write(content)
        return self.path(filename)

    def test_load_directory(self):
        self.write_recipe("zlib.py")
        self.write_recipe("notes.txt", "not a recipe")
        registry = SoftwareRegistry()

        loaded = loader.load([self.tmpdir], registry=registry)

        self.assertEqual([cls.name for cls in loaded], ["zlib"])
        zlib = registry.get_software("zlib")
        self.assertEqual(zlib.fetch_url(), "https://zlib.net/zlib-1.3.1.tar.gz")
        self.assertEqual(zlib.resolve().relative_path, "zlib-1.3.1")
        self.assertIsNone(registry.get_software_class("base"))
        self.assertIsNone(registry.get_software_class("_helper"))

    def test_load_file(self):
        path = self.write_recipe("zlib.py")
        registry = SoftwareRegistry()
        loader.load([path], registry=registry)
        self.assertIsNotNone(registry.get_software_class("zlib"))

    def test_invalid_extension(self):
        path = self.write_recipe("zlib.rb", "name 'zlib'")
        with self.assertRaises(OmnidefError):
            loader.load([path], registry=SoftwareRegistry())

    def test_missing_file(self):
        with self.assertRaises(OmnidefError):
            loader.load([self.path("missing.py")], registry=SoftwareRegistry())


if __name__ == "__main__":
    unittest.main()
