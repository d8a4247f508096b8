#!/usr/bin/env python

import unittest

from omnidef import OmnidefError
from omnidef import config


class Config(unittest.TestCase):
    def test_set_from_command_line(self):
        config.load_or_set("configtest.number=12")
        self.assertEqual(config.get("configtest", "number"), "12")
        self.assertEqual(config.getint("configtest", "number"), 12)

    def test_defaults(self):
        self.assertEqual(config.get("configtest", "missing", "fallback"), "fallback")
        self.assertIsNone(config.getint("configtest", "missing"))
        self.assertFalse(config.getboolean("configtest", "missing"))

    def test_boolean(self):
        config.load_or_set("configtest.flag=yes")
        self.assertTrue(config.getboolean("configtest", "flag"))

    def test_invalid_integer(self):
        config.load_or_set("configtest.invalid=many")
        with self.assertRaises(OmnidefError):
            config.getint("configtest", "invalid")

    def test_syntax_error(self):
        with self.assertRaises(OmnidefError):
            config.load_or_set("configtest-no-value")
        with self.assertRaises(OmnidefError):
            config.load_or_set("nosection=1")


if __name__ == "__main__":
    unittest.main()
