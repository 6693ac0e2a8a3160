"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import oatmeal


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        for name in oatmeal.__all__:
            with self.subTest(name=name):
                self.assertIsNotNone(getattr(oatmeal, name))
        self.assertTrue(callable(oatmeal.load_config))
        self.assertTrue(issubclass(oatmeal.ConfigError, oatmeal.OatmealError))
        self.assertEqual(oatmeal.AppState.__module__, "oatmeal.app_state")

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(oatmeal, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
