"""
Utility helpers behavioral tests.

Scope
- Validate the Unset sentinel and coalesce().
- Validate rename() in both forms and mirror() container freezing.
- Validate ordinal() labels used in position-first messages.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from sargparse.utils import Unset, UnsetType, coalesce, mirror, ordinal, rename


class TestUnset(TestCase):
    """Behavioral tests for the sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testSubclassRefused(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType): ...

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)

    def testCoalesce(self):
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(Unset, "prog"), "prog")
        self.assertEqual(coalesce("", "prog"), "")
        self.assertIs(coalesce(False, True), False)


class TestRename(TestCase):
    """Behavioral tests for rename()."""

    def testDirectForm(self):
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")

    def testDecoratorForm(self):
        @rename("decorated")
        def function():
            pass

        self.assertEqual(function.__name__, "decorated")

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(print, 1)
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):
    """Behavioral tests for mirror() properties."""

    class Holder:
        items = mirror("items")
        table = mirror("table")
        tags = mirror("tags")
        name = mirror("name")

        def __init__(self):
            self._items = [1, 2]
            self._table = {"a": 1}
            self._tags = {"x"}
            self._name = "holder"

    def testContainersAreFrozen(self):
        holder = self.Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.tags, frozenset({"x"}))
        self.assertEqual(holder.name, "holder")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.Holder().name = "other"

    def testPropertyIsNamed(self):
        self.assertEqual(self.Holder.items.fget.__name__, "items")

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(1)


class TestOrdinal(TestCase):
    """Behavioral tests for ordinal labels."""

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(103), "103rd")
        self.assertEqual(ordinal(112), "112th")

    def testNonPositive(self):
        self.assertEqual(ordinal(0), "0")


if __name__ == "__main__":
    unittest.main()
