"""
Utilities behavioral tests.

Scope
- Validate the Unset sentinel, coalesce and rename.
- Validate mirror() immutable views.
- Validate SealedType: mirrored properties, repr, typename and sealing.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from clarg.utils import Unset, UnsetType, SealedType, coalesce, mirror, rename


class PointRecord(metaclass=SealedType):
    __introspectable__ = ("x", "items")

    def __init__(self, x, items):
        self._x = x
        self._items = items


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):
                pass

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", ()):
            with self.subTest(value=value):
                self.assertEqual(coalesce(value, "fallback"), value)


class TestRename(TestCase):
    """Behavioral tests for rename()."""

    def testFunctionForm(self):
        def function():
            pass

        self.assertIs(rename(function, "alias"), function)
        self.assertEqual((function.__name__, function.__qualname__), ("alias", "alias"))

    def testDecoratorForm(self):
        @rename("alias")
        def function():
            pass

        self.assertEqual(function.__name__, "alias")

    def testErrors(self):
        with self.assertRaises(TypeError):
            rename(3, "alias")
        with self.assertRaises(TypeError):
            rename(lambda: None, 3)
        with self.assertRaises(TypeError):
            rename(len, "alias")
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):
    """Behavioral tests for mirror() views."""

    def testContainersAreFrozen(self):
        record = PointRecord(1, [1, [2, 3]])
        self.assertEqual(record.items, (1, (2, 3)))

    def testMappingsAndSets(self):
        class Holder:
            mapping = mirror("mapping")
            members = mirror("members")

            def __init__(self):
                self._mapping = {"a": [1]}
                self._members = {1, 2}

        holder = Holder()
        self.assertIsInstance(holder.mapping, MappingProxyType)
        self.assertEqual(holder.mapping["a"], (1,))
        self.assertEqual(holder.members, frozenset({1, 2}))

    def testScalarsAndStringsUntouched(self):
        self.assertEqual(PointRecord("abc", Unset).x, "abc")
        self.assertIs(PointRecord(1, Unset).items, Unset)

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            mirror(3)


class TestSealedType(TestCase):
    """Behavioral tests for the SealedType metaclass."""

    def testDisplayableDefaultsToUnset(self):
        self.assertIs(SealedType.__displayable__, Unset)
        self.assertIs(PointRecord.__displayable__, Unset)

    def testTypename(self):
        self.assertEqual(PointRecord.__typename__, "point-record")

    def testRepr(self):
        self.assertEqual(repr(PointRecord(1, [2])), "point-record(x=1, items=(2,))")

    def testRichRepr(self):
        self.assertEqual(list(PointRecord(1, ()).__rich_repr__()), [("x", 1), ("items", ())])

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            PointRecord(1, ()).x = 2

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Derived(PointRecord):
                pass


if __name__ == "__main__":
    unittest.main()
