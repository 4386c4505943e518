"""
Utility tests (sentinel, coalesce, introspective metaclass).

Scope
- Validate the Unset sentinel: singleton, falsy, unions with real types.
- Validate coalesce() only replaces Unset.
- Validate IntrospectiveType: typename, mirrored read-only fields, repr.

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from argbind.utils import Unset, UnsetType, coalesce, IntrospectiveType


class PointPair(metaclass=IntrospectiveType):
    __introspectable__ = ("name", "items")

    def __init__(self, name, items):
        self._name = name
        self._items = items


class TestUnset(TestCase):

    def testSingletonAndFalsy(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("name", str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)


class TestIntrospectiveType(TestCase):

    def testDisplayableDefaultsToUnset(self):
        self.assertIs(IntrospectiveType.__displayable__, Unset)
        self.assertIs(PointPair.__displayable__, Unset)

    def testTypenameIsHyphenated(self):
        self.assertEqual(PointPair.__typename__, "point-pair")

    def testFieldsAreReadOnlyCopies(self):
        pair = PointPair("a", [1, 2])
        pair.items.append(3)
        self.assertEqual(pair.items, [1, 2])
        with self.assertRaises(AttributeError):
            pair.name = "b"

    def testRepr(self):
        self.assertEqual(repr(PointPair("a", [1])), "point-pair(name='a', items=[1])")


if __name__ == "__main__":
    unittest.main()
