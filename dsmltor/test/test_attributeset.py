"""
Test cases for dsmltor.attributeset
"""
import copy

from twisted.trial import unittest
from dsmltor import attributeset


class TestLDAPAttribute(unittest.TestCase):
    """
    Unit tests for LDAPAttribute.
    """
    def testEquality_True(self):
        """
        Attributes are equal when they have the same key and values.
        """
        a = attributeset.LDAPAttribute('k', ['b', 'c', 'd'])
        b = attributeset.LDAPAttribute('K', ['b', 'c', 'd'])
        self.assertEqual(a, b)

    def testEquality_False_Ordering(self):
        """
        Values keep their order, so it matters for equality.
        """
        a = attributeset.LDAPAttribute('k', ['b', 'c', 'd'])
        b = attributeset.LDAPAttribute('k', ['b', 'd', 'c'])
        self.assertNotEqual(a, b)

    def testEquality_True_List(self):
        """
        It can be compared with a list and in this case the key is
        ignored.
        """
        a = attributeset.LDAPAttribute('k', ['b', 'c', 'd'])
        self.assertEqual(a, ['b', 'c', 'd'])

    def testEquality_False_Key(self):
        """
        Equality fails if attributes have different keys.
        """
        a = attributeset.LDAPAttribute('k1', ['b'])
        b = attributeset.LDAPAttribute('k2', ['b'])
        self.assertNotEqual(a, b)

    def testEquality_Other(self):
        """
        It is never equal to something that is not a sequence.
        """
        a = attributeset.LDAPAttribute('k', [])
        self.assertFalse(a == 42)
        self.assertTrue(a != object())

    def testEmptyKey(self):
        self.assertRaises(ValueError, attributeset.LDAPAttribute, '')

    def testValueTypes(self):
        """
        Values are str or bytes.
        """
        self.assertRaises(TypeError, attributeset.LDAPAttribute, 'k', [1])
        a = attributeset.LDAPAttribute('k')
        self.assertRaises(TypeError, a.add, None)
        self.assertEqual(a.add('x').add(b'\xff'), ['x', b'\xff'])

    def testOptions(self):
        a = attributeset.LDAPAttribute('userCertificate;binary;lang-en')
        self.assertEqual(a.baseType(), 'usercertificate')
        self.assertEqual(a.options(), ['binary', 'lang-en'])

    def testIsBinary(self):
        self.assertFalse(attributeset.LDAPAttribute('cn').isBinary())
        self.assertTrue(attributeset.LDAPAttribute('cn;Binary').isBinary())
        self.assertTrue(
            attributeset.LDAPAttribute('jpegPhoto', binary=True).isBinary())

    def testRepr(self):
        a = attributeset.LDAPAttribute('cn', ['foo', b'\x00'])
        self.assertEqual(repr(a), "LDAPAttribute('cn', ['foo', b'\\x00'])")

    def testCopy(self):
        a = attributeset.LDAPAttribute('k', ['b'], binary=True)
        for b in (a.copy(), copy.copy(a), copy.deepcopy(a)):
            self.assertIsNot(a, b)
            self.assertEqual(a, b)
            self.assertTrue(b.binary)
            b.add('c')
            self.assertEqual(a, ['b'])
