"""
Test cases for dsmltor.ldapfilter module.
"""

from twisted.trial import unittest
from dsmltor.protocols import pureldap
from dsmltor import ldapfilter


class RFC4515Examples(unittest.TestCase):
    def test_cn(self):
        text = '(cn=Babs Jensen)'
        filt = pureldap.LDAPFilter_equalityMatch(
            attributeDesc='cn', assertionValue='Babs Jensen')
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_not_cn(self):
        text = '(!(cn=Tim Howes))'
        filt = pureldap.LDAPFilter_not(
            pureldap.LDAPFilter_equalityMatch(
                attributeDesc='cn', assertionValue='Tim Howes'))
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_and_or(self):
        text = '(&(objectClass=Person)(|(sn=Jensen)(cn=Babs J*)))'
        filt = pureldap.LDAPFilter_and([
            pureldap.LDAPFilter_equalityMatch(
                attributeDesc='objectClass', assertionValue='Person'),
            pureldap.LDAPFilter_or([
                pureldap.LDAPFilter_equalityMatch(
                    attributeDesc='sn', assertionValue='Jensen'),
                pureldap.LDAPFilter_substrings(
                    type='cn',
                    substrings=[
                        pureldap.LDAPFilter_substrings_initial(value='Babs J'),
                    ]),
            ]),
        ])
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_substrings(self):
        text = '(o=univ*of*mich*)'
        filt = pureldap.LDAPFilter_substrings(
            type='o',
            substrings=[
                pureldap.LDAPFilter_substrings_initial(value='univ'),
                pureldap.LDAPFilter_substrings_any(value='of'),
                pureldap.LDAPFilter_substrings_any(value='mich'),
            ])
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_substrings_final(self):
        text = '(cn=*son)'
        filt = pureldap.LDAPFilter_substrings(
            type='cn',
            substrings=[pureldap.LDAPFilter_substrings_final(value='son')])
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_present(self):
        text = '(cn=*)'
        filt = pureldap.LDAPFilter_present('cn')
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_ordering(self):
        self.assertEqual(
            ldapfilter.parseFilter('(age>=18)'),
            pureldap.LDAPFilter_greaterOrEqual(attributeDesc='age',
                                               assertionValue='18'))
        self.assertEqual(
            ldapfilter.parseFilter('(age<=65)'),
            pureldap.LDAPFilter_lessOrEqual(attributeDesc='age',
                                            assertionValue='65'))
        self.assertEqual(
            ldapfilter.parseFilter('(cn~=jon)'),
            pureldap.LDAPFilter_approxMatch(attributeDesc='cn',
                                            assertionValue='jon'))

    def test_extensible_1(self):
        text = '(cn:1.2.3.4.5:=Fred Flintstone)'
        self.assertEqual(ldapfilter.parseFilter(text),
                         pureldap.LDAPFilter_extensibleMatch(
                             type='cn',
                             dnAttributes=False,
                             matchingRule='1.2.3.4.5',
                             matchValue='Fred Flintstone'))

    def test_extensible_2(self):
        text = '(sn:dn:2.4.6.8.10:=Barney Rubble)'
        filt = pureldap.LDAPFilter_extensibleMatch(
            type='sn',
            dnAttributes=True,
            matchingRule='2.4.6.8.10',
            matchValue='Barney Rubble')
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_extensible_3(self):
        text = '(o:dn:=Ace Industry)'
        self.assertEqual(ldapfilter.parseFilter(text),
                         pureldap.LDAPFilter_extensibleMatch(
                             type='o',
                             dnAttributes=True,
                             matchingRule=None,
                             matchValue='Ace Industry'))

    def test_extensible_4(self):
        text = '(:dn:2.4.6.8.10:=Dino)'
        self.assertEqual(ldapfilter.parseFilter(text),
                         pureldap.LDAPFilter_extensibleMatch(
                             type=None,
                             dnAttributes=True,
                             matchingRule='2.4.6.8.10',
                             matchValue='Dino'))

    def test_escape_parens(self):
        text = r'(o=Parens R Us \28for all your parenthetical needs\29)'
        filt = pureldap.LDAPFilter_equalityMatch(
            attributeDesc='o',
            assertionValue='Parens R Us (for all your parenthetical needs)')
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_escape_asterisk(self):
        text = r'(cn=*\2A*)'
        filt = pureldap.LDAPFilter_substrings(
            type='cn',
            substrings=[pureldap.LDAPFilter_substrings_any(value='*')])
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text.lower())

    def test_escape_backslash(self):
        text = r'(filename=C:\5cMyFile)'
        filt = pureldap.LDAPFilter_equalityMatch(
            attributeDesc='filename', assertionValue=r'C:\MyFile')
        self.assertEqual(ldapfilter.parseFilter(text), filt)
        self.assertEqual(filt.asText(), text)

    def test_escape_utf8(self):
        """
        Consecutive escapes are one UTF-8 sequence.
        """
        self.assertEqual(
            ldapfilter.parseFilter(r'(sn=Lu\c4\8di\c4\87)'),
            pureldap.LDAPFilter_equalityMatch(
                attributeDesc='sn', assertionValue=u'Lu\u010di\u0107'))

    def test_option(self):
        self.assertEqual(
            ldapfilter.parseFilter('(cn;lang-de=Hans)'),
            pureldap.LDAPFilter_equalityMatch(
                attributeDesc='cn;lang-de', assertionValue='Hans'))

    def test_numericoid(self):
        self.assertEqual(
            ldapfilter.parseFilter('(2.5.4.3=foo)'),
            pureldap.LDAPFilter_equalityMatch(
                attributeDesc='2.5.4.3', assertionValue='foo'))

    def test_outerWhitespace(self):
        self.assertEqual(ldapfilter.parseFilter('  (cn=foo)\n'),
                         ldapfilter.parseFilter('(cn=foo)'))

    def test_bytes(self):
        self.assertEqual(ldapfilter.parseFilter(b'(cn=foo)'),
                         ldapfilter.parseFilter('(cn=foo)'))


class TestInvalid(unittest.TestCase):
    def test_closeParen_1(self):
        self.assertRaises(ldapfilter.InvalidLDAPFilter,
                          ldapfilter.parseFilter,
                          '(&(|(mail=)@*)(uid=)))(mail=*)))')

    def test_closeParen_2(self):
        self.assertRaises(ldapfilter.InvalidLDAPFilter,
                          ldapfilter.parseFilter,
                          '(|(mail=)@*)(uid=)))')

    def test_unbalanced(self):
        self.assertRaises(ldapfilter.InvalidLDAPFilter,
                          ldapfilter.parseFilter, '(cn=foo')

    def test_noParens(self):
        self.assertRaises(ldapfilter.InvalidLDAPFilter,
                          ldapfilter.parseFilter, 'cn=foo')

    def test_empty(self):
        self.assertRaises(ldapfilter.InvalidLDAPFilter,
                          ldapfilter.parseFilter, '')

    def test_str(self):
        e = self.assertRaises(ldapfilter.InvalidLDAPFilter,
                              ldapfilter.parseFilter, '(cn=foo')
        self.assertTrue(str(e).startswith('Invalid LDAP filter: '))
