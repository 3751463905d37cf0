from functools import total_ordering
from string import hexdigits

from dsmltor._encoder import to_unicode, TextStrAlias

# See rfc4514
# Note that RFC 2253 sections 2.4 and 3 disagree whether "=" needs to
# be quoted. Let's trust the syntax, slapd refuses to accept unescaped
# "=" in RDN values.
escapedChars = u',+"\\<>;='
escapedChars_leading = u' #'
escapedChars_trailing = u' #'

attributeTypeChars = frozenset(
    u'abcdefghijklmnopqrstuvwxyz'
    u'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
    u'0123456789-.;')


def escape(s):
    r = u''
    r_trailer = u''

    if s and s[0] in escapedChars_leading:
        r = u'\\' + s[0]
        s = s[1:]

    if s and s[-1] in escapedChars_trailing:
        r_trailer = u'\\' + s[-1]
        s = s[:-1]

    for c in s:
        if c in escapedChars:
            r = r + u'\\' + c
        elif ord(c) <= 31:
            r = r + u'\\%02X' % ord(c)
        else:
            r = r + c

    return r + r_trailer


def unescape(s):
    """
    Remove RFC 4514 escaping from an attribute value.

    Runs of hex pairs are collected and decoded as UTF-8, so
    C{\\C3\\A9} becomes a single character. Raises ValueError on a
    dangling backslash or an invalid UTF-8 sequence.
    """
    r = u''
    pending = b''

    while s:
        if (s[0] == u'\\'
                and len(s) >= 3
                and s[1] in hexdigits
                and s[2] in hexdigits):
            pending = pending + bytes((int(s[1:3], 16),))
            s = s[3:]
            continue

        if pending:
            r = r + pending.decode('utf-8')
            pending = b''

        if s[0] == u'\\':
            if len(s) < 2:
                raise ValueError('dangling escape character')
            r = r + s[1]
            s = s[2:]
        else:
            r = r + s[0]
            s = s[1:]

    if pending:
        r = r + pending.decode('utf-8')
    return r


def _splitOnNotEscaped(s, separator):
    if not s:
        return []

    r = [u'']
    while s:
        first = s[0:1]

        if first == u'\\':
            r[-1] = r[-1] + s[:2]
            s = s[2:]
        else:

            if first == separator:
                r.append(u'')
                s = s[1:]
                while s[0:1] == u' ':
                    s = s[1:]
            else:
                r[-1] = r[-1] + first
                s = s[1:]

    return r


def _stripUnescapedTrailingSpaces(s):
    while s.endswith(u' ') and not s.endswith(u'\\ '):
        s = s[:-1]
    return s


class InvalidRelativeDistinguishedName(Exception):
    """
    Invalid relative distinguished name.
    """

    def __init__(self, rdn):
        Exception.__init__(self)
        self.rdn = rdn

    def __str__(self):
        return "Invalid relative distinguished name %s." \
               % repr(self.rdn)


class InvalidDistinguishedName(InvalidRelativeDistinguishedName):
    """
    Invalid distinguished name: at least one of its RDNs is malformed.
    """

    def __init__(self, dn):
        InvalidRelativeDistinguishedName.__init__(self, dn)
        self.dn = dn

    def __str__(self):
        return "Invalid distinguished name %s." \
               % repr(self.dn)


@total_ordering
class LDAPAttributeTypeAndValue(TextStrAlias):
    attributeType = None
    value = None

    def __init__(self, stringValue=None, attributeType=None, value=None):
        if stringValue is None:
            assert attributeType is not None
            assert value is not None
            self.attributeType = to_unicode(attributeType)
            self.value = to_unicode(value)
        else:
            assert attributeType is None
            assert value is None

            stringValue = to_unicode(stringValue)

            if u'=' not in stringValue:
                raise InvalidRelativeDistinguishedName(stringValue)
            attributeType, value = stringValue.split(u'=', 1)
            value = _stripUnescapedTrailingSpaces(value.lstrip(u' '))
            try:
                value = unescape(value)
            except ValueError:
                raise InvalidRelativeDistinguishedName(stringValue)
            self.attributeType = attributeType.strip()
            self.value = value

        if (not self.attributeType
                or not attributeTypeChars.issuperset(self.attributeType)):
            raise InvalidRelativeDistinguishedName(
                u'%s=%s' % (self.attributeType, self.value))

    def getText(self):
        return u'='.join((self.attributeType, escape(self.value)))

    def getNormText(self):
        return u'='.join((self.attributeType.lower(), escape(self.value)))

    def __repr__(self):
        return (self.__class__.__name__
                + '(attributeType='
                + repr(self.attributeType)
                + ', value='
                + repr(self.value)
                + ')')

    def _key(self):
        return (self.attributeType.lower(), self.value.lower())

    def __hash__(self):
        return hash(self._key())

    def __eq__(self, other):
        if not isinstance(other, LDAPAttributeTypeAndValue):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other):
        return not (self == other)

    def __lt__(self, other):
        if not isinstance(other, LDAPAttributeTypeAndValue):
            return NotImplemented
        return self._key() < other._key()


class RelativeDistinguishedName(TextStrAlias):
    """LDAP Relative Distinguished Name."""

    attributeTypesAndValues = None
    userText = None

    def __init__(self, magic=None, stringValue=None, attributeTypesAndValues=None):
        if magic is not None:
            assert stringValue is None
            assert attributeTypesAndValues is None
            if isinstance(magic, RelativeDistinguishedName):
                attributeTypesAndValues = magic.split()
            elif isinstance(magic, (bytes, str)):
                stringValue = magic
            else:
                attributeTypesAndValues = magic

        if stringValue is None:
            assert attributeTypesAndValues is not None
            assert not isinstance(attributeTypesAndValues, (bytes, str))
            self.attributeTypesAndValues = tuple(attributeTypesAndValues)
        else:
            assert attributeTypesAndValues is None
            stringValue = to_unicode(stringValue)
            self.attributeTypesAndValues = tuple(
                [LDAPAttributeTypeAndValue(stringValue=x)
                 for x in _splitOnNotEscaped(stringValue, u'+')])
            self.userText = stringValue.strip()

        if not self.attributeTypesAndValues:
            raise InvalidRelativeDistinguishedName(stringValue or u'')

    def split(self):
        return self.attributeTypesAndValues

    def getText(self):
        return u'+'.join([x.getText() for x in self.attributeTypesAndValues])

    def getNormText(self):
        return u'+'.join([x.getNormText() for x in self.attributeTypesAndValues])

    def getUserText(self):
        """The RDN as it was given by the user, or its text form."""
        if self.userText is not None:
            return self.userText
        return self.getText()

    def __repr__(self):
        return (self.__class__.__name__
                + '(attributeTypesAndValues='
                + repr(self.attributeTypesAndValues)
                + ')')

    def __hash__(self):
        return hash(self.attributeTypesAndValues)

    def __eq__(self, other):
        if not isinstance(other, RelativeDistinguishedName):
            return NotImplemented
        return self.split() == other.split()

    def __ne__(self, other):
        return not (self == other)

    def count(self):
        return len(self.attributeTypesAndValues)


@total_ordering
class DistinguishedName(TextStrAlias):
    """
    LDAP Distinguished Name.

    Keeps both the text the DN was parsed from (see L{getUserText})
    and the RDN sequence; L{getNormText} is the canonical form with
    lowercased attribute types.
    """
    listOfRDNs = None
    userText = None

    def __init__(self, magic=None, stringValue=None, listOfRDNs=None):
        assert (magic is not None
                or stringValue is not None
                or listOfRDNs is not None)
        if magic is not None:
            assert stringValue is None
            assert listOfRDNs is None
            if isinstance(magic, DistinguishedName):
                listOfRDNs = magic.split()
                stringValue = None
                self.userText = magic.userText
            elif isinstance(magic, (bytes, str)):
                stringValue = magic
            else:
                listOfRDNs = magic

        if stringValue is None:
            assert listOfRDNs is not None
            for x in listOfRDNs:
                assert isinstance(x, RelativeDistinguishedName)
            self.listOfRDNs = tuple(listOfRDNs)
        else:
            assert listOfRDNs is None
            stringValue = to_unicode(stringValue)
            try:
                self.listOfRDNs = tuple(
                    [RelativeDistinguishedName(stringValue=x)
                     for x in _splitOnNotEscaped(stringValue, u',')])
            except InvalidRelativeDistinguishedName:
                raise InvalidDistinguishedName(stringValue)
            self.userText = stringValue

    def split(self):
        return self.listOfRDNs

    def isRoot(self):
        return not self.listOfRDNs

    def getText(self):
        return u','.join([x.getText() for x in self.listOfRDNs])

    def getNormText(self):
        return u','.join([x.getNormText() for x in self.listOfRDNs])

    def getUserText(self):
        """The DN as it was given by the user, or its text form."""
        if self.userText is not None:
            return self.userText
        return self.getText()

    def __repr__(self):
        return (self.__class__.__name__
                + '(listOfRDNs='
                + repr(self.listOfRDNs)
                + ')')

    def __hash__(self):
        return hash(self.getNormText().lower())

    def __eq__(self, other):
        if isinstance(other, (bytes, str)):
            try:
                other = DistinguishedName(other)
            except InvalidRelativeDistinguishedName:
                return False
        if not isinstance(other, DistinguishedName):
            return NotImplemented
        return self.split() == other.split()

    def __ne__(self, other):
        return not (self == other)

    def __lt__(self, other):
        if not isinstance(other, DistinguishedName):
            return NotImplemented
        return self.getNormText().lower() < other.getNormText().lower()
