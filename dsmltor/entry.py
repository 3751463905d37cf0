from twisted.python.util import InsensitiveDict
from zope.interface import implementer

from dsmltor import interfaces, attributeset
from dsmltor.protocols.dsml import dsmlerrors
from dsmltor.protocols.ldap import distinguishedname


@implementer(interfaces.ILDAPEntry)
class LDAPEntry:
    """
    A directory entry as carried by an add request: a DN and an
    ordered list of attributes.

    Attribute identifiers are unique without regard to case.
    """
    dn = None

    def __init__(self, dn=None, attributes=()):
        """

        Initialize the object.

        @param dn: Distinguished Name of the object, as a string or
        DistinguishedName. May be left out and set later.

        @param attributes: Attributes of the object. Either a mapping or
        a sequence of (attribute type, list of values) pairs; the order
        is kept.

        """
        self._attributes = InsensitiveDict()
        if dn is not None:
            dn = distinguishedname.DistinguishedName(dn)
        self.dn = dn

        if hasattr(attributes, 'items'):
            attributes = attributes.items()
        for k, vs in attributes:
            self.addAttribute(k, vs)

    def buildAttribute(self, key, values, binary=False):
        return attributeset.LDAPAttribute(key, values, binary=binary)

    def addAttribute(self, key, values=(), binary=False):
        """
        Add a new attribute and return it, so more values can be
        appended with L{attributeset.LDAPAttribute.add}.

        @raise dsmlerrors.DSMLInconsistent: the entry already has an
        attribute of that name.
        """
        if isinstance(values, (str, bytes)):
            values = [values]
        elif isinstance(values, attributeset.LDAPAttribute):
            binary = binary or values.binary
        if key in self._attributes:
            raise dsmlerrors.DSMLInconsistent(
                "duplicate attribute %r in entry %r"
                % (key, self.dn and self.dn.getUserText()))
        attribute = self.buildAttribute(key, values, binary=binary)
        self._attributes[key] = attribute
        return attribute

    def __getitem__(self, key):
        return self._attributes[key]

    def get(self, key, default=None):
        return self._attributes.get(key, default)

    def __contains__(self, key):
        return key in self._attributes

    def __iter__(self):
        for key in self._attributes.keys():
            yield key

    def keys(self):
        return list(self._attributes.keys())

    def items(self):
        return list(self._attributes.items())

    def attributes(self):
        """The attributes, in the order they were added."""
        return list(self._attributes.values())

    def __eq__(self, other):
        if not isinstance(other, LDAPEntry):
            return NotImplemented
        if self.dn != other.dn:
            return False
        mine = self.attributes()
        its = other.attributes()
        if len(mine) != len(its):
            return False
        for myAttr, itsAttr in zip(mine, its):
            if myAttr != itsAttr:
                return False
        return True

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __len__(self):
        return len(self._attributes)

    def __bool__(self):
        return True

    def __repr__(self):
        a = []
        for attribute in self.attributes():
            a.append("{}: {}".format(repr(str(attribute.key)), repr(list(attribute))))
        attributes = ", ".join(a)
        dn = self.dn.getText() if self.dn is not None else None
        return "{}({}, {{{}}})".format(self.__class__.__name__, repr(dn), attributes)
