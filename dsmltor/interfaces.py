from zope.interface import Interface, Attribute


class ILDAPEntry(Interface):
    """

    An LDAP entry to be added to the directory.

    >>> o = LDAPEntry(dn='cn=foo,dc=example,dc=com',
    ...     attributes=[('anAttribute', ['itsValue', 'secondValue']),
    ...                 ('onemore', ['aValue'])])
    >>> o
    LDAPEntry('cn=foo,dc=example,dc=com', {'anAttribute': ['itsValue', 'secondValue'], 'onemore': ['aValue']})

    """

    dn = Attribute("The DistinguishedName of the entry, or None.")

    def __getitem__(self, key):
        """

        Get all values of an attribute.

        >>> o['anAttribute']
        LDAPAttribute('anAttribute', ['itsValue', 'secondValue'])

        """

    def get(self, key, default=None):
        """

        Get all values of an attribute, or default when the
        entry has no such attribute.

        """

    def __contains__(self, key):
        """Whether the entry has an attribute named key, ignoring case."""

    def keys(self):
        """Attribute names, in insertion order."""

    def items(self):
        """(name, attribute) pairs, in insertion order."""

    def addAttribute(self, key, values=(), binary=False):
        """

        Add an attribute and return it.

        Raises DSMLInconsistent if an attribute with the same name,
        compared without regard to case, already exists.

        """


class IRequestDsml(Interface):
    """

    Converts one LDAP request value to and from its DSMLv2 element.

    """

    request = Attribute("The wrapped request value.")

    elementName = Attribute("Local name of the DSMLv2 element, "
                            "eg. 'addRequest'.")

    def toDsml(parent, context=None):
        """

        Append the DSMLv2 element for the request to parent and return
        it. On failure the parent is left untouched.

        """

    def fromDsml(element):
        """

        Build a request value from a DSMLv2 element.

        """


class IDSMLConfig(Interface):
    """

    Policy for writing DSMLv2 documents.

    """

    def getBinaryAttributes():
        """

        Get the attribute types whose values are always sent base64
        encoded, as a frozenset of case-insensitive strings.

        """

    def getPrettyPrint():
        """Whether serialized documents are indented."""

    def getProcessing():
        """Default batch processing mode, or None."""

    def getResponseOrder():
        """Default batch response order, or None."""

    def getOnError():
        """Default batch error policy, or None."""
