"""LDAP protocol request values; no application logic here."""

from dsmltor import entry as ldapentry
from dsmltor.attributeset import LDAPAttribute
from dsmltor.protocols.ldap.distinguishedname import (
    DistinguishedName,
    RelativeDistinguishedName,
)


def escape(s):
    s = s.replace("\\", r"\5c")
    s = s.replace("*", r"\2a")
    s = s.replace("(", r"\28")
    s = s.replace(")", r"\29")
    s = s.replace("\0", r"\00")
    return s


def binary_escape(s):
    if isinstance(s, bytes):
        return "".join("\\{:02x}".format(c) for c in s)
    return "".join("\\{:02x}".format(ord(c)) for c in s)


def _asDN(value):
    if value is None or isinstance(value, DistinguishedName):
        return value
    return DistinguishedName(value)


def _asRDN(value):
    if value is None or isinstance(value, RelativeDistinguishedName):
        return value
    return RelativeDistinguishedName(value)


def _asID(value):
    if value is None:
        return None
    return str(value)


def _dnText(dn):
    if dn is None:
        return None
    return dn.getUserText()


class LDAPControl:
    """A request control: type OID, criticality and optional value."""

    def __init__(self, controlType, criticality=None, controlValue=None):
        assert controlType is not None
        self.controlType = controlType
        self.criticality = bool(criticality)
        self.controlValue = controlValue

    def __eq__(self, other):
        if not isinstance(other, LDAPControl):
            return NotImplemented
        return (self.controlType == other.controlType
                and self.criticality == other.criticality
                and self.controlValue == other.controlValue)

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        l = ["controlType=%r" % self.controlType]
        if self.criticality:
            l.append("criticality=%r" % self.criticality)
        if self.controlValue is not None:
            l.append("controlValue=%r" % self.controlValue)
        return self.__class__.__name__ + "(" + ", ".join(l) + ")"


class LDAPProtocolOp:
    _fields = ()

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        for name in self._fields:
            if getattr(self, name) != getattr(other, name):
                return False
        return True

    def __ne__(self, other):
        return not self == other

    __hash__ = None


class LDAPProtocolRequest(LDAPProtocolOp):
    """
    Base of all request values.

    @ivar requestID: the DSML requestID, a string, or None.
    @ivar controls: list of L{LDAPControl}.
    """

    def __init__(self, requestID=None, controls=None):
        self.requestID = _asID(requestID)
        self.controls = []
        for c in controls or ():
            if not isinstance(c, LDAPControl):
                c = LDAPControl(*c)
            self.controls.append(c)

    def __eq__(self, other):
        r = LDAPProtocolOp.__eq__(self, other)
        if r is not True:
            return r
        return (self.requestID == other.requestID
                and self.controls == other.controls)

    def _reprCommon(self, l):
        if self.requestID is not None:
            l.append("requestID=%r" % self.requestID)
        if self.controls:
            l.append("controls=%r" % self.controls)
        return self.__class__.__name__ + "(" + ", ".join(l) + ")"


class LDAPBindRequest(LDAPProtocolRequest):
    """
    Bind request. DSMLv2 carries it as authRequest, which only names
    the principal; credentials never travel in the document.
    """
    _fields = ("dn",)

    def __init__(self, dn=None, auth=None, requestID=None, controls=None):
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)
        self.dn = dn
        self.auth = auth

    def __repr__(self):
        l = ["dn=%r" % self.dn]
        if self.auth:
            l.append("auth=%r" % ("*" * len(self.auth)))
        return self._reprCommon(l)


class LDAPUnbindRequest(LDAPProtocolRequest):
    def __repr__(self):
        return self._reprCommon([])


class LDAPAttributeValueAssertion(LDAPProtocolOp):
    _fields = ("attributeDesc", "assertionValue")

    def __init__(self, attributeDesc=None, assertionValue=None, escaper=escape):
        self.attributeDesc = attributeDesc
        self.assertionValue = assertionValue
        self.escaper = escaper

    def _escapedValue(self):
        if isinstance(self.assertionValue, bytes):
            return binary_escape(self.assertionValue)
        return self.escaper(self.assertionValue)

    def __repr__(self):
        return self.__class__.__name__ + "(attributeDesc={}, assertionValue={})".format(
            repr(self.attributeDesc),
            repr(self.assertionValue),
        )


class LDAPFilter(LDAPProtocolOp):
    pass


class LDAPFilterSet(LDAPFilter, list):
    """A list of filters; order is kept."""

    def __init__(self, value=()):
        list.__init__(self, value)

    def __eq__(self, rhs):
        if type(self) is not type(rhs):
            return NotImplemented
        return list.__eq__(self, rhs)

    def __ne__(self, rhs):
        return not self == rhs

    __hash__ = None

    def __repr__(self):
        return self.__class__.__name__ + "(%s)" % list.__repr__(self)


class LDAPFilter_and(LDAPFilterSet):
    def asText(self):
        return "(&" + "".join([x.asText() for x in self]) + ")"


class LDAPFilter_or(LDAPFilterSet):
    def asText(self):
        return "(|" + "".join([x.asText() for x in self]) + ")"


class LDAPFilter_not(LDAPFilter):
    _fields = ("value",)

    def __init__(self, value):
        assert value is not None
        self.value = value

    def __repr__(self):
        return self.__class__.__name__ + "(value=%s)" % repr(self.value)

    def asText(self):
        return "(!" + self.value.asText() + ")"


class LDAPFilter_equalityMatch(LDAPAttributeValueAssertion, LDAPFilter):
    def asText(self):
        return "(" + self.attributeDesc + "=" + self._escapedValue() + ")"


class LDAPFilter_substrings_initial(LDAPProtocolOp):
    _fields = ("value",)

    def __init__(self, value, escaper=escape):
        self.value = value
        self.escaper = escaper

    def __repr__(self):
        return self.__class__.__name__ + "(value=%r)" % (self.value,)

    def asText(self):
        if isinstance(self.value, bytes):
            return binary_escape(self.value)
        return self.escaper(self.value)


class LDAPFilter_substrings_any(LDAPFilter_substrings_initial):
    pass


class LDAPFilter_substrings_final(LDAPFilter_substrings_initial):
    pass


class LDAPFilter_substrings(LDAPFilter):
    _fields = ("type", "substrings")

    def __init__(self, type=None, substrings=None):
        assert type is not None
        assert substrings is not None
        self.type = type
        self.substrings = list(substrings)

    def __repr__(self):
        return self.__class__.__name__ + "(type={}, substrings={})".format(
            repr(self.type),
            repr(self.substrings),
        )

    def asText(self):
        initial = None
        final = None
        any = []

        for s in self.substrings:
            assert s is not None
            if isinstance(s, LDAPFilter_substrings_any):
                assert final is None
                any.append(s.asText())
            elif isinstance(s, LDAPFilter_substrings_final):
                assert final is None
                final = s.asText()
            elif isinstance(s, LDAPFilter_substrings_initial):
                assert initial is None
                assert not any
                assert final is None
                initial = s.asText()
            else:
                raise NotImplementedError("Filter type not supported %r" % s)

        if initial is None:
            initial = ""
        if final is None:
            final = ""

        return "(" + self.type + "=" + "*".join([initial] + any + [final]) + ")"


class LDAPFilter_greaterOrEqual(LDAPAttributeValueAssertion, LDAPFilter):
    def asText(self):
        return "(" + self.attributeDesc + ">=" + self._escapedValue() + ")"


class LDAPFilter_lessOrEqual(LDAPAttributeValueAssertion, LDAPFilter):
    def asText(self):
        return "(" + self.attributeDesc + "<=" + self._escapedValue() + ")"


class LDAPFilter_present(LDAPFilter):
    _fields = ("value",)

    def __init__(self, value):
        assert value is not None
        self.value = value

    def __repr__(self):
        return self.__class__.__name__ + "(value=%r)" % (self.value,)

    def asText(self):
        return "(%s=*)" % self.value


class LDAPFilter_approxMatch(LDAPAttributeValueAssertion, LDAPFilter):
    def asText(self):
        return "(" + self.attributeDesc + "~=" + self._escapedValue() + ")"


class LDAPFilter_extensibleMatch(LDAPFilter):
    _fields = ("matchingRule", "type", "matchValue", "dnAttributes")

    def __init__(
        self,
        matchingRule=None,
        type=None,
        matchValue=None,
        dnAttributes=None,
        escaper=escape,
    ):
        assert matchValue is not None
        self.matchingRule = matchingRule
        self.type = type
        self.matchValue = matchValue
        self.dnAttributes = bool(dnAttributes)
        self.escaper = escaper

    def __repr__(self):
        l = []
        l.append("matchingRule=%s" % repr(self.matchingRule))
        l.append("type=%s" % repr(self.type))
        l.append("matchValue=%s" % repr(self.matchValue))
        l.append("dnAttributes=%s" % repr(self.dnAttributes))
        return self.__class__.__name__ + "(" + ", ".join(l) + ")"

    def asText(self):
        if isinstance(self.matchValue, bytes):
            value = binary_escape(self.matchValue)
        else:
            value = self.escaper(self.matchValue)
        return (
            "("
            + (self.type if self.type else "")
            + (":dn" if self.dnAttributes else "")
            + ((":" + self.matchingRule) if self.matchingRule else "")
            + ":="
            + value
            + ")"
        )


LDAP_SCOPE_baseObject = 0
LDAP_SCOPE_singleLevel = 1
LDAP_SCOPE_wholeSubtree = 2

LDAP_DEREF_neverDerefAliases = 0
LDAP_DEREF_derefInSearching = 1
LDAP_DEREF_derefFindingBaseObj = 2
LDAP_DEREF_derefAlways = 3

LDAPFilterMatchAll = LDAPFilter_present("objectClass")


class LDAPSearchRequest(LDAPProtocolRequest):
    _fields = ("baseObject", "scope", "derefAliases", "sizeLimit",
               "timeLimit", "typesOnly", "filter", "attributes")

    baseObject = None
    scope = LDAP_SCOPE_wholeSubtree
    derefAliases = LDAP_DEREF_neverDerefAliases
    sizeLimit = 0
    timeLimit = 0
    typesOnly = False
    filter = LDAPFilterMatchAll

    def __init__(
        self,
        baseObject=None,
        scope=None,
        derefAliases=None,
        sizeLimit=None,
        timeLimit=None,
        typesOnly=None,
        filter=None,
        attributes=None,
        requestID=None,
        controls=None,
    ):
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)

        self.baseObject = _asDN(baseObject)
        if scope is not None:
            self.scope = scope
        if derefAliases is not None:
            self.derefAliases = derefAliases
        if sizeLimit is not None:
            self.sizeLimit = sizeLimit
        if timeLimit is not None:
            self.timeLimit = timeLimit
        if typesOnly is not None:
            self.typesOnly = bool(typesOnly)
        if filter is not None:
            self.filter = filter
        self.attributes = list(attributes or ())

    def __repr__(self):
        l = [
            "baseObject=%r" % _dnText(self.baseObject),
            "scope=%r" % self.scope,
            "derefAliases=%r" % self.derefAliases,
            "sizeLimit=%r" % self.sizeLimit,
            "timeLimit=%r" % self.timeLimit,
            "typesOnly=%r" % self.typesOnly,
            "filter=%r" % self.filter,
            "attributes=%r" % self.attributes,
        ]
        return self._reprCommon(l)


LDAP_MOD_add = 0
LDAP_MOD_delete = 1
LDAP_MOD_replace = 2


class LDAPModification(LDAPProtocolOp):
    """One change of a modify request: an operation and an attribute."""
    _fields = ("operation", "attribute")

    def __init__(self, operation, attribute):
        assert operation in (LDAP_MOD_add, LDAP_MOD_delete, LDAP_MOD_replace)
        if not isinstance(attribute, LDAPAttribute):
            key, values = attribute
            attribute = LDAPAttribute(key, values)
        self.operation = operation
        self.attribute = attribute

    def __repr__(self):
        return self.__class__.__name__ + "(operation=%r, attribute=%r)" % (
            self.operation,
            self.attribute,
        )


class LDAPModifyRequest(LDAPProtocolRequest):
    _fields = ("object", "modification")

    def __init__(self, object=None, modification=None, requestID=None, controls=None):
        """
        Initialize the object

        Example usage::

                l = LDAPModifyRequest(
                    object='cn=foo,dc=example,dc=com',
                    modification=[
                        LDAPModification(LDAP_MOD_add,
                                         ('attr1', ['value1', 'value2'])),
                        LDAPModification(LDAP_MOD_delete, ('attr2', [])),
                    ])
        """
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)
        self.object = _asDN(object)
        self.modification = list(modification or ())

    def __repr__(self):
        l = [
            "object=%r" % _dnText(self.object),
            "modification=%r" % self.modification,
        ]
        return self._reprCommon(l)


class LDAPAddRequest(LDAPProtocolRequest):
    _fields = ("entry",)

    def __init__(self, entry=None, attributes=None, requestID=None, controls=None):
        """
        Initialize the object

        Example usage::

                l = LDAPAddRequest(entry='cn=foo,dc=example,dc=com',
                        attributes=[('attrFoo', ['value1', 'value2']),
                                    ('attrBar', [b'\\x00\\x01'])])

        or start empty and fill it::

                l = LDAPAddRequest()
                l.setEntryDn('cn=foo,dc=example,dc=com')
                l.addAttribute('cn').add('foo')
        """
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)
        if isinstance(entry, ldapentry.LDAPEntry):
            assert attributes is None
            self.entry = entry
        else:
            self.entry = ldapentry.LDAPEntry(entry, attributes or ())

    def setEntryDn(self, dn):
        self.entry.dn = _asDN(dn)

    def addAttribute(self, key, values=(), binary=False):
        return self.entry.addAttribute(key, values, binary=binary)

    def __repr__(self):
        return self._reprCommon(["entry=%r" % self.entry])


class LDAPDelRequest(LDAPProtocolRequest):
    _fields = ("entry",)

    def __init__(self, entry=None, requestID=None, controls=None):
        """
        Initialize the object

        l=LDAPDelRequest(entry='cn=foo,dc=example,dc=com')
        """
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)
        self.entry = _asDN(entry)

    def __repr__(self):
        return self._reprCommon(["entry=%r" % _dnText(self.entry)])


class LDAPModifyDNRequest(LDAPProtocolRequest):
    _fields = ("entry", "newrdn", "deleteoldrdn", "newSuperior")

    entry = None
    newrdn = None
    deleteoldrdn = True
    newSuperior = None

    def __init__(self, entry=None, newrdn=None, deleteoldrdn=None,
                 newSuperior=None, requestID=None, controls=None):
        """
        Initialize the object

        Example usage::

                l=LDAPModifyDNRequest(entry='cn=foo,dc=example,dc=com',
                                      newrdn='someAttr=value',
                                      deleteoldrdn=False)

        deleteoldrdn defaults to True when not given.
        """
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)
        self.entry = _asDN(entry)
        self.newrdn = _asRDN(newrdn)
        if deleteoldrdn is not None:
            self.deleteoldrdn = bool(deleteoldrdn)
        self.newSuperior = _asDN(newSuperior)

    def __repr__(self):
        l = [
            "entry=%r" % _dnText(self.entry),
            "newrdn=%r" % (self.newrdn and self.newrdn.getUserText()),
            "deleteoldrdn=%r" % self.deleteoldrdn,
        ]
        if self.newSuperior is not None:
            l.append("newSuperior=%r" % _dnText(self.newSuperior))
        return self._reprCommon(l)


class LDAPCompareRequest(LDAPProtocolRequest):
    _fields = ("entry", "ava")

    entry = None
    ava = None

    def __init__(self, entry=None, ava=None, attributeDesc=None,
                 assertionValue=None, requestID=None, controls=None):
        """
        Initialize the object

        Example usage::

                l=LDAPCompareRequest(entry='uid=bob,dc=example,dc=com',
                                     attributeDesc='sn',
                                     assertionValue='Smith')
        """
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)
        self.entry = _asDN(entry)
        if ava is None:
            ava = LDAPAttributeValueAssertion(
                attributeDesc=attributeDesc,
                assertionValue=assertionValue)
        else:
            assert attributeDesc is None and assertionValue is None
        self.ava = ava

    def __repr__(self):
        l = [
            "entry={}".format(repr(_dnText(self.entry))),
            "ava={}".format(repr(self.ava)),
        ]
        return self._reprCommon(l)


class LDAPAbandonRequest(LDAPProtocolRequest):
    _fields = ("id",)

    def __init__(self, id=None, requestID=None, controls=None):
        """
        Initialize the object

        l=LDAPAbandonRequest(id='1')

        Integer ids are kept in their decimal string form.
        """
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)
        self.id = _asID(id)

    def __repr__(self):
        return self._reprCommon(["id=%r" % (self.id,)])


class LDAPExtendedRequest(LDAPProtocolRequest):
    _fields = ("requestName", "requestValue")

    requestName = None
    requestValue = None

    def __init__(self, requestName=None, requestValue=None, requestID=None, controls=None):
        LDAPProtocolRequest.__init__(self, requestID=requestID, controls=controls)
        assert requestValue is None or isinstance(requestValue, (bytes, str))
        self.requestName = requestName
        self.requestValue = requestValue

    def __repr__(self):
        l = ["requestName=%r" % self.requestName]
        if self.requestValue is not None:
            l.append("requestValue=%r" % self.requestValue)
        return self._reprCommon(l)
