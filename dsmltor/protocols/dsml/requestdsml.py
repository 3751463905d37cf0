"""
DSMLv2 emitters and decoders, one class per request kind.

Each class wraps a request value from L{dsmltor.protocols.pureldap}
and writes it as a child of a caller supplied element with
L{RequestDsml.toDsml}; L{RequestDsml.fromDsml} reads such an element
back into a request value.
"""

from lxml import etree
from twisted.python import log
from zope.interface import implementer

from dsmltor import interfaces, ldapfilter
from dsmltor.protocols import pureldap
from dsmltor.protocols.dsml import dsmlerrors
from dsmltor.protocols.dsml.context import EmissionContext
from dsmltor.protocols.dsml.parserutils import (
    BASE64BINARY_TYPE,
    XSI_TYPE,
    base64Decode,
    base64Encode,
    childElements,
    formatBoolean,
    isBase64Binary,
    localName,
    namespaceOf,
    needsBase64Encoding,
    parseBoolean,
)
from dsmltor.protocols.ldap.distinguishedname import (
    DistinguishedName,
    InvalidRelativeDistinguishedName,
    RelativeDistinguishedName,
)

_emitters = {}
_decoders = {}


def register(klass):
    """Class decorator making a RequestDsml class known to L{emit} and L{decodeRequest}."""
    _emitters[klass.requestClass] = klass
    _decoders[klass.elementName] = klass
    return klass


def wrap(request):
    """
    Wrap a request value into the matching RequestDsml.

    @raise dsmlerrors.DSMLUnsupported: DSMLv2 has no element for the
    request, eg. an unbind request.
    """
    klass = _emitters.get(type(request))
    if klass is None:
        raise dsmlerrors.DSMLUnsupported(
            "no DSMLv2 encoding for %s" % type(request).__name__)
    return klass(request)


def emit(request, parent, context=None):
    """Write request as a new child of parent and return that child."""
    return wrap(request).toDsml(parent, context)


def decodeRequest(element):
    """Build the request value for one DSMLv2 request element."""
    klass = _decoders.get(localName(element))
    if klass is None:
        raise dsmlerrors.DSMLUnsupported(
            "unknown request element %r" % localName(element), element=element)
    return klass.fromDsml(element)


def _subElement(parent, name):
    namespace = namespaceOf(parent)
    if namespace is not None:
        name = "{%s}%s" % (namespace, name)
    return etree.SubElement(parent, name)


def _valueToDsml(parent, name, value, context, binary=False):
    """
    Write one value element. Binary values, bytes values and strings
    with unsafe characters are written base64 encoded.
    """
    element = _subElement(parent, name)
    if binary or isinstance(value, bytes) or needsBase64Encoding(value):
        context.declareSchemaNamespaces()
        element.set(XSI_TYPE, BASE64BINARY_TYPE)
        element.text = base64Encode(value)
    else:
        element.text = value
    return element


def _valueFromDsml(element):
    """A value element's content: bytes when base64 encoded, else str."""
    for child in childElements(element):
        raise dsmlerrors.DSMLInvalidRequest(
            "unexpected element %r in value" % localName(child), element=child)
    if isBase64Binary(element):
        try:
            return base64Decode(element.text)
        except ValueError as e:
            raise dsmlerrors.DSMLInvalidRequest(str(e), element=element)
    return element.text or ""


def _requiredAttribute(element, name):
    value = element.get(name)
    if value is None:
        raise dsmlerrors.DSMLInvalidRequest(
            "missing attribute %r" % name, element=element)
    return value


def _dnFromDsml(element, name, required=True):
    text = element.get(name)
    if text is None:
        if required:
            raise dsmlerrors.DSMLInvalidRequest(
                "missing attribute %r" % name, element=element)
        return None
    try:
        return DistinguishedName(stringValue=text)
    except InvalidRelativeDistinguishedName as e:
        raise dsmlerrors.DSMLInvalidRequest(str(e), element=element)


def _booleanFromDsml(element, name, default):
    text = element.get(name)
    if text is None:
        return default
    value = parseBoolean(text)
    if value is None:
        raise dsmlerrors.DSMLInvalidRequest(
            "%s must be true or false, not %r" % (name, text), element=element)
    return value


def _unexpected(child):
    return dsmlerrors.DSMLInvalidRequest(
        "unexpected element %r" % localName(child), element=child)


@implementer(interfaces.IRequestDsml)
class RequestDsml:
    """
    Base of the per-kind emitters.

    Subclasses set L{requestClass} and L{elementName}, check required
    fields in L{checkRequest}, write the kind specific content in
    L{_fillDsml} and read it in L{_readDsml}.
    """
    requestClass = None
    elementName = None

    def __init__(self, request=None):
        if request is None:
            request = self.requestClass()
        assert isinstance(request, self.requestClass)
        self.request = request

    def checkRequest(self):
        """
        @raise dsmlerrors.DSMLInvalidRequest: a required field is missing.
        """

    def _missing(self, field):
        return dsmlerrors.DSMLInvalidRequest(
            "%s needs %s" % (self.elementName, field))

    def toDsml(self, parent, context=None):
        if context is None:
            context = EmissionContext.forElement(parent)
        self.checkRequest()

        checkpoint = context.checkpoint()
        element = _subElement(parent, self.elementName)
        try:
            if self.request.requestID is not None:
                element.set("requestID", str(self.request.requestID))
            for control in self.request.controls:
                self._controlToDsml(element, control, context)
            self._fillDsml(element, context)
        except Exception:
            parent.remove(element)
            context.restore(checkpoint)
            raise
        log.msg("Emitted <%s> for %r" % (self.elementName, self.request),
                debug=True)
        return element

    def _controlToDsml(self, parent, control, context):
        element = _subElement(parent, "control")
        element.set("type", control.controlType)
        if control.criticality:
            element.set("criticality", formatBoolean(control.criticality))
        if control.controlValue is not None:
            _valueToDsml(element, "controlValue", control.controlValue,
                         context, binary=True)

    def _fillDsml(self, element, context):
        raise NotImplementedError()

    @classmethod
    def _controlFromDsml(cls, element):
        controlType = _requiredAttribute(element, "type")
        criticality = _booleanFromDsml(element, "criticality", False)
        controlValue = None
        for child in childElements(element):
            if localName(child) != "controlValue" or controlValue is not None:
                raise _unexpected(child)
            controlValue = _valueFromDsml(child)
        return pureldap.LDAPControl(controlType, criticality, controlValue)

    @classmethod
    def fromDsml(cls, element):
        if localName(element) != cls.elementName:
            raise dsmlerrors.DSMLInvalidRequest(
                "expected %s" % cls.elementName, element=element)
        controls = []
        children = []
        for child in childElements(element):
            if localName(child) == "control":
                controls.append(cls._controlFromDsml(child))
            else:
                children.append(child)

        request = cls._readDsml(element, children)
        request.requestID = element.get("requestID")
        request.controls = controls
        log.msg("Decoded <%s> into %r" % (cls.elementName, request), debug=True)
        return request

    @classmethod
    def _readDsml(cls, element, children):
        raise NotImplementedError()

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.request)


class _AddRequestReader:
    """
    Reads the attr and value children of an addRequest.

    Starts in L{INIT}, moves to L{READING_ATTRS} on the first attr
    element and ends in L{DONE}.
    """
    INIT = "init"
    READING_ATTRS = "readingAttrs"
    DONE = "done"

    def __init__(self, dn):
        self.state = self.INIT
        self.request = pureldap.LDAPAddRequest(entry=dn)
        self.current = None

    def attr(self, element):
        assert self.state in (self.INIT, self.READING_ATTRS)
        self.state = self.READING_ATTRS
        name = _requiredAttribute(element, "name")
        try:
            self.current = self.request.addAttribute(name)
        except dsmlerrors.DSMLInconsistent as e:
            raise dsmlerrors.DSMLInconsistent(e.message, element=element)
        except ValueError as e:
            raise dsmlerrors.DSMLInvalidRequest(str(e), element=element)

    def value(self, element):
        assert self.state == self.READING_ATTRS
        self.current.add(_valueFromDsml(element))

    def done(self):
        self.state = self.DONE
        self.current = None
        return self.request


@register
class AddRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPAddRequest
    elementName = "addRequest"

    def checkRequest(self):
        if self.request.entry.dn is None:
            raise self._missing("an entry DN")

    def _fillDsml(self, element, context):
        entry = self.request.entry
        element.set("dn", entry.dn.getUserText())
        for attribute in entry.attributes():
            binary = (attribute.isBinary()
                      or context.isBinaryAttribute(attribute.baseType()))
            attributeElement = _subElement(element, "attr")
            attributeElement.set("name", str(attribute.key))
            for value in attribute:
                _valueToDsml(attributeElement, "value", value, context,
                             binary=binary)

    @classmethod
    def _readDsml(cls, element, children):
        reader = _AddRequestReader(_dnFromDsml(element, "dn"))
        for child in children:
            if localName(child) != "attr":
                raise _unexpected(child)
            reader.attr(child)
            for valueElement in childElements(child):
                if localName(valueElement) != "value":
                    raise _unexpected(valueElement)
                reader.value(valueElement)
        return reader.done()


@register
class CompareRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPCompareRequest
    elementName = "compareRequest"

    def checkRequest(self):
        if self.request.entry is None:
            raise self._missing("a DN")
        if self.request.ava is None or not self.request.ava.attributeDesc:
            raise self._missing("an attribute description")
        if self.request.ava.assertionValue is None:
            raise self._missing("an assertion value")

    def _fillDsml(self, element, context):
        ava = self.request.ava
        element.set("dn", self.request.entry.getUserText())
        assertion = _subElement(element, "assertion")
        assertion.set("name", ava.attributeDesc)
        _valueToDsml(assertion, "value", ava.assertionValue, context)

    @classmethod
    def _readDsml(cls, element, children):
        dn = _dnFromDsml(element, "dn")
        assertion = None
        for child in children:
            if localName(child) != "assertion" or assertion is not None:
                raise _unexpected(child)
            assertion = child
        if assertion is None:
            raise dsmlerrors.DSMLInvalidRequest(
                "missing assertion", element=element)

        name = _requiredAttribute(assertion, "name")
        value = None
        for child in childElements(assertion):
            if localName(child) != "value" or value is not None:
                raise _unexpected(child)
            value = _valueFromDsml(child)
        if value is None:
            raise dsmlerrors.DSMLInvalidRequest(
                "missing assertion value", element=assertion)
        return cls.requestClass(entry=dn, attributeDesc=name, assertionValue=value)


@register
class ModifyDNRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPModifyDNRequest
    elementName = "modDNRequest"

    def checkRequest(self):
        if self.request.entry is None:
            raise self._missing("a DN")
        if self.request.newrdn is None:
            raise self._missing("a new RDN")

    def _fillDsml(self, element, context):
        request = self.request
        element.set("dn", request.entry.getUserText())
        element.set("newrdn", request.newrdn.getUserText())
        element.set("deleteoldrdn", formatBoolean(request.deleteoldrdn))
        if request.newSuperior is not None:
            element.set("newSuperior", request.newSuperior.getUserText())

    @classmethod
    def _readDsml(cls, element, children):
        for child in children:
            raise _unexpected(child)
        dn = _dnFromDsml(element, "dn")
        newrdn = _requiredAttribute(element, "newrdn")
        try:
            newrdn = RelativeDistinguishedName(stringValue=newrdn)
        except InvalidRelativeDistinguishedName as e:
            raise dsmlerrors.DSMLInvalidRequest(str(e), element=element)
        return cls.requestClass(
            entry=dn,
            newrdn=newrdn,
            deleteoldrdn=_booleanFromDsml(element, "deleteoldrdn", True),
            newSuperior=_dnFromDsml(element, "newSuperior", required=False),
        )


@register
class DelRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPDelRequest
    elementName = "delRequest"

    def checkRequest(self):
        if self.request.entry is None:
            raise self._missing("a DN")

    def _fillDsml(self, element, context):
        element.set("dn", self.request.entry.getUserText())

    @classmethod
    def _readDsml(cls, element, children):
        for child in children:
            raise _unexpected(child)
        return cls.requestClass(entry=_dnFromDsml(element, "dn"))


_modifyOperations = {
    pureldap.LDAP_MOD_add: "add",
    pureldap.LDAP_MOD_delete: "delete",
    pureldap.LDAP_MOD_replace: "replace",
}
_modifyOperationsByName = {v: k for k, v in _modifyOperations.items()}


@register
class ModifyRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPModifyRequest
    elementName = "modifyRequest"

    def checkRequest(self):
        if self.request.object is None:
            raise self._missing("a DN")
        for modification in self.request.modification:
            if modification.operation not in _modifyOperations:
                raise dsmlerrors.DSMLInvalidRequest(
                    "unknown modification operation %r"
                    % (modification.operation,))

    def _fillDsml(self, element, context):
        element.set("dn", self.request.object.getUserText())
        for modification in self.request.modification:
            attribute = modification.attribute
            binary = (attribute.isBinary()
                      or context.isBinaryAttribute(attribute.baseType()))
            modificationElement = _subElement(element, "modification")
            modificationElement.set("name", str(attribute.key))
            modificationElement.set(
                "operation", _modifyOperations[modification.operation])
            for value in attribute:
                _valueToDsml(modificationElement, "value", value, context,
                             binary=binary)

    @classmethod
    def _readDsml(cls, element, children):
        modifications = []
        for child in children:
            if localName(child) != "modification":
                raise _unexpected(child)
            name = _requiredAttribute(child, "name")
            operation = _requiredAttribute(child, "operation")
            if operation not in _modifyOperationsByName:
                raise dsmlerrors.DSMLInvalidRequest(
                    "unknown modification operation %r" % operation,
                    element=child)
            values = []
            for valueElement in childElements(child):
                if localName(valueElement) != "value":
                    raise _unexpected(valueElement)
                values.append(_valueFromDsml(valueElement))
            modifications.append(pureldap.LDAPModification(
                _modifyOperationsByName[operation], (name, values)))
        return cls.requestClass(
            object=_dnFromDsml(element, "dn"),
            modification=modifications,
        )


_scopes = {
    pureldap.LDAP_SCOPE_baseObject: "baseObject",
    pureldap.LDAP_SCOPE_singleLevel: "singleLevel",
    pureldap.LDAP_SCOPE_wholeSubtree: "wholeSubtree",
}
_scopesByName = {v: k for k, v in _scopes.items()}

_derefAliases = {
    pureldap.LDAP_DEREF_neverDerefAliases: "neverDerefAliases",
    pureldap.LDAP_DEREF_derefInSearching: "derefInSearching",
    pureldap.LDAP_DEREF_derefFindingBaseObj: "derefFindingBaseObj",
    pureldap.LDAP_DEREF_derefAlways: "derefAlways",
}
_derefAliasesByName = {v: k for k, v in _derefAliases.items()}

_simpleFilters = {
    pureldap.LDAPFilter_equalityMatch: "equalityMatch",
    pureldap.LDAPFilter_greaterOrEqual: "greaterOrEqual",
    pureldap.LDAPFilter_lessOrEqual: "lessOrEqual",
    pureldap.LDAPFilter_approxMatch: "approxMatch",
}
_simpleFiltersByName = {v: k for k, v in _simpleFilters.items()}

_substrings = {
    pureldap.LDAPFilter_substrings_initial: "initial",
    pureldap.LDAPFilter_substrings_any: "any",
    pureldap.LDAPFilter_substrings_final: "final",
}
_substringsByName = {v: k for k, v in _substrings.items()}


def filterToDsml(parent, filt, context):
    """Write a search filter value below parent."""
    klass = type(filt)
    if klass in (pureldap.LDAPFilter_and, pureldap.LDAPFilter_or):
        element = _subElement(
            parent, "and" if klass is pureldap.LDAPFilter_and else "or")
        for item in filt:
            filterToDsml(element, item, context)
    elif klass is pureldap.LDAPFilter_not:
        element = _subElement(parent, "not")
        filterToDsml(element, filt.value, context)
    elif klass in _simpleFilters:
        element = _subElement(parent, _simpleFilters[klass])
        element.set("name", filt.attributeDesc)
        _valueToDsml(element, "value", filt.assertionValue, context)
    elif klass is pureldap.LDAPFilter_substrings:
        element = _subElement(parent, "substrings")
        element.set("name", filt.type)
        for substring in filt.substrings:
            name = _substrings.get(type(substring))
            if name is None:
                raise dsmlerrors.DSMLInvalidRequest(
                    "unknown substring %r" % (substring,))
            _valueToDsml(element, name, substring.value, context)
    elif klass is pureldap.LDAPFilter_present:
        element = _subElement(parent, "present")
        element.set("name", filt.value)
    elif klass is pureldap.LDAPFilter_extensibleMatch:
        element = _subElement(parent, "extensibleMatch")
        if filt.type:
            element.set("name", filt.type)
        if filt.matchingRule:
            element.set("matchingRule", filt.matchingRule)
        if filt.dnAttributes:
            element.set("dnAttributes", formatBoolean(filt.dnAttributes))
        _valueToDsml(element, "value", filt.matchValue, context)
    else:
        raise dsmlerrors.DSMLInvalidRequest("unknown filter %r" % (filt,))
    return element


def _singleValue(element):
    value = None
    for child in childElements(element):
        if localName(child) != "value" or value is not None:
            raise _unexpected(child)
        value = _valueFromDsml(child)
    if value is None:
        raise dsmlerrors.DSMLInvalidRequest("missing value", element=element)
    return value


def filterFromDsml(element):
    """Read one filter element (and, or, equalityMatch, ...)."""
    name = localName(element)
    if name in ("and", "or"):
        items = [filterFromDsml(child) for child in childElements(element)]
        if name == "and":
            return pureldap.LDAPFilter_and(items)
        return pureldap.LDAPFilter_or(items)
    if name == "not":
        children = childElements(element)
        if len(children) != 1:
            raise dsmlerrors.DSMLInvalidRequest(
                "not needs exactly one filter", element=element)
        return pureldap.LDAPFilter_not(filterFromDsml(children[0]))
    if name in _simpleFiltersByName:
        return _simpleFiltersByName[name](
            attributeDesc=_requiredAttribute(element, "name"),
            assertionValue=_singleValue(element),
        )
    if name == "substrings":
        substrings = []
        for child in childElements(element):
            klass = _substringsByName.get(localName(child))
            if klass is None:
                raise _unexpected(child)
            substrings.append(klass(_valueFromDsml(child)))
        return pureldap.LDAPFilter_substrings(
            type=_requiredAttribute(element, "name"), substrings=substrings)
    if name == "present":
        return pureldap.LDAPFilter_present(_requiredAttribute(element, "name"))
    if name == "extensibleMatch":
        return pureldap.LDAPFilter_extensibleMatch(
            matchingRule=element.get("matchingRule"),
            type=element.get("name"),
            matchValue=_singleValue(element),
            dnAttributes=_booleanFromDsml(element, "dnAttributes", False),
        )
    raise _unexpected(element)


def _enumFromDsml(element, name, mapping):
    text = _requiredAttribute(element, name)
    if text not in mapping:
        raise dsmlerrors.DSMLInvalidRequest(
            "unknown %s %r" % (name, text), element=element)
    return mapping[text]


def _intFromDsml(element, name):
    text = element.get(name)
    if text is None:
        return None
    try:
        value = int(text)
    except ValueError:
        value = -1
    if value < 0:
        raise dsmlerrors.DSMLInvalidRequest(
            "%s must be a non-negative integer, not %r" % (name, text),
            element=element)
    return value


@register
class SearchRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPSearchRequest
    elementName = "searchRequest"

    def checkRequest(self):
        request = self.request
        if request.baseObject is None:
            raise self._missing("a base DN")
        if request.scope not in _scopes:
            raise dsmlerrors.DSMLInvalidRequest(
                "unknown search scope %r" % (request.scope,))
        if request.derefAliases not in _derefAliases:
            raise dsmlerrors.DSMLInvalidRequest(
                "unknown derefAliases %r" % (request.derefAliases,))
        self.filter = self._parseFilter(request.filter)

    @staticmethod
    def _parseFilter(filt):
        """Filters may be given in their RFC 4515 text form."""
        if isinstance(filt, (str, bytes)):
            try:
                return ldapfilter.parseFilter(filt)
            except ldapfilter.InvalidLDAPFilter as e:
                raise dsmlerrors.DSMLInvalidRequest(str(e))
        return filt

    def _fillDsml(self, element, context):
        request = self.request
        element.set("dn", request.baseObject.getUserText())
        element.set("scope", _scopes[request.scope])
        element.set("derefAliases", _derefAliases[request.derefAliases])
        if request.sizeLimit:
            element.set("sizeLimit", str(request.sizeLimit))
        if request.timeLimit:
            element.set("timeLimit", str(request.timeLimit))
        if request.typesOnly:
            element.set("typesOnly", formatBoolean(request.typesOnly))
        filterElement = _subElement(element, "filter")
        filterToDsml(filterElement, self.filter, context)
        if request.attributes:
            attributes = _subElement(element, "attributes")
            for name in request.attributes:
                _subElement(attributes, "attribute").set("name", name)

    @classmethod
    def _readDsml(cls, element, children):
        filt = None
        attributes = None
        for child in children:
            name = localName(child)
            if name == "filter" and filt is None:
                items = childElements(child)
                if len(items) != 1:
                    raise dsmlerrors.DSMLInvalidRequest(
                        "filter needs exactly one item", element=child)
                filt = filterFromDsml(items[0])
            elif name == "attributes" and attributes is None:
                attributes = []
                for attribute in childElements(child):
                    if localName(attribute) != "attribute":
                        raise _unexpected(attribute)
                    attributes.append(_requiredAttribute(attribute, "name"))
            else:
                raise _unexpected(child)
        if filt is None:
            raise dsmlerrors.DSMLInvalidRequest("missing filter", element=element)

        return cls.requestClass(
            baseObject=_dnFromDsml(element, "dn"),
            scope=_enumFromDsml(element, "scope", _scopesByName),
            derefAliases=_enumFromDsml(element, "derefAliases", _derefAliasesByName),
            sizeLimit=_intFromDsml(element, "sizeLimit"),
            timeLimit=_intFromDsml(element, "timeLimit"),
            typesOnly=_booleanFromDsml(element, "typesOnly", False),
            filter=filt,
            attributes=attributes or (),
        )


@register
class AbandonRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPAbandonRequest
    elementName = "abandonRequest"

    def checkRequest(self):
        if self.request.id is None:
            raise self._missing("an abandonID")

    def _fillDsml(self, element, context):
        element.set("abandonID", str(self.request.id))

    @classmethod
    def _readDsml(cls, element, children):
        for child in children:
            raise _unexpected(child)
        return cls.requestClass(id=_requiredAttribute(element, "abandonID"))


@register
class ExtendedRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPExtendedRequest
    elementName = "extendedRequest"

    def checkRequest(self):
        if not self.request.requestName:
            raise self._missing("a requestName")

    def _fillDsml(self, element, context):
        _subElement(element, "requestName").text = self.request.requestName
        if self.request.requestValue is not None:
            _valueToDsml(element, "requestValue", self.request.requestValue,
                         context, binary=True)

    @classmethod
    def _readDsml(cls, element, children):
        requestName = None
        requestValue = None
        for child in children:
            name = localName(child)
            if name == "requestName" and requestName is None:
                requestName = (child.text or "").strip()
            elif name == "requestValue" and requestValue is None:
                requestValue = _valueFromDsml(child)
            else:
                raise _unexpected(child)
        if not requestName:
            raise dsmlerrors.DSMLInvalidRequest(
                "missing requestName", element=element)
        return cls.requestClass(requestName=requestName, requestValue=requestValue)


@register
class AuthRequestDsml(RequestDsml):
    requestClass = pureldap.LDAPBindRequest
    elementName = "authRequest"

    def checkRequest(self):
        if not self.request.dn:
            raise self._missing("a principal")

    def _fillDsml(self, element, context):
        element.set("principal", self.request.dn)

    @classmethod
    def _readDsml(cls, element, children):
        for child in children:
            raise _unexpected(child)
        return cls.requestClass(dn=_requiredAttribute(element, "principal"))
