"""
The DSMLv2 batchRequest envelope.
"""

from lxml import etree
from twisted.python import log

from dsmltor.protocols.dsml import dsmlerrors, requestdsml
from dsmltor.protocols.dsml.context import EmissionContext
from dsmltor.protocols.dsml.parserutils import (
    DSML_NAMESPACE_URI,
    childElements,
    localName,
    qname,
)

PROCESSING_SEQUENTIAL = "sequential"
PROCESSING_PARALLEL = "parallel"
PROCESSING = (PROCESSING_SEQUENTIAL, PROCESSING_PARALLEL)

RESPONSE_ORDER_SEQUENTIAL = "sequential"
RESPONSE_ORDER_UNORDERED = "unordered"
RESPONSE_ORDERS = (RESPONSE_ORDER_SEQUENTIAL, RESPONSE_ORDER_UNORDERED)

ON_ERROR_RESUME = "resume"
ON_ERROR_EXIT = "exit"
ON_ERRORS = (ON_ERROR_RESUME, ON_ERROR_EXIT)

_policies = (
    ("processing", "processing", PROCESSING),
    ("responseOrder", "responseOrder", RESPONSE_ORDERS),
    ("onError", "onError", ON_ERRORS),
)


class BatchRequest:
    """
    An ordered list of requests plus the batch level policy.

    Unset policies are left out of the document; DSMLv2 then means
    sequential processing, sequential response order and exit on error.
    """

    def __init__(self, requests=None, requestID=None, processing=None,
                 responseOrder=None, onError=None):
        self.requests = list(requests or ())
        self.requestID = None if requestID is None else str(requestID)
        self.processing = processing
        self.responseOrder = responseOrder
        self.onError = onError

    def copy(self, **kw):
        """A new batch sharing the requests, with some fields replaced."""
        for name in ("requestID", "processing", "responseOrder", "onError"):
            if name not in kw:
                kw[name] = getattr(self, name)
        return self.__class__(self.requests, **kw)

    def addRequest(self, request):
        self.requests.append(request)
        return request

    def __iter__(self):
        return iter(self.requests)

    def __len__(self):
        return len(self.requests)

    def __eq__(self, other):
        if not isinstance(other, BatchRequest):
            return NotImplemented
        return (self.requests == other.requests
                and self.requestID == other.requestID
                and self.processing == other.processing
                and self.responseOrder == other.responseOrder
                and self.onError == other.onError)

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        l = ["requests=%r" % self.requests]
        for name in ("requestID", "processing", "responseOrder", "onError"):
            value = getattr(self, name)
            if value is not None:
                l.append("%s=%r" % (name, value))
        return self.__class__.__name__ + "(" + ", ".join(l) + ")"


class BatchRequestDsml:
    """
    Writes a L{BatchRequest} as a batchRequest document root and reads
    it back.
    """
    elementName = "batchRequest"

    def __init__(self, batch=None):
        if batch is None:
            batch = BatchRequest()
        self.batch = batch

    def checkRequest(self):
        for attribute, name, allowed in _policies:
            value = getattr(self.batch, attribute)
            if value is not None and value not in allowed:
                raise dsmlerrors.DSMLInvalidRequest(
                    "%s must be one of %s, not %r"
                    % (name, ", ".join(allowed), value))

    def toDsml(self, binaryAttributes=()):
        """
        Build a new document for the batch and return its root.

        Every request is wrapped with L{requestdsml.wrap} before anything
        is written, so an unsupported request fails the whole batch.
        """
        self.checkRequest()
        emitters = [requestdsml.wrap(r) for r in self.batch.requests]

        root = etree.Element(qname(self.elementName),
                             nsmap={None: DSML_NAMESPACE_URI})
        if self.batch.requestID is not None:
            root.set("requestID", str(self.batch.requestID))
        for attribute, name, allowed in _policies:
            value = getattr(self.batch, attribute)
            if value is not None:
                root.set(name, value)

        context = EmissionContext(root, binaryAttributes)
        for emitter in emitters:
            emitter.toDsml(root, context)
        log.msg("Encoded batchRequest with %d requests" % len(emitters),
                debug=True)
        return root

    @classmethod
    def fromDsml(cls, root):
        if localName(root) != cls.elementName:
            raise dsmlerrors.DSMLInvalidRequest(
                "expected %s" % cls.elementName, element=root)

        kw = {"requestID": root.get("requestID")}
        for attribute, name, allowed in _policies:
            value = root.get(name)
            if value is not None and value not in allowed:
                raise dsmlerrors.DSMLInvalidRequest(
                    "%s must be one of %s, not %r"
                    % (name, ", ".join(allowed), value),
                    element=root)
            kw[attribute] = value

        requests = [requestdsml.decodeRequest(child)
                    for child in childElements(root)]
        log.msg("Decoded batchRequest with %d requests" % len(requests),
                debug=True)
        return BatchRequest(requests, **kw)


def encode(batch, config=None):
    """
    Build the DSMLv2 batchRequest element tree for batch.

    @param config: optional L{dsmltor.interfaces.IDSMLConfig} supplying
        the attributes that are binary by syntax, and the policies used
        where the batch leaves them unset.
    """
    if config is None:
        return BatchRequestDsml(batch).toDsml()

    overrides = {}
    for attribute, getter in (("processing", config.getProcessing),
                              ("responseOrder", config.getResponseOrder),
                              ("onError", config.getOnError)):
        if getattr(batch, attribute) is None:
            value = getter()
            if value is not None:
                overrides[attribute] = value
    if overrides:
        batch = batch.copy(**overrides)
    return BatchRequestDsml(batch).toDsml(config.getBinaryAttributes())


def decode(root):
    """Read a batchRequest element tree into a L{BatchRequest}."""
    return BatchRequestDsml.fromDsml(root)


def toBytes(root, pretty_print=False):
    """Serialize an element tree as a UTF-8 XML document."""
    return etree.tostring(
        root,
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=pretty_print,
    )
