"""
Errors raised while encoding or decoding DSMLv2 requests.

Every error belongs to one kind: C{invalidRequest}, C{unsupported}
or C{inconsistent}. Use L{get} to build the error for a kind name.
"""


def get(kind, errorMessage, element=None):
    """Get an instance of the correct exception for this kind."""
    return DSMLExceptionCollection.get_instance(kind, errorMessage, element)


def locate(element):
    """
    Describe where an element sits in its source document, eg.
    C{<addRequest> at line 3}.
    """
    if element is None:
        return None
    tag = element.tag
    if isinstance(tag, str) and tag.startswith('{'):
        tag = tag.split('}', 1)[1]
    where = '<%s>' % (tag,)
    if getattr(element, 'sourceline', None) is not None:
        where = '%s at line %d' % (where, element.sourceline)
    return where


class DSMLExceptionCollection(type):
    """
    Storage for the DSML error kinds and
    the corresponding classes.
    """

    collection = {}

    def __new__(mcs, name, bases, attributes):
        cls = type.__new__(mcs, name, bases, attributes)
        kind = attributes.get('kind')
        if kind is not None:
            assert isinstance(kind, str)
            mcs.collection[kind] = cls
        return cls

    @classmethod
    def get_instance(mcs, kind, message, element=None):
        """Get an instance of the correct exception for this kind."""
        cls = mcs.collection.get(kind)
        if cls is None:
            raise KeyError("unknown DSML error kind %r" % (kind,))
        return cls(message, element=element)


class DSMLException(Exception, metaclass=DSMLExceptionCollection):
    kind = None

    def __init__(self, message=None, element=None):
        Exception.__init__(self)
        self.message = message
        self.location = locate(element)

    def __str__(self):
        s = self.kind or 'dsmlError'
        if self.message:
            s = '%s: %s' % (s, self.message)
        if self.location:
            s = '%s (%s)' % (s, self.location)
        return s


class DSMLInvalidRequest(DSMLException):
    """
    A required field is missing, an enumerated value is unknown, or a
    DN, RDN, filter or base64 payload is malformed.
    """
    kind = 'invalidRequest'


class DSMLUnsupported(DSMLException):
    """The request kind has no DSMLv2 encoding in this library."""
    kind = 'unsupported'


class DSMLInconsistent(DSMLException):
    """The request contradicts itself, eg. a duplicate attribute."""
    kind = 'inconsistent'
