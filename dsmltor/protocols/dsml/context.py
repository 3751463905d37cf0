"""
State shared by all emitters writing into one DSMLv2 document.
"""

from lxml import etree
from twisted.python import log

from dsmltor.insensitive import InsensitiveString
from dsmltor.protocols.dsml.parserutils import SCHEMA_NSMAP, localName


class EmissionContext:
    """
    One emission into one document.

    Knows the document root, whether the xsd and xsi namespaces have
    already been declared on it, and which attributes are binary by
    syntax. Not safe for concurrent use.

    @ivar root: the root element of the document being written.
    @ivar binaryAttributes: attribute types whose values are always
        sent base64 encoded, compared without regard to case.
    @ivar schemaNamespacesDeclared: whether xsd and xsi are declared
        on the root.
    """

    def __init__(self, root, binaryAttributes=()):
        assert root is not None
        self.root = root
        self.binaryAttributes = frozenset(
            InsensitiveString(a) for a in binaryAttributes)
        self.schemaNamespacesDeclared = all(
            root.nsmap.get(prefix) == uri
            for prefix, uri in SCHEMA_NSMAP.items())

    @classmethod
    def forElement(cls, element, binaryAttributes=()):
        """A context for writing below element, rooted at its document root."""
        return cls(element.getroottree().getroot(), binaryAttributes)

    def isBinaryAttribute(self, attributeType):
        return InsensitiveString(attributeType) in self.binaryAttributes

    def declareSchemaNamespaces(self):
        """
        Declare the xsd and xsi prefixes on the document root, once
        per document.
        """
        if self.schemaNamespacesDeclared:
            return
        keep = [prefix for prefix in self.root.nsmap if prefix is not None]
        keep.extend(SCHEMA_NSMAP)
        etree.cleanup_namespaces(
            self.root,
            top_nsmap=SCHEMA_NSMAP,
            keep_ns_prefixes=keep,
        )
        self.schemaNamespacesDeclared = True
        log.msg(
            "Declared xsd and xsi namespaces on <%s>" % localName(self.root),
            debug=True,
        )

    def checkpoint(self):
        """The namespace state of the root, for L{restore}."""
        return self.schemaNamespacesDeclared, list(self.root.nsmap)

    def restore(self, checkpoint):
        """
        Take back the xsd and xsi declarations made since checkpoint.

        Only valid once everything written since then has been removed
        from the document.
        """
        declared, prefixes = checkpoint
        if declared or not self.schemaNamespacesDeclared:
            return
        etree.cleanup_namespaces(
            self.root,
            keep_ns_prefixes=[p for p in prefixes if p is not None],
        )
        self.schemaNamespacesDeclared = False
