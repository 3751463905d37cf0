"""
Helpers shared by the DSMLv2 encoder and decoder: namespace
constants, element naming and base64 framing of values.
"""

import base64
import binascii

from dsmltor._encoder import to_bytes

DSML_NAMESPACE_URI = "urn:oasis:names:tc:DSML:2:0:core"
XML_SCHEMA_URI = "http://www.w3.org/2001/XMLSchema"
XML_SCHEMA_INSTANCE_URI = "http://www.w3.org/2001/XMLSchema-instance"

XSD_PREFIX = "xsd"
XSI_PREFIX = "xsi"

BASE64BINARY = "base64Binary"
XSI_TYPE = "{%s}type" % XML_SCHEMA_INSTANCE_URI
BASE64BINARY_TYPE = "%s:%s" % (XSD_PREFIX, BASE64BINARY)

SCHEMA_NSMAP = {
    XSD_PREFIX: XML_SCHEMA_URI,
    XSI_PREFIX: XML_SCHEMA_INSTANCE_URI,
}

_WHITESPACE = b" \t\n\r"


def qname(localName, namespace=DSML_NAMESPACE_URI):
    """Clark notation name of a DSML element, eg. '{urn:...}addRequest'."""
    if namespace is None:
        return localName
    return "{%s}%s" % (namespace, localName)


def localName(element):
    """The element name without its namespace."""
    tag = element.tag
    if not isinstance(tag, str):
        return None
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def namespaceOf(element):
    tag = element.tag
    if isinstance(tag, str) and tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def childElements(element):
    """Child elements, skipping comments and processing instructions."""
    return [child for child in element if isinstance(child.tag, str)]


def needsBase64Encoding(value):
    """
    Whether a value has to be sent base64 encoded.

    A byte needs framing when it is above 0x7F, or below 0x20 and
    neither line feed nor carriage return. Strings are checked on
    their UTF-8 encoding.
    """
    for c in to_bytes(value):
        if c > 0x7F:
            return True
        if c < 0x20 and c not in (0x0A, 0x0D):
            return True
    return False


def base64Encode(value):
    """RFC 4648 base64 of the value, as an unwrapped text string."""
    return base64.b64encode(to_bytes(value)).decode("ascii")


def base64Decode(text):
    """
    Decode base64 text, ignoring any whitespace in it.

    @raise ValueError: text is not valid base64.
    """
    data = to_bytes(text or "")
    data = bytes(c for c in data if c not in _WHITESPACE)
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ValueError("invalid base64 payload: %s" % (e,))


def isBase64Binary(element):
    """Whether an element carries xsi:type="...:base64Binary"."""
    xsiType = element.get(XSI_TYPE)
    if xsiType is None:
        return False
    return xsiType.split(":")[-1].strip() == BASE64BINARY


def parseBoolean(text):
    """
    Parse a DSML boolean; returns None for anything that is not one
    of true, false, 1 or 0 (case-insensitive).
    """
    if text is None:
        return None
    text = text.strip().lower()
    if text in ("true", "1"):
        return True
    if text in ("false", "0"):
        return False
    return None


def formatBoolean(value):
    return "true" if value else "false"
