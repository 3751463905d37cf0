"""
Reading DSMLv2 documents from bytes and files.
"""

from lxml import etree

from dsmltor.protocols.dsml import batch, dsmlerrors


def _parser():
    return etree.XMLParser(
        remove_comments=True,
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
    )


def parseDocument(data):
    """
    Parse XML bytes into an element tree root.

    Entities are not resolved and nothing is fetched from the network.

    @raise dsmlerrors.DSMLInvalidRequest: data is not well formed XML.
    """
    try:
        return etree.fromstring(data, parser=_parser())
    except etree.XMLSyntaxError as e:
        raise dsmlerrors.DSMLInvalidRequest("invalid XML: %s" % (e,))


def parseBatch(data):
    """Parse XML bytes holding a batchRequest into a BatchRequest."""
    return batch.decode(parseDocument(data))


def parseFile(path):
    """Parse the batchRequest document stored at path."""
    with open(path, "rb") as f:
        return parseBatch(f.read())
