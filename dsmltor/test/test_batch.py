"""
Test cases for dsmltor.protocols.dsml.batch
"""

from lxml import etree
from twisted.trial import unittest

from dsmltor import config
from dsmltor.protocols import pureldap
from dsmltor.protocols.dsml import batch, dsmlerrors
from dsmltor.protocols.dsml.parserutils import (
    DSML_NAMESPACE_URI,
    XML_SCHEMA_INSTANCE_URI,
)


def sampleBatch(**kw):
    return batch.BatchRequest([
        pureldap.LDAPAddRequest(
            entry='cn=alice,ou=people,dc=ex,dc=com',
            attributes=[('objectClass', ['top', 'person']),
                        ('cn', ['alice'])],
            requestID='1'),
        pureldap.LDAPCompareRequest(
            entry='cn=alice,ou=people,dc=ex,dc=com',
            attributeDesc='sn', assertionValue='Smith', requestID='2'),
        pureldap.LDAPModifyDNRequest(
            entry='cn=alice,ou=people,dc=ex,dc=com', newrdn='cn=alicia',
            requestID='3'),
        pureldap.LDAPDelRequest(entry='cn=alicia,ou=people,dc=ex,dc=com',
                                requestID='4'),
    ], **kw)


class BatchRequestTests(unittest.TestCase):
    def test_addRequest(self):
        b = batch.BatchRequest()
        request = pureldap.LDAPDelRequest(entry='cn=x')
        self.assertIs(b.addRequest(request), request)
        self.assertEqual(list(b), [request])
        self.assertEqual(len(b), 1)

    def test_copy(self):
        b = sampleBatch(onError='resume')
        c = b.copy(processing='parallel')
        self.assertEqual(c.onError, 'resume')
        self.assertEqual(c.processing, 'parallel')
        self.assertEqual(c.requests, b.requests)
        self.assertIsNone(b.processing)

    def test_repr(self):
        self.assertEqual(repr(batch.BatchRequest(requestID='9')),
                         "BatchRequest(requests=[], requestID='9')")

    def test_integerRequestID(self):
        b = batch.BatchRequest(requestID=9)
        self.assertEqual(b.requestID, '9')
        self.assertEqual(batch.decode(batch.encode(b)), b)


class EncodeTests(unittest.TestCase):
    def test_empty(self):
        root = batch.encode(batch.BatchRequest())
        self.assertEqual(
            etree.tostring(root),
            b'<batchRequest xmlns="urn:oasis:names:tc:DSML:2:0:core"/>')

    def test_root(self):
        root = batch.encode(sampleBatch(requestID='batch-1',
                                        processing='sequential',
                                        responseOrder='unordered',
                                        onError='resume'))
        self.assertEqual(root.tag, '{%s}batchRequest' % DSML_NAMESPACE_URI)
        self.assertEqual(root.nsmap, {None: DSML_NAMESPACE_URI})
        self.assertEqual(root.get('requestID'), 'batch-1')
        self.assertEqual(root.get('processing'), 'sequential')
        self.assertEqual(root.get('responseOrder'), 'unordered')
        self.assertEqual(root.get('onError'), 'resume')

    def test_requestsInOrder(self):
        root = batch.encode(sampleBatch())
        self.assertEqual(
            [etree.QName(child).localname for child in root],
            ['addRequest', 'compareRequest', 'modDNRequest', 'delRequest'])
        self.assertEqual([child.get('requestID') for child in root],
                         ['1', '2', '3', '4'])

    def test_unsetPoliciesOmitted(self):
        root = batch.encode(sampleBatch())
        for name in ('requestID', 'processing', 'responseOrder', 'onError'):
            self.assertIsNone(root.get(name))

    def test_badPolicy(self):
        self.assertRaises(dsmlerrors.DSMLInvalidRequest,
                          batch.encode, sampleBatch(processing='whenever'))

    def test_unsupportedRequestFailsWholeBatch(self):
        b = sampleBatch()
        b.addRequest(pureldap.LDAPUnbindRequest())
        self.assertRaises(dsmlerrors.DSMLUnsupported, batch.encode, b)

    def test_namespacesOnlyWhenFramed(self):
        b = sampleBatch()
        self.assertNotIn('xsi', batch.encode(b).nsmap)
        b.addRequest(pureldap.LDAPAddRequest(
            entry='cn=bob,dc=ex', attributes=[('photo', [b'\x00'])]))
        root = batch.encode(b)
        self.assertEqual(root.nsmap['xsi'], XML_SCHEMA_INSTANCE_URI)
        self.assertEqual(etree.tostring(root).count(b'xmlns:xsi='), 1)

    def test_config(self):
        """
        The config names binary attributes and fills in the policies
        the batch leaves unset.
        """
        b = batch.BatchRequest([pureldap.LDAPAddRequest(
            entry='cn=bob,dc=ex', attributes=[('jpegPhoto', ['abc'])])],
            onError='exit')
        cfg = config.DSMLConfig(binaryAttributes=['jpegPhoto'],
                                processing='parallel',
                                responseOrder='unordered',
                                onError='resume')
        root = batch.encode(b, cfg)
        self.assertEqual(root.get('processing'), 'parallel')
        self.assertEqual(root.get('responseOrder'), 'unordered')
        self.assertEqual(root.get('onError'), 'exit')
        self.assertEqual(root[0][0][0].text, 'YWJj')
        self.assertIsNone(b.processing)


class DecodeTests(unittest.TestCase):
    def test_roundTrip(self):
        b = sampleBatch(requestID='x', processing='parallel',
                        responseOrder='sequential', onError='exit')
        self.assertEqual(batch.decode(batch.encode(b)), b)

    def test_notABatch(self):
        self.assertRaises(dsmlerrors.DSMLInvalidRequest,
                          batch.decode,
                          etree.fromstring(b'<addRequest dn="cn=x"/>'))

    def test_badPolicy(self):
        root = etree.fromstring(
            b'<batchRequest xmlns="urn:oasis:names:tc:DSML:2:0:core"'
            b' onError="panic"/>')
        self.assertRaises(dsmlerrors.DSMLInvalidRequest, batch.decode, root)

    def test_errorInRequestStopsDecoding(self):
        root = etree.fromstring(
            b'<batchRequest xmlns="urn:oasis:names:tc:DSML:2:0:core">'
            b'<delRequest dn="cn=x"/><delRequest/></batchRequest>')
        self.assertRaises(dsmlerrors.DSMLInvalidRequest, batch.decode, root)


class ToBytesTests(unittest.TestCase):
    def test_declaration(self):
        data = batch.toBytes(batch.encode(batch.BatchRequest()))
        self.assertTrue(data.startswith(b"<?xml version='1.0' encoding='UTF-8'?>"))

    def test_utf8(self):
        b = batch.BatchRequest([pureldap.LDAPDelRequest(entry=u'cn=J\xfcrgen')])
        data = batch.toBytes(batch.encode(b))
        self.assertIn(u'cn=J\xfcrgen'.encode('utf-8'), data)

    def test_pretty(self):
        data = batch.toBytes(batch.encode(sampleBatch()), pretty_print=True)
        self.assertIn(b'\n  <addRequest', data)
