"""
Test cases for the dsmltor.config module.
"""

import os

from twisted.trial import unittest
from dsmltor import config
from dsmltor.insensitive import InsensitiveString
from dsmltor.interfaces import IDSMLConfig


def writeFile(path, content):
    f = open(path, "wb")
    f.write(content)
    f.close()


def reloadFromContent(testCase, content):
    """
    Reload the global configuration file with raw `content`.
    """
    base_path = testCase.mktemp()
    os.mkdir(base_path)
    config_path = os.path.join(base_path, "test.cfg")
    writeFile(config_path, content)

    # Reload with empty content to reduce the side effects.
    testCase.addCleanup(config.loadConfig, configFiles=[], reload=True)

    return config.loadConfig(
        configFiles=[config_path],
        reload=True,
    )


class TestLoadConfig(unittest.TestCase):
    """
    Tests for loadConfig.
    """

    def testMultipleConfigurationFiles(self):
        """
        It can read configuration from multiple files, merging the
        loaded values.
        """
        self.dir = self.mktemp()
        os.mkdir(self.dir)
        self.f1 = os.path.join(self.dir, "one.cfg")
        writeFile(
            self.f1,
            b"""\
[dsml]
processing = parallel

[fooSection]
fooVar = val
""",
        )
        self.f2 = os.path.join(self.dir, "two.cfg")
        writeFile(
            self.f2,
            b"""\
[dsml]
processing = sequential
""",
        )
        self.addCleanup(config.loadConfig, configFiles=[], reload=True)
        cfg = config.loadConfig(configFiles=[self.f1, self.f2], reload=True)

        self.assertEqual(cfg.get("dsml", "processing"), "sequential")
        self.assertEqual(cfg.get("fooSection", "fooVar"), "val")

    def testDefaults(self):
        self.addCleanup(config.loadConfig, configFiles=[], reload=True)
        cfg = config.loadConfig(configFiles=[], reload=True)
        self.assertFalse(cfg.getboolean("dsml", "pretty-print"))
        self.assertIn("jpegPhoto", cfg.get("dsml", "binary-attributes"))

    def testCached(self):
        self.addCleanup(config.loadConfig, configFiles=[], reload=True)
        cfg = config.loadConfig(configFiles=[], reload=True)
        self.assertIs(config.loadConfig(), cfg)

    def testOptionNamesIgnoreCase(self):
        cfg = reloadFromContent(self, b"[dsml]\nPretty-Print = yes\n")
        self.assertTrue(cfg.getboolean("dsml", "pretty-print"))


class TestDSMLConfig(unittest.TestCase):
    """
    Unit tests for DSMLConfig.
    """

    def testProvidesInterface(self):
        self.assertTrue(IDSMLConfig.providedBy(config.DSMLConfig()))

    def testBinaryAttributesExplicit(self):
        cfg = config.DSMLConfig(binaryAttributes=["photo"])
        self.assertEqual(cfg.getBinaryAttributes(), frozenset(["photo"]))
        self.assertIn(InsensitiveString("PHOTO"), cfg.getBinaryAttributes())

    def testBinaryAttributesFromFile(self):
        reloadFromContent(
            self, b"[dsml]\nbinary-attributes = audio,  jpegPhoto ,\n")
        attributes = config.DSMLConfig().getBinaryAttributes()
        self.assertEqual(len(attributes), 2)
        self.assertIn(InsensitiveString("JPEGPHOTO"), attributes)
        self.assertIn("audio", attributes)

    def testBinaryAttributesDefault(self):
        reloadFromContent(self, b"")
        attributes = config.DSMLConfig().getBinaryAttributes()
        self.assertIn(InsensitiveString("userCertificate"), attributes)
        self.assertIn(InsensitiveString("objectSid"), attributes)

    def testPrettyPrint(self):
        reloadFromContent(self, b"[dsml]\npretty-print = true\n")
        self.assertTrue(config.DSMLConfig().getPrettyPrint())
        self.assertFalse(config.DSMLConfig(prettyPrint=False).getPrettyPrint())

    def testPoliciesUnset(self):
        reloadFromContent(self, b"")
        cfg = config.DSMLConfig()
        self.assertIsNone(cfg.getProcessing())
        self.assertIsNone(cfg.getResponseOrder())
        self.assertIsNone(cfg.getOnError())

    def testPoliciesFromFile(self):
        reloadFromContent(
            self,
            b"[dsml]\nprocessing = parallel\nresponse-order = unordered\n"
            b"on-error = resume\n")
        cfg = config.DSMLConfig()
        self.assertEqual(cfg.getProcessing(), "parallel")
        self.assertEqual(cfg.getResponseOrder(), "unordered")
        self.assertEqual(cfg.getOnError(), "resume")

    def testPolicyExplicitWins(self):
        reloadFromContent(self, b"[dsml]\non-error = resume\n")
        self.assertEqual(config.DSMLConfig(onError="exit").getOnError(), "exit")

    def testPolicyInvalid(self):
        reloadFromContent(self, b"[dsml]\nprocessing = whenever\n")
        e = self.assertRaises(config.InvalidConfigValueError,
                              config.DSMLConfig().getProcessing)
        self.assertEqual(
            str(e), "processing must be one of sequential, parallel, "
                    "not 'whenever'")

    def testCopy(self):
        cfg = config.DSMLConfig(binaryAttributes=["photo"], onError="exit")
        other = cfg.copy(onError="resume")
        self.assertEqual(other.getBinaryAttributes(), frozenset(["photo"]))
        self.assertEqual(other.getOnError(), "resume")
        self.assertEqual(cfg.getOnError(), "exit")
