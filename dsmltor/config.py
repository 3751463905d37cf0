import configparser
import os.path

from zope.interface import implementer

from dsmltor import interfaces
from dsmltor.insensitive import InsensitiveString
from dsmltor.protocols.dsml import batch

DEFAULT_BINARY_ATTRIBUTES = (
    "jpegPhoto",
    "userCertificate",
    "cACertificate",
    "certificateRevocationList",
    "authorityRevocationList",
    "crossCertificatePair",
    "userPKCS12",
    "userSMIMECertificate",
    "objectGUID",
    "objectSid",
)


class InvalidConfigValueError(Exception):
    """A configuration option has a value out of its allowed set."""

    def __init__(self, option, value, allowed):
        Exception.__init__(self)
        self.option = option
        self.value = value
        self.allowed = allowed

    def __str__(self):
        return "%s must be one of %s, not %r" % (
            self.option, ", ".join(self.allowed), self.value)


@implementer(interfaces.IDSMLConfig)
class DSMLConfig:
    """
    Policy handed to the encoder.

    Anything not given to the constructor is looked up in the
    configuration files, see L{loadConfig}.
    """

    binaryAttributes = None
    prettyPrint = None
    processing = None
    responseOrder = None
    onError = None

    def __init__(self,
                 binaryAttributes=None,
                 prettyPrint=None,
                 processing=None,
                 responseOrder=None,
                 onError=None):
        if binaryAttributes is not None:
            self.binaryAttributes = frozenset(
                InsensitiveString(a) for a in binaryAttributes)
        if prettyPrint is not None:
            self.prettyPrint = prettyPrint
        if processing is not None:
            self.processing = processing
        if responseOrder is not None:
            self.responseOrder = responseOrder
        if onError is not None:
            self.onError = onError

    def getBinaryAttributes(self):
        if self.binaryAttributes is not None:
            return self.binaryAttributes

        cfg = loadConfig()
        value = cfg.get('dsml', 'binary-attributes')
        return frozenset(InsensitiveString(a.strip())
                         for a in value.split(',') if a.strip())

    def getPrettyPrint(self):
        if self.prettyPrint is not None:
            return self.prettyPrint

        cfg = loadConfig()
        return cfg.getboolean('dsml', 'pretty-print')

    def _getChoice(self, attribute, option, allowed):
        value = getattr(self, attribute)
        if value is None:
            cfg = loadConfig()
            try:
                value = cfg.get('dsml', option)
            except (configparser.NoOptionError,
                    configparser.NoSectionError):
                return None
        if value not in allowed:
            raise InvalidConfigValueError(option, value, allowed)
        return value

    def getProcessing(self):
        return self._getChoice('processing', 'processing', batch.PROCESSING)

    def getResponseOrder(self):
        return self._getChoice('responseOrder', 'response-order',
                               batch.RESPONSE_ORDERS)

    def getOnError(self):
        return self._getChoice('onError', 'on-error', batch.ON_ERRORS)

    def copy(self, **kw):
        for name in ('binaryAttributes', 'prettyPrint', 'processing',
                     'responseOrder', 'onError'):
            if name not in kw:
                kw[name] = getattr(self, name)
        return self.__class__(**kw)


DEFAULTS = {
    'dsml': {
        'binary-attributes': ', '.join(DEFAULT_BINARY_ATTRIBUTES),
        'pretty-print': 'no',
    },
}

CONFIG_FILES = [
    '/etc/dsmltor/global.cfg',
    os.path.expanduser('~/.dsmltor/global.cfg'),
]

__config = None


def loadConfig(configFiles=None,
               reload=False):
    """
    Load configuration file.
    """
    global __config
    if __config is None or reload:
        x = configparser.ConfigParser(interpolation=None)
        x.optionxform = InsensitiveString

        for section, options in DEFAULTS.items():
            x.add_section(section)
            for option, value in options.items():
                x.set(section, option, value)

        if configFiles is None:
            configFiles = CONFIG_FILES
        x.read(configFiles)
        __config = x
    return __config
