"""
    Conversions between the str and bytes forms of values
"""


def to_bytes(value):
    """
    The octets of a DSML value.

    * str values are encoded as UTF-8
    * bytes and bytearray values are taken as they are

    Anything else is a TypeError: DSML values are text or binary.
    """
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise TypeError("DSML values are str or bytes, not %s"
                    % type(value).__name__)


def to_unicode(value):
    """
    Text input given as UTF-8 bytes is decoded; str passes through.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return value


class TextStrAlias:
    """
    Mixin making str() of a value its getText() form.
    """

    def __str__(self):
        return self.getText()

    def getText(self):
        raise NotImplementedError("getText method is not implemented")
