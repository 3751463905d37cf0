"""
Command line argument/options available to various dsmltor tools.
"""
from twisted.python import usage, reflect
from twisted.python.usage import UsageError

from dsmltor.protocols.dsml import batch

__all__ = [
    "Options",
    "Options_binary_attributes",
    "Options_on_error",
    "Options_pretty",
    "Options_processing",
    "Options_response_order",
    "UsageError",
]


class Options(usage.Options):
    optParameters = ()

    def postOptions(self):
        postOpt = {}
        reflect.addMethodNamesToDict(self.__class__, postOpt, "postOptions_")
        for name in postOpt.keys():
            method = getattr(self, "postOptions_" + name)
            method()


class Options_binary_attributes:
    """
    Mixin for providing the --binary-attribute option.
    """

    def opt_binary_attribute(self, value):
        """Attribute type whose values are always base64 encoded, may be repeated"""
        if not value:
            raise usage.UsageError("binary-attribute must not be empty")
        self.opts.setdefault("binary-attributes", []).append(value)

    def postOptions_binary_attributes(self):
        if "binary-attributes" not in self.opts:
            self.opts["binary-attributes"] = None


class Options_pretty:
    optFlags = (("pretty", None, "indent the written document"),)


def _checkChoice(opts, name, allowed):
    value = opts[name]
    if value is not None and value not in allowed:
        raise usage.UsageError(
            "bad {}: {} (one of {})".format(name, value, ", ".join(allowed))
        )


class Options_processing:
    optParameters = (
        ("processing", None, None, "batch processing (sequential or parallel)"),
    )

    def postOptions_processing(self):
        _checkChoice(self.opts, "processing", batch.PROCESSING)


class Options_response_order:
    optParameters = (
        (
            "response-order",
            None,
            None,
            "batch response order (sequential or unordered)",
        ),
    )

    def postOptions_response_order(self):
        _checkChoice(self.opts, "response-order", batch.RESPONSE_ORDERS)


class Options_on_error:
    optParameters = (("on-error", None, None, "batch error policy (resume or exit)"),)

    def postOptions_on_error(self):
        _checkChoice(self.opts, "on-error", batch.ON_ERRORS)
