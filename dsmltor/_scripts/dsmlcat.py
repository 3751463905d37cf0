import sys

from twisted.python import log

from dsmltor import config, usage
from dsmltor.protocols.dsml import batch, dsmlerrors, reader


def summary(batches, outputFile):
    for filename, b in batches:
        outputFile.write(b"%s: %d requests\n" % (filename.encode("utf-8"), len(b)))
        for request in b:
            outputFile.write(("  %r\n" % (request,)).encode("utf-8"))


def output(batches, cfg, outputFile):
    """Write the requests of all batches as one batchRequest document."""
    first = batches[0][1]
    merged = first.copy()
    merged.requests = [r for filename, b in batches for r in b]
    root = batch.encode(merged, cfg)
    outputFile.write(batch.toBytes(root, pretty_print=cfg.getPrettyPrint()))


def main(filenames, opts, outputFile):
    batches = []
    for filename in filenames:
        log.msg("Reading %s" % filename, debug=True)
        batches.append((filename, reader.parseFile(filename)))

    if opts["summary"]:
        summary(batches, outputFile)
        return

    cfg = config.DSMLConfig(
        binaryAttributes=opts["binary-attributes"],
        prettyPrint=opts["pretty"] or None,
        processing=opts["processing"],
        responseOrder=opts["response-order"],
        onError=opts["on-error"],
    )
    output(batches, cfg, outputFile)


class MyOptions(
    usage.Options,
    usage.Options_binary_attributes,
    usage.Options_pretty,
    usage.Options_processing,
    usage.Options_response_order,
    usage.Options_on_error,
):
    """Read DSMLv2 batchRequest files and write them back as one document"""

    optFlags = (
        ("summary", "s", "print one line per request instead of XML"),
        ("verbose", "v", "log to stderr"),
    )

    def parseArgs(self, *files):
        if not files:
            raise usage.UsageError("need at least one file")
        self.opts["files"] = files


def console_script():
    try:
        opts = MyOptions()
        opts.parseOptions()
    except usage.UsageError as ue:
        sys.stderr.write("{}: {}\n".format(sys.argv[0], ue))
        sys.exit(1)

    if opts["verbose"]:
        log.startLogging(sys.stderr)

    try:
        main(opts["files"], opts, sys.stdout.buffer)
    except (dsmlerrors.DSMLException, config.InvalidConfigValueError, OSError) as e:
        sys.stderr.write("{}: {}\n".format(sys.argv[0], e))
        sys.exit(1)


if __name__ == "__main__":
    sys.exit(console_script())
