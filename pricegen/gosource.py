"""Go source file around the price table.
"""

import logging
import shlex
import subprocess

from pricegen.render import render_price_table
from pricegen.util import as_unicode, rfc3339

__all__ = ['FormatError', 'render_source', 'format_source']

log = logging.getLogger(__name__)


class FormatError(Exception):
    """Source formatter rejected generated code."""


def render_source(instance_types, get_price, region, generated_at,
                  package="aws", var_name="initialOnDemandPrices",
                  timestamp_var="initialPriceUpdate"):
    """Return unformatted Go source with header and price table.
    """
    now = rfc3339(generated_at)
    hdr = [
        "//go:build !ignore_autogenerated\n",
        "package %s\n" % package,
        'import "time"\n',
        "// generated at %s for %s\n\n\n" % (now, region),
        'var %s, _ = time.Parse(time.RFC3339, "%s")\n' % (timestamp_var, now),
    ]
    table = render_price_table(instance_types, var_name, get_price)
    return "".join(hdr) + table


def format_source(src, cmd="gofmt"):
    """Pipe source through formatter, return formatted bytes.
    """
    args = shlex.split(cmd)
    if not args:
        raise FormatError("formatter command is empty")
    log.debug("formatting with %r", args)
    try:
        res = subprocess.run(args, input=src.encode("utf8"),
                             stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except OSError as d:
        raise FormatError("cannot run %s: %s" % (args[0], d))
    if res.returncode != 0:
        raise FormatError("formatting generated source, %s" % as_unicode(res.stderr).strip())
    return res.stdout
