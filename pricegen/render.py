"""Render instance-type prices as Go map literal.

Entries are sorted and grouped by instance family, so regenerating
the table only touches lines of families whose prices changed.
"""

import math

__all__ = ['MalformedInstanceType', 'split_instance_type', 'render_price_table']

# soft limit, checked after entry is written
MAX_LINE_LEN = 80


class MalformedInstanceType(ValueError):
    """Instance type name is not in <family>.<size> form."""

    def __init__(self, name, segs):
        super().__init__("parsing instance family %s, got %r" % (name, segs))
        self.name = name
        self.segs = segs


def split_instance_type(name):
    """Return (family, size) for instance type.

    >>> split_instance_type('m5.large')
    ('m5', 'large')
    """
    segs = name.split('.')
    if len(segs) != 2:
        raise MalformedInstanceType(name, segs)
    return segs[0], segs[1]


def lookup_price(get_price, name):
    """Return price or None if lookup misses or price is not finite."""
    try:
        price = get_price(name)
    except LookupError:
        return None
    if price is None or not math.isfinite(price):
        return None
    return price


def _newline(buf):
    # make sure buffer ends with newline
    if buf and not buf[-1].endswith('\n'):
        buf.append('\n')


def render_price_table(instance_types, var_name, get_price):
    """Return Go source for map from instance type to price.

    get_price(name) returns float, missing prices are signalled
    with None or LookupError and those instance types are skipped,
    as are NaN and infinite prices.

    Raises MalformedInstanceType before anything is returned.
    """
    buf = ['var %s = map[string]float64{\n' % var_name]
    line_len = 0
    previous_family = None
    for name in sorted(instance_types):
        family, _ = split_instance_type(name)
        price = lookup_price(get_price, name)
        if price is None:
            continue

        if family != previous_family:
            previous_family = family
            _newline(buf)
            buf.append('// %s family\n' % family)
            line_len = 0

        entry = '"%s":%f, ' % (name, price)
        buf.append(entry)
        line_len += len(entry)
        if line_len > MAX_LINE_LEN:
            line_len = 0
            buf.append('\n')
    buf.append('\n}\n')
    buf.append('\n')
    return ''.join(buf)
