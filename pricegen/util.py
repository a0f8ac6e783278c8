"""Utility functions for pricegen.
"""

import datetime
import errno
import os


__all__ = ['as_unicode', 'as_bytes', 'write_atomic', 'fmt_dur', 'rfc3339', 'utcnow']


def as_unicode(s):
    if not isinstance(s, bytes):
        return s
    return s.decode('utf8')


def as_bytes(s):
    if not isinstance(s, bytes):
        return s.encode('utf8')
    return s


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


def rfc3339(ts):
    """Format timestamp like Go time.RFC3339 in UTC.

    >>> rfc3339(datetime.datetime(2022, 3, 4, 5, 6, 7, 890, tzinfo=datetime.timezone.utc))
    '2022-03-04T05:06:07Z'
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(datetime.timezone.utc)
    return ts.strftime('%Y-%m-%dT%H:%M:%SZ')


# non-win32
def write_atomic(fn, data, bakext=None, perms=0o644):
    """Write file with rename."""

    # write new data to tmp file
    fn2 = fn + '.new'
    try:
        with open(fn2, 'wb') as f:
            f.write(as_bytes(data))
        os.chmod(fn2, perms)
    except OSError:
        try:
            os.unlink(fn2)
        except OSError as e:
            if e.errno != errno.ENOENT:
                raise
        raise

    # link old data to bak file
    if bakext:
        if bakext.find('/') >= 0:
            raise ValueError("invalid bakext")
        fnb = fn + bakext
        try:
            os.unlink(fnb)
        except OSError as e:
            if e.errno != errno.ENOENT:
                raise
        try:
            os.link(fn, fnb)
        except OSError as e:
            if e.errno != errno.ENOENT:
                raise

    # atomically replace file
    os.replace(fn2, fn)


def fmt_dur(dur):
    """Format time duration.

    >>> dlong = ((27 * 24 + 2) * 60 + 38) * 60 + 43
    >>> [fmt_dur(v) for v in (0.001, 1.1, dlong, -5)] == ['0s', '1s', '27d2h38m43s', '-5s']
    True
    """
    res = []
    if dur < 0:
        res.append('-')
        dur = -dur
    tmp, secs = divmod(int(dur), 60)
    tmp, mins = divmod(tmp, 60)
    days, hours = divmod(tmp, 24)
    for (val, unit) in ((days, 'd'), (hours, 'h'), (mins, 'm'), (secs, 's')):
        if val:
            res.append('%d%s' % (val, unit))
    if not res:
        return '0s'
    return ''.join(res)
