"""Nicer config class."""

import os.path

from configparser import (
    NoOptionError, NoSectionError, Error as ConfigError, ConfigParser,
)


__all__ = ['Config', 'NoOptionError', 'ConfigError']

_UNSET = object()


class Config(object):
    """Bit improved ConfigParser.

    Additional features:
     - Remembers section.
     - Accepts defaults in get() functions.
     - Command-line overrides.
    """
    def __init__(self, main_section, filename, user_defs=None, override=None):
        """Initialize Config and read from file.
        """
        self.defs = dict(user_defs or {})
        if filename:
            self.defs['config_file'] = filename

        self.main_section = main_section
        self.filename = filename
        self.override = override or {}
        self.cf = ConfigParser(interpolation=None)

        if filename is None:
            self.cf.add_section(main_section)
        elif not os.path.isfile(filename):
            raise ConfigError('Config file not found: ' + filename)

        self.reload()

    def reload(self):
        """Re-reads config file."""
        if self.filename:
            self.cf.read(self.filename)
        if not self.cf.has_section(self.main_section):
            raise NoSectionError(self.main_section)

        # apply default if key not set
        for k, v in self.defs.items():
            if not self.cf.has_option(self.main_section, k):
                self.cf.set(self.main_section, k, str(v))

        # apply overrides
        for k, v in self.override.items():
            self.cf.set(self.main_section, k, v)

    def get(self, key, default=_UNSET):
        """Reads string value, if not set then default."""

        if not self.cf.has_option(self.main_section, key):
            if default is _UNSET:
                raise NoOptionError(key, self.main_section)
            return default

        return str(self.cf.get(self.main_section, key))

    def getint(self, key, default=_UNSET):
        """Reads int value, if not set then default."""

        if not self.cf.has_option(self.main_section, key):
            if default is _UNSET:
                raise NoOptionError(key, self.main_section)
            return default

        return self.cf.getint(self.main_section, key)

    def getfloat(self, key, default=_UNSET):
        """Reads float value, if not set then default."""

        if not self.cf.has_option(self.main_section, key):
            if default is _UNSET:
                raise NoOptionError(key, self.main_section)
            return default

        return self.cf.getfloat(self.main_section, key)

    def getfile(self, key, default=_UNSET):
        """Reads filename from config.

        In addition to reading string value, expands ~ to user directory.
        """
        fn = self.get(key, default)
        if fn == "" or fn == "-":
            return fn
        return os.path.expanduser(fn)
