"""Useful functions and classes for Python command-line tools.
"""

import sys
import logging
import argparse

from pricegen import __version__
from pricegen.config import Config

__all__ = ['GenScript', 'UsageError']


class UsageError(Exception):
    """User induced error."""


class GenScript(object):
    """Command-line script with config and logging setup.

    User class should override work() and optionally startup()
    and init_argparse().
    """

    service_name = None
    cf = None
    cf_defaults = {}

    # setup logger here, this allows override by subclass
    log = logging.getLogger('GenScript')

    def __init__(self, service_name, args):
        """Script setup.

        @param service_name: unique name for script, also main config section.
        @param args: cmdline args (sys.argv[1:]), but can be overridden
        """
        self.service_name = service_name
        self.log_level = logging.INFO

        # parse command line
        parser = self.init_argparse()
        self.options = parser.parse_args(args)
        self.args = self.options.args

        # check args
        if self.options.version:
            print("%s %s" % (self.service_name, __version__))
            sys.exit(0)
        if self.options.quiet:
            self.log_level = logging.WARNING
        if self.options.verbose:
            self.log_level = logging.DEBUG

        # init logging
        logging.basicConfig(level=self.log_level,
                            format="%(asctime)s %(name)s - %(levelname)s: %(message)s",
                            datefmt="%H:%M:%S")

        self.cf_override = {}
        if self.options.set:
            for a in self.options.set:
                if '=' not in a:
                    self.log.error("cannot parse --set arg: %s", a)
                    sys.exit(1)
                k, v = a.split('=', 1)
                self.cf_override[k.strip()] = v.strip()

        # read config file
        self.cf = self.load_config()

    def init_argparse(self):
        """Initialize a ArgumentParser() instance that will be used to
        parse command line arguments.

        @return: initialized ArgumentParser() instance.
        """
        p = argparse.ArgumentParser()

        # generic options
        p.add_argument("-q", "--quiet", action="store_true",
                       help="log only errors and warnings")
        p.add_argument("-v", "--verbose", action="count",
                       help="log verbosely")
        p.add_argument("-V", "--version", action="store_true",
                       help="print version info and exit")
        p.add_argument("--config", help="config file")
        p.add_argument("--set", action="append",
                       help="override config setting (--set 'PARAM=VAL')")
        p.add_argument("args", nargs="*", help="arguments")
        return p

    def load_config(self):
        """Loads config.
        """
        return Config(self.service_name, self.options.config,
                      user_defs=self.cf_defaults, override=self.cf_override)

    def startup(self):
        pass

    def work(self):
        raise NotImplementedError

    def start(self):
        self.run_func_safely(self.startup)
        self.run_func_safely(self.work)

    def run_func_safely(self, func):
        "Run users work function, safely."
        try:
            return func()
        except UsageError as d:
            self.log.error(str(d))
        except MemoryError:
            try:    # complex logging may not succeed
                self.log.exception("Job %s out of memory, exiting", self.service_name)
            except MemoryError:
                self.log.fatal("Out of memory")
        except SystemExit as d:
            raise d
        except KeyboardInterrupt:
            sys.exit(1)
        except Exception:
            self.log.exception('Command failed')
        # done
        sys.exit(1)
