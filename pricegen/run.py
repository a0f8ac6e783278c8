#! /usr/bin/env python3

"""pricegen [options] OUTPUT

    Generate Go source with initial EC2 on-demand prices,
    for example pkg/cloudprovider/aws/zz_generated.pricing.go
"""

import logging
import sys
import tracemalloc

import boto3.session
import botocore.config

from pricegen.gosource import format_source, render_source
from pricegen.pricing import PricingProvider
from pricegen.scripting import GenScript, UsageError
from pricegen.util import fmt_dur, utcnow, write_atomic
from pricegen.wait import wait_for

__all__ = ['PriceGen', 'main']


class PriceGen(GenScript):
    __doc__ = __doc__

    log = logging.getLogger("pricegen")

    cf_defaults = {
        "region": "us-east-1",
        "aws_profile_name": "",
        "aws_access_key": "",
        "aws_secret_key": "",
        "package_name": "aws",
        "var_name": "initialOnDemandPrices",
        "timestamp_var": "initialPriceUpdate",
        "gofmt_cmd": "gofmt",
        "poll_interval": "1",
        "wait_timeout": "0",
        "refresh_interval": "60",
        "heap_profile": "",
    }

    _boto_sessions = None
    _boto_clients = None

    def startup(self):
        super().startup()
        logging.getLogger("boto3").setLevel(logging.WARNING)
        logging.getLogger("botocore").setLevel(logging.WARNING)
        if self.cf.getfile("heap_profile"):
            tracemalloc.start()

    def get_boto3_session(self, region):
        if self._boto_sessions is None:
            self._boto_sessions = {}
        if self._boto_sessions.get(region) is None:
            profile_name = self.cf.get("aws_profile_name", "") or None
            key = self.cf.get("aws_access_key", "") or None
            sec = self.cf.get("aws_secret_key", "") or None
            self._boto_sessions[region] = boto3.session.Session(
                profile_name=profile_name, region_name=region,
                aws_access_key_id=key, aws_secret_access_key=sec)
        return self._boto_sessions[region]

    def get_boto3_client(self, svc, region):
        if svc == "pricing":
            region = "us-east-1"    # provided only in "us-east-1" and "ap-south-1"
        if self._boto_clients is None:
            self._boto_clients = {}

        scode = (region, svc)
        if scode not in self._boto_clients:
            session = self.get_boto3_session(region)
            conf = botocore.config.Config(retries={"mode": "adaptive", "max_attempts": 10})
            self._boto_clients[scode] = session.client(svc, config=conf)
        return self._boto_clients[scode]

    def make_provider(self, region):
        return PricingProvider(region,
                               self.get_boto3_client("pricing", region),
                               self.get_boto3_client("ec2", region))

    def work(self):
        if len(self.args) != 1:
            raise UsageError("Usage: pricegen [options] pkg/cloudprovider/aws/zz_generated.pricing.go")
        output = self.args[0]
        region = self.cf.get("region")

        update_started = utcnow()
        provider = self.make_provider(region)
        provider.start(self.cf.getfloat("refresh_interval"))
        try:
            waited = wait_for(lambda: provider.updated_since(update_started),
                              interval=self.cf.getfloat("poll_interval"),
                              timeout=self.cf.getfloat("wait_timeout"),
                              msg="waiting on pricing update...")
        finally:
            provider.stop(0)
        self.log.info("pricing updated after %s", fmt_dur(waited))

        src = render_source(provider.instance_types(), provider.on_demand_price, region, utcnow(),
                            package=self.cf.get("package_name"),
                            var_name=self.cf.get("var_name"),
                            timestamp_var=self.cf.get("timestamp_var"))
        formatted = format_source(src, self.cf.get("gofmt_cmd"))
        write_atomic(output, formatted)
        self.log.info("wrote %s", output)

        self.write_heap_profile()

    def write_heap_profile(self):
        fn = self.cf.getfile("heap_profile")
        if not fn or not tracemalloc.is_tracing():
            return
        tracemalloc.take_snapshot().dump(fn)
        tracemalloc.stop()
        self.log.debug("heap profile written to %s", fn)


def main(args=None):
    if args is None:
        args = sys.argv[1:]
    script = PriceGen("pricegen", args)
    script.start()
    sys.stdout.flush()
    sys.stderr.flush()


if __name__ == '__main__':
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(1)
