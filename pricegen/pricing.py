"""EC2 price sources.

On-demand prices come from Pricing API (AmazonEC2 price list),
spot prices from EC2 spot price history.  Both tables are refreshed
by background threads, callers poll the last-updated timestamps.
"""

import json
import logging
import math
import threading

from pricegen.util import utcnow

__all__ = ['PricingError', 'PricingProvider', 'pager', 'get_offer_price']

# Compute Instance, Compute Instance (bare metal)
COMPUTE_FAMILIES = ("Compute Instance", "Compute Instance (bare metal)")


class PricingError(Exception):
    """Unexpected data in price list."""


def pager(client, method, rname):
    """Create pager function for looping over long results.
    """
    lister = client.get_paginator(method)

    def pager(**kwargs):
        for page in lister.paginate(**kwargs):
            for rec in page.get(rname) or []:
                yield rec
    return pager


def get_offer_price(offer, unit):
    prices = list(offer["priceDimensions"].values())
    if len(prices) != 1:
        raise PricingError("prices: expected one value, got %d" % len(prices))
    if prices[0]["unit"] != unit:
        raise PricingError("prices: expected %s, got %s" % (unit, prices[0]["unit"]))
    return float(prices[0]["pricePerUnit"]["USD"])


def get_on_demand_price(vmdata):
    """Return hourly price for ondemand instances."""
    offers = list(vmdata["terms"]["OnDemand"].values())
    if len(offers) != 1:
        raise PricingError("OnDemand.offers: expected one value, got %d" % len(offers))
    return get_offer_price(offers[0], "Hrs")


class PricingProvider(object):
    """On-demand and spot prices for single region.
    """
    log = logging.getLogger("pricegen.pricing")

    def __init__(self, region, pricing_client, ec2_client, clock=utcnow):
        self.region = region
        self.pricing_client = pricing_client
        self.ec2_client = ec2_client
        self.clock = clock

        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._threads = []

        self._on_demand = {}
        self._spot = {}
        self._on_demand_updated = None
        self._spot_updated = None

    #
    # accessors
    #

    def instance_types(self):
        with self._lock:
            return sorted(set(self._on_demand) | set(self._spot))

    def on_demand_price(self, instance_type):
        with self._lock:
            return self._on_demand.get(instance_type)

    def spot_price(self, instance_type):
        with self._lock:
            return self._spot.get(instance_type)

    def on_demand_last_updated(self):
        with self._lock:
            return self._on_demand_updated

    def spot_last_updated(self):
        with self._lock:
            return self._spot_updated

    def updated_since(self, ts):
        """Both price tables refreshed after ts."""
        od = self.on_demand_last_updated()
        spot = self.spot_last_updated()
        return od is not None and spot is not None and od > ts and spot > ts

    #
    # updaters
    #

    def fetch_on_demand_pricing(self):
        """Return dict of instance type to hourly on-demand price.
        """
        get_products = pager(self.pricing_client, "get_products", "PriceList")
        prices = {}
        for product_family in COMPUTE_FAMILIES:
            filters = {
                "regionCode": self.region,
                "productFamily": product_family,
                "operatingSystem": "Linux",     # NA, Linux, RHEL, SUSE, Windows
                "tenancy": "Shared",            # NA, Dedicated, Host, Reserved, Shared
                "preInstalledSw": "NA",         # NA, SQL Ent, SQL Std, SQL Web
                "capacitystatus": "Used",
            }
            for rec in get_products(
                    FormatVersion="aws_v1",
                    ServiceCode="AmazonEC2",
                    Filters=[{"Type": "TERM_MATCH", "Field": k, "Value": v} for k, v in filters.items()]
                ):
                vmdata = json.loads(rec)
                vmtype = vmdata["product"]["attributes"].get("instanceType")
                if not vmtype:
                    continue
                try:
                    price = get_on_demand_price(vmdata)
                except (PricingError, KeyError, ValueError) as d:
                    self.log.warning("%s: skipping on-demand price: %s", vmtype, d)
                    continue
                if not math.isfinite(price) or price <= 0:
                    continue
                prices[vmtype] = price
        return prices

    def fetch_spot_pricing(self):
        """Return dict of instance type to cheapest current spot price over zones.
        """
        history = pager(self.ec2_client, "describe_spot_price_history", "SpotPriceHistory")
        latest = {}
        for rec in history(StartTime=self.clock(), ProductDescriptions=["Linux/UNIX"]):
            key = (rec["InstanceType"], rec["AvailabilityZone"])
            prev = latest.get(key)
            if prev is None or rec["Timestamp"] > prev["Timestamp"]:
                latest[key] = rec

        prices = {}
        for (vmtype, zone), rec in latest.items():
            try:
                price = float(rec["SpotPrice"])
            except ValueError:
                price = math.nan
            if not math.isfinite(price):
                self.log.warning("%s/%s: bad spot price: %r", vmtype, zone, rec["SpotPrice"])
                continue
            if vmtype not in prices or price < prices[vmtype]:
                prices[vmtype] = price
        return prices

    def update_on_demand_pricing(self):
        prices = self.fetch_on_demand_pricing()
        if not prices:
            raise PricingError("no on-demand prices found for %s" % self.region)
        with self._lock:
            self._on_demand = prices
            self._on_demand_updated = self.clock()
        self.log.info("updated on-demand pricing with %d instance types", len(prices))

    def update_spot_pricing(self):
        prices = self.fetch_spot_pricing()
        if not prices:
            raise PricingError("no spot prices found for %s" % self.region)
        with self._lock:
            self._spot = prices
            self._spot_updated = self.clock()
        self.log.info("updated spot pricing with %d instance types", len(prices))

    def _run_updater(self, func, interval):
        while not self._stop.is_set():
            try:
                func()
            except Exception:
                self.log.exception("%s failed", func.__name__)
            self._stop.wait(interval)

    def start(self, interval=60):
        """Launch background updaters."""
        self._stop.clear()
        for func in (self.update_on_demand_pricing, self.update_spot_pricing):
            t = threading.Thread(target=self._run_updater, args=(func, interval),
                                 name=func.__name__, daemon=True)
            t.start()
            self._threads.append(t)

    def stop(self, timeout=None):
        """Stop background updaters."""
        self._stop.set()
        for t in self._threads:
            t.join(timeout)
        self._threads = []
