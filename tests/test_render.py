
import pytest

from pricegen.render import MalformedInstanceType, render_price_table, split_instance_type

PRICES = {
    "c5.large": 0.085,
    "c5.xlarge": 0.17,
    "m5.large": 0.096,
}


def test_example_table():
    src = render_price_table(PRICES, "initialOnDemandPrices", PRICES.get)
    assert src == (
        'var initialOnDemandPrices = map[string]float64{\n'
        '// c5 family\n'
        '"c5.large":0.085000, "c5.xlarge":0.170000, \n'
        '// m5 family\n'
        '"m5.large":0.096000, \n'
        '}\n'
        '\n'
    )


def test_deterministic():
    names = ["m5.large", "c5.xlarge", "c5.large"]
    first = render_price_table(names, "x", PRICES.get)
    assert render_price_table(list(reversed(names)), "x", PRICES.get) == first
    assert render_price_table(set(names), "x", PRICES.get) == first


def test_sorted_entries():
    prices = {"z1d.large": 1.0, "a1.large": 2.0, "a1.2xlarge": 3.0, "m5.large": 4.0}
    src = render_price_table(prices, "x", prices.get)
    names = [ln.split('"')[1] for ln in src.split(', ') if '"' in ln]
    assert names == sorted(prices)


def test_missing_price_skipped():
    src = render_price_table(["c5.large", "x.y", "m5.large"], "x", PRICES.get)
    assert '"x.y"' not in src
    assert "// x family" not in src


def test_lookup_error_skipped():
    def get_price(name):
        return PRICES[name]

    src = render_price_table(["c5.large", "x.y"], "x", get_price)
    assert '"c5.large":0.085000' in src
    assert "x.y" not in src


@pytest.mark.parametrize("name", ["m5", "m5.large.x", "", "a..b"])
def test_malformed_name(name):
    with pytest.raises(MalformedInstanceType) as exc:
        render_price_table(["c5.large", name], "x", PRICES.get)
    assert exc.value.name == name


def test_malformed_checked_before_lookup():
    with pytest.raises(MalformedInstanceType):
        render_price_table(["bad"], "x", lambda name: None)


def test_split_instance_type():
    assert split_instance_type("u-6tb1.metal") == ("u-6tb1", "metal")
    with pytest.raises(ValueError):
        split_instance_type("nodot")


def test_family_grouping():
    prices = {"a.small": 1.0, "a.large": 2.0, "b.small": 3.0, "b.large": 4.0}
    src = render_price_table(prices, "x", prices.get)
    lines = src.splitlines()
    comments = [ln for ln in lines if ln.startswith("//")]
    assert comments == ["// a family", "// b family"]
    assert lines[lines.index("// a family") + 1].startswith('"a.large"')
    assert lines[lines.index("// b family") + 1].startswith('"b.large"')


def test_family_break_on_short_line():
    prices = {"a.small": 1.0, "b.small": 2.0}
    src = render_price_table(prices, "x", prices.get)
    assert '"a.small":1.000000, \n// b family\n"b.small":2.000000, ' in src


def test_line_wrap():
    prices = {"m5.%dxlarge" % i: i * 0.5 for i in range(1, 40)}
    src = render_price_table(prices, "x", prices.get)
    entry_width = max(len('"%s":%f, ' % kv) for kv in prices.items())
    lines = src.splitlines()
    assert len(lines) > 5
    for ln in lines:
        assert len(ln) <= 80 + entry_width
    # every full line went over the soft limit
    body = [ln for ln in lines if ln.startswith('"')]
    for ln in body[:-1]:
        assert len(ln) > 80


def test_fixed_point_prices():
    prices = {"t3.nano": 0.0000052, "p4d.24xlarge": 32.77}
    src = render_price_table(prices, "x", prices.get)
    assert '"t3.nano":0.000005, ' in src
    assert '"p4d.24xlarge":32.770000, ' in src
    assert "e-" not in src


def test_empty_table():
    assert render_price_table([], "prices", PRICES.get) == "var prices = map[string]float64{\n\n}\n\n"


def test_empty_family_gets_comment():
    prices = {".large": 1.0, "a.small": 2.0}
    src = render_price_table(prices, "x", prices.get)
    assert src.startswith('var x = map[string]float64{\n//  family\n".large":1.000000, \n// a family\n')


def test_non_finite_price_skipped():
    prices = {"a.nan": float("nan"), "a.inf": float("inf"), "a.ok": 1.5}
    src = render_price_table(prices, "x", prices.get)
    assert "nan" not in src
    assert "inf" not in src
    assert '"a.ok":1.500000, ' in src
