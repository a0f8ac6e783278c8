
import pytest

from pricegen.config import Config, ConfigError, NoOptionError


_sample_cf = '''
[pricegen]
region = eu-west-1
poll_interval = 2.5
wait_timeout = 600
gofmt_cmd = gofmt -s
heap_profile = ~/pricing.heapprofile
'''


def load(tmp_path, data=_sample_cf, **kwargs):
    fn = tmp_path / "pricegen.ini"
    fn.write_text(data)
    return Config("pricegen", str(fn), **kwargs)


def test_config(tmp_path):
    cf = load(tmp_path)
    assert cf.get('region') == 'eu-west-1'
    assert cf.getfloat('poll_interval') == 2.5
    assert cf.getint('wait_timeout') == 600
    assert cf.get('gofmt_cmd') == 'gofmt -s'
    assert not cf.getfile('heap_profile').startswith('~')
    assert cf.get('missing', 'x') == 'x'
    with pytest.raises(NoOptionError):
        cf.get('missing')


def test_defaults_and_override(tmp_path):
    cf = load(tmp_path, user_defs={'region': 'us-east-1', 'var_name': 'prices'},
              override={'wait_timeout': '5'})
    assert cf.get('region') == 'eu-west-1'
    assert cf.get('var_name') == 'prices'
    assert cf.getint('wait_timeout') == 5


def test_no_file():
    cf = Config("pricegen", None, user_defs={'poll_interval': 1}, override={'x': '%s'})
    assert cf.getfloat('poll_interval') == 1.0
    assert cf.get('x') == '%s'
    assert cf.getfile('heap_profile', '') == ''


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        Config("pricegen", str(tmp_path / "nope.ini"))
