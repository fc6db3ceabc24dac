import pytest

from common.utils import (
    format_duration, format_timestamp, parse_duration, validate_file_path, validate_output_path
)


@pytest.mark.parametrize('value,expected', [
    (5, 5.0),
    (0.25, 0.25),
    ('5', 5.0),
    ('5s', 5.0),
    ('250ms', 0.25),
    ('1m30s', 90.0),
    ('1.5h', 5400.0),
    ('100us', 1e-4),
    ('0s', 0.0),
    ('-2s', -2.0),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == pytest.approx(expected)


@pytest.mark.parametrize('value', ['', 'abc', '5x', 's', '5s garbage', '1d'])
def test_parse_duration_invalid(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_format_duration():
    assert format_duration(4.5) == '4.50s'
    assert format_duration(90) == '1m 30.0s'
    assert format_duration(3725) == '1h 2m 5s'


def test_format_timestamp():
    assert format_timestamp(0.5) == '1970-01-01T00:00:00.500000+00:00 (0.500000000)'


def test_validate_file_path(tmp_path):
    path = tmp_path / 'capture.pcap'
    assert not validate_file_path(str(path))

    path.write_bytes(b'')
    assert validate_file_path(str(path))
    assert not validate_file_path(str(tmp_path))


def test_validate_output_path(tmp_path):
    assert validate_output_path('-')
    assert validate_output_path(str(tmp_path / 'report.csv'))
    assert not validate_output_path(str(tmp_path / 'no' / 'such' / 'dir' / 'report.csv'))

    existing = tmp_path / 'existing.csv'
    existing.write_text('keep me')
    assert not validate_output_path(str(existing))
