import io
import subprocess

import pytest

from packetrate.exceptions import ConfigurationError, FilterError, ParseError
from packetrate.parser import tshark_parser
from packetrate.parser.tshark_parser import TsharkParser


class FakePopen:
    """Stands in for subprocess.Popen, replaying canned tshark output"""

    def __init__(self, output, returncode=0, stderr_text=''):
        self.output = output
        self.returncode_value = returncode
        self.stderr_text = stderr_text
        self.cmd = None

    def __call__(self, cmd, stdout=None, stderr=None, text=None):
        self.cmd = cmd
        self.stdout = io.StringIO(self.output)
        self._stderr = stderr
        self.returncode = None
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def wait(self):
        if self.stderr_text:
            self._stderr.write(self.stderr_text)
        self.returncode = self.returncode_value
        return self.returncode


@pytest.fixture
def tshark_runs(monkeypatch):
    """Records subprocess.run calls; returncode per call from the queue"""
    calls = []
    returncodes = []

    def fake_run(cmd, stdout=None, stderr=None, check=False, text=False):
        calls.append(cmd)
        code = returncodes.pop(0) if returncodes else 0
        if check and code:
            raise subprocess.CalledProcessError(code, cmd)
        return subprocess.CompletedProcess(cmd, code, stdout='', stderr='tshark: syntax error')

    monkeypatch.setattr(tshark_parser.subprocess, 'run', fake_run)
    return calls, returncodes


@pytest.fixture
def pcap_path(tmp_path):
    path = tmp_path / 'capture.pcap'
    path.write_bytes(b'')
    return str(path)


def test_missing_tshark_is_configuration_error(monkeypatch):
    def not_found(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(tshark_parser.subprocess, 'run', not_found)

    with pytest.raises(ConfigurationError, match='tshark not found'):
        TsharkParser(tshark_path='/nonexistent/tshark')


def test_invalid_filter_raises_filter_error(tshark_runs, pcap_path):
    calls, returncodes = tshark_runs
    parser = TsharkParser()
    returncodes.append(2)

    with pytest.raises(FilterError, match='syntax error'):
        parser.validate_filter(pcap_path, 'ip.src ==')

    assert calls[-1][:5] == ['tshark', '-r', pcap_path, '-Y', 'ip.src ==']


def test_filter_error_is_a_configuration_error():
    assert issubclass(FilterError, ConfigurationError)


def test_valid_filter_passes(tshark_runs, pcap_path):
    TsharkParser().validate_filter(pcap_path, 'tcp')


def test_command_carries_fields_and_filter(tshark_runs):
    cmd = TsharkParser()._build_tshark_command('in.pcap', 'udp.port == 53')

    assert cmd[:5] == ['tshark', '-r', 'in.pcap', '-T', 'fields']
    for field in TsharkParser.FIELDS:
        assert field in cmd
    assert cmd[-2:] == ['-Y', 'udp.port == 53']


def test_command_reads_captured_length(tshark_runs):
    # Frame sizes must match the dpkt path on snaplen-truncated captures
    cmd = TsharkParser()._build_tshark_command('in.pcap')

    assert cmd[cmd.index('frame.time_epoch') + 2] == 'frame.cap_len'
    assert 'frame.len' not in cmd


def test_command_without_filter(tshark_runs):
    assert '-Y' not in TsharkParser()._build_tshark_command('in.pcap')


def test_parse_row(tshark_runs):
    parser = TsharkParser()

    # frame.cap_len of a frame cut to a 96 byte snaplen
    record = parser._parse_row(['1600000000.250000000', '96', '10.0.0.1', '10.0.0.2'])

    assert record.timestamp == pytest.approx(1600000000.25)
    assert record.frame_len == 96
    assert (record.src_ip, record.dst_ip) == ('10.0.0.1', '10.0.0.2')


def test_row_without_ip_fields_has_no_hosts(tshark_runs):
    record = TsharkParser()._parse_row(['12.5', '42', '', ''])

    assert record.timestamp == 12.5
    assert not record.has_hosts


@pytest.mark.parametrize('row', [
    ['', '60', '10.0.0.1', '10.0.0.2'],
    ['not-a-time', '60', '10.0.0.1', '10.0.0.2'],
    ['1.0', '60'],
])
def test_unusable_rows_are_skipped(tshark_runs, row):
    assert TsharkParser()._parse_row(row) is None


def test_parse_file_streams_records(tshark_runs, pcap_path, monkeypatch):
    output = (
        '"1000.000000000","60","10.0.0.1","10.0.0.2"\n'
        '"1000.500000000","42","",""\n'
        '"1001.000000000","60","10.0.0.2","10.0.0.1"\n'
    )
    popen = FakePopen(output)
    monkeypatch.setattr(tshark_parser.subprocess, 'Popen', popen)

    records = list(TsharkParser().parse_file(pcap_path, 'frame.len > 0'))

    assert [r.timestamp for r in records] == [1000.0, 1000.5, 1001.0]
    assert [r.has_hosts for r in records] == [True, False, True]
    assert popen.cmd[-2:] == ['-Y', 'frame.len > 0']


def test_parse_file_tshark_failure(tshark_runs, pcap_path, monkeypatch):
    popen = FakePopen('', returncode=2, stderr_text='tshark: file is corrupt')
    monkeypatch.setattr(tshark_parser.subprocess, 'Popen', popen)

    with pytest.raises(ParseError, match='file is corrupt'):
        list(TsharkParser().parse_file(pcap_path))


def test_parse_file_missing_capture(tshark_runs, tmp_path):
    with pytest.raises(FileNotFoundError):
        list(TsharkParser().parse_file(str(tmp_path / 'missing.pcap')))
