import pytest

from klinechart.main import main
from klinechart.utils.logger import close_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv('PORT', raising=False)
    monkeypatch.delenv('LOG_LEVEL', raising=False)
    yield
    close_logging()


def test_snapshot_with_mock_prices(tmp_path, capsys):
    """Test rendering a PNG snapshot of generated prices."""
    output = tmp_path / 'chart.png'

    code = main(['snapshot', str(output), '--mock', '--limit', '30', '--width', '400', '--height', '300'])

    assert code == 0
    with open(output, 'rb') as f:
        assert f.read(8) == b'\x89PNG\r\n\x1a\n'
    assert 'Wrote 30 BTCUSDT 1d prices' in capsys.readouterr().out


def test_snapshot_unsupported_interval(tmp_path):
    """Test a fetch error gives exit code 1 and no file."""
    output = tmp_path / 'chart.png'

    assert main(['snapshot', str(output), '--mock', '--interval', '2w']) == 1
    assert not output.exists()


def test_config_error_exit_code(tmp_path, capsys):
    """Test a bad config file gives exit code 2."""
    code = main(['--config', str(tmp_path / 'missing.yaml'), 'snapshot', str(tmp_path / 'x.png')])

    assert code == 2
    assert 'Configuration error' in capsys.readouterr().err


def test_serve_uses_config(tmp_path, monkeypatch):
    """Test the serve command starts uvicorn with the resolved address."""
    calls = []
    monkeypatch.setattr('uvicorn.run', lambda app, **kwargs: calls.append((app, kwargs)))
    config = tmp_path / 'config.yaml'
    config.write_text('host: 127.0.0.1\nport: 8080\nstatic_dir: null\n')

    assert main(['--config', str(config), 'serve', '--port', '5000']) == 0

    app, kwargs = calls[0]
    assert kwargs == {'host': '127.0.0.1', 'port': 5000, 'log_level': 'info'}
    assert app.state.config.port == 8080


def test_command_required():
    """Test a subcommand must be given."""
    with pytest.raises(SystemExit):
        main([])


def test_snapshot_from_query(tmp_path, capsys):
    """Test a chart query seeds the snapshot, explicit options winning."""
    output = tmp_path / 'chart.png'

    code = main([
        'snapshot', str(output), '--mock', '--limit', '30',
        '--query', 'symbol=ETHUSDT&interval=1h&limit=24&thresholdMax=500',
    ])

    assert code == 0
    out = capsys.readouterr().out
    assert 'Wrote 30 ETHUSDT 1h prices' in out
    assert 'Query: ?symbol=ETHUSDT&interval=1h&limit=30&threshold=0' in out
    assert 'thresholdMax=500' in out
