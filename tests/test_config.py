import pytest

from w2_release import Config, create_default_config
from w2_release.cli import main


def test_defaults_without_file():
    config = Config()
    assert config.gravity == 9.81
    assert config.nonzero == 1.0e-20
    assert config.no_data_temperature == -99.0
    assert config.solver_tolerance == 1.0e-8
    assert config.solver_max_iterations == 100
    assert config.solver_eps == 3.0e-10
    assert config.surface_clearance == 1.0
    assert config.density_passes == 2
    assert config.flow_match_tolerance == 1.0e-7


def test_default_file_round_trip(tmp_path):
    path = tmp_path / 'release.ini'
    create_default_config(str(path))
    config = Config(str(path))
    assert config.gravity == 9.81
    assert config.solver_max_iterations == 100
    assert config.critical_flow_margin == 1.0e-5


def test_overrides_and_bad_values(tmp_path):
    path = tmp_path / 'custom.ini'
    path.write_text("[WETWELL]\nsurface_clearance = 0.5  # metres\ndensity_passes = two\n")
    config = Config(str(path))
    assert config.surface_clearance == 0.5
    assert config.density_passes == 2


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path / 'nope.ini'))


def test_cli_creates_and_shows_config(tmp_path, capsys):
    path = tmp_path / 'cli.ini'
    assert main(['--create-config', str(path)]) == 0
    assert path.exists()
    assert main([str(path)]) == 0
    out = capsys.readouterr().out
    assert '[WETWELL]' in out
    assert 'density_passes = 2' in out


def test_cli_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / 'absent.ini')]) == 1
    assert 'not found' in capsys.readouterr().out
