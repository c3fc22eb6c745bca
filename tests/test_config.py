"""Tests for huescope.core.config — settings resolution and .env walk-up logic."""

from pathlib import Path

import pytest
from huescope.core.config import ConfigError, Settings, _find_dotenv, _parse_dotenv, load_settings


class TestParseDotenv:
    def test_simple_key_value(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('HUESCOPE_BINS=72\n')
        assert _parse_dotenv(f) == {'HUESCOPE_BINS': '72'}

    def test_quoted_values(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('KEY="1.5"\nKEY2=\'single\'\n')
        assert _parse_dotenv(f) == {'KEY': '1.5', 'KEY2': 'single'}

    def test_comments_and_blank_lines_ignored(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('# comment\n\nFOO=bar\n\n')
        assert _parse_dotenv(f) == {'FOO': 'bar'}

    def test_no_value(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('NOEQUALS\nFOO=bar\n')
        assert _parse_dotenv(f) == {'FOO': 'bar'}

    def test_export_prefix(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('export HUESCOPE_SIGMA=2\n')
        assert _parse_dotenv(f) == {'HUESCOPE_SIGMA': '2'}


class TestFindDotenv:
    def test_finds_in_cwd(self, tmp_path: Path) -> None:
        dotenv = tmp_path / '.env'
        dotenv.write_text('X=1\n')
        assert _find_dotenv(tmp_path) == dotenv

    def test_finds_in_parent(self, tmp_path: Path) -> None:
        subdir = tmp_path / 'sub'
        subdir.mkdir()
        dotenv = tmp_path / '.env'
        dotenv.write_text('X=1\n')
        assert _find_dotenv(subdir) == dotenv

    def test_stops_at_git_dir(self, tmp_path: Path) -> None:
        # .env is above .git — should not be found
        repo = tmp_path / 'repo'
        repo.mkdir()
        (tmp_path / '.env').write_text('X=1\n')
        (repo / '.git').mkdir()
        subdir = repo / 'src'
        subdir.mkdir()
        assert _find_dotenv(subdir) is None

    def test_stops_at_git_file(self, tmp_path: Path) -> None:
        # .git as a file (worktree)
        repo = tmp_path / 'repo'
        repo.mkdir()
        (tmp_path / '.env').write_text('X=1\n')
        (repo / '.git').write_text('gitdir: ../somewhere\n')
        subdir = repo / 'src'
        subdir.mkdir()
        assert _find_dotenv(subdir) is None


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings()
        assert (s.bins, s.sigma, s.max_peaks, s.max_size, s.delta_e) == (360, 3.0, 5, 256, 10.0)

    def test_override_skips_none(self) -> None:
        s = Settings().override(bins=72, sigma=None)
        assert s.bins == 72
        assert s.sigma == 3.0

    @pytest.mark.parametrize(
        'field, value',
        [('bins', 0), ('sigma', -1.0), ('max_peaks', 0), ('max_size', 0), ('delta_e', -0.5)],
    )
    def test_out_of_range_rejected(self, field: str, value: float) -> None:
        with pytest.raises(ConfigError):
            Settings(**{field: value})

    def test_override_validates(self) -> None:
        with pytest.raises(ConfigError):
            Settings().override(max_peaks=0)


class TestLoadSettings:
    @pytest.fixture(autouse=True)
    def _isolated(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # Fake repo root so the walk-up never leaves tmp_path
        (tmp_path / '.git').mkdir()
        monkeypatch.chdir(tmp_path)

    def test_defaults_without_env(self) -> None:
        settings, path = load_settings(environ={})
        assert settings == Settings()
        assert path is None

    def test_reads_environment(self) -> None:
        settings, _path = load_settings(environ={'HUESCOPE_BINS': '72', 'HUESCOPE_SIGMA': '1.5'})
        assert settings.bins == 72
        assert settings.sigma == 1.5

    def test_reads_dotenv(self, tmp_path: Path) -> None:
        dotenv = tmp_path / '.env'
        dotenv.write_text('HUESCOPE_MAX_PEAKS=3\nHUESCOPE_DELTA_E=4\n')
        settings, path = load_settings(environ={})
        assert settings.max_peaks == 3
        assert settings.delta_e == 4.0
        assert path == dotenv

    def test_environment_beats_dotenv(self, tmp_path: Path) -> None:
        (tmp_path / '.env').write_text('HUESCOPE_MAX_PEAKS=3\n')
        settings, _path = load_settings(environ={'HUESCOPE_MAX_PEAKS': '7'})
        assert settings.max_peaks == 7

    def test_explicit_env_file(self, tmp_path: Path) -> None:
        custom = tmp_path / 'custom.env'
        custom.write_text('HUESCOPE_MAX_SIZE=64\n')
        settings, path = load_settings(env_file=str(custom), environ={})
        assert settings.max_size == 64
        assert path == custom

    def test_missing_explicit_env_file(self, tmp_path: Path) -> None:
        settings, path = load_settings(env_file=str(tmp_path / 'nope.env'), environ={})
        assert settings == Settings()
        assert path is None

    def test_empty_value_ignored(self) -> None:
        settings, _path = load_settings(environ={'HUESCOPE_BINS': ''})
        assert settings.bins == 360

    def test_unparseable_value(self) -> None:
        with pytest.raises(ConfigError, match='HUESCOPE_BINS'):
            load_settings(environ={'HUESCOPE_BINS': 'lots'})

    def test_reads_os_environ_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('HUESCOPE_SIGMA', '0')
        settings, _path = load_settings()
        assert settings.sigma == 0.0
