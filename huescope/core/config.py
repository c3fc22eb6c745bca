"""Analysis settings from the environment and .env files.

Resolution order (first wins):
  1. Command-line flags (applied by the caller via Settings.override).
  2. OS environment variables HUESCOPE_BINS, HUESCOPE_SIGMA,
     HUESCOPE_MAX_PEAKS, HUESCOPE_MAX_SIZE, HUESCOPE_DELTA_E.
  3. .env file at --env-file path (if explicitly provided), otherwise the
     first .env found walking up from cwd, stopping at .git (file or dir).
  4. Built-in defaults.

Walking stops at .git so we never load a .env from outside the repo.
os.environ is read, never written.
"""

import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

from huescope.core.histogram import DEFAULT_BINS, DEFAULT_SIGMA
from huescope.core.image import DEFAULT_MAX_SIZE
from huescope.core.peaks import DEFAULT_MAX_PEAKS, DELTA_E_THRESHOLD

ENV_PREFIX = 'HUESCOPE_'


class ConfigError(ValueError):
    """A setting could not be parsed or is out of range."""


@dataclass(frozen=True)
class Settings:
    bins: int = DEFAULT_BINS
    sigma: float = DEFAULT_SIGMA
    max_peaks: int = DEFAULT_MAX_PEAKS
    max_size: int = DEFAULT_MAX_SIZE
    delta_e: float = DELTA_E_THRESHOLD

    def __post_init__(self) -> None:
        if self.bins < 1:
            raise ConfigError(f'bins must be >= 1, got {self.bins}')
        if self.sigma < 0:
            raise ConfigError(f'sigma must be >= 0, got {self.sigma}')
        if self.max_peaks < 1:
            raise ConfigError(f'max_peaks must be >= 1, got {self.max_peaks}')
        if self.max_size < 1:
            raise ConfigError(f'max_size must be >= 1, got {self.max_size}')
        if self.delta_e < 0:
            raise ConfigError(f'delta_e must be >= 0, got {self.delta_e}')

    def override(self, **values: Any) -> 'Settings':
        """Return a copy with every non-None value applied."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _find_dotenv(start: Path) -> Path | None:
    """Walk up from start, return first .env found, stop at .git boundary."""
    current = start.resolve()
    while True:
        candidate = current / '.env'
        if candidate.is_file():
            return candidate
        if (current / '.git').exists():
            return None
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a .env file into a dict. Handles KEY=value and KEY="value"."""
    result: dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, _, raw_value = line.partition('=')
        key = key.strip()
        if key.startswith('export '):
            key = key[len('export ') :].strip()
        value = raw_value.strip().strip('"').strip("'")
        if key:
            result[key] = value
    return result


def _coerce(name: str, raw: str, kind: type) -> Any:
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f'{ENV_PREFIX}{name.upper()}={raw!r} is not a valid {kind.__name__}') from None


def load_settings(env_file: str | None = None, environ: dict[str, str] | None = None) -> tuple[Settings, Path | None]:
    """Build Settings from environment variables and an optional .env file.

    Returns (settings, path of the .env file used or None).

    Raises:
        ConfigError: If a value cannot be parsed or is out of range.
    """
    environ = os.environ if environ is None else environ

    path: Path | None
    if env_file:
        path = Path(env_file)
        if not path.is_file():
            path = None
    else:
        path = _find_dotenv(Path.cwd())

    dotenv = _parse_dotenv(path) if path else {}

    values: dict[str, Any] = {}
    for f in fields(Settings):
        key = ENV_PREFIX + f.name.upper()
        raw = environ.get(key, dotenv.get(key))
        if raw is None or raw == '':
            continue
        kind = int if f.type in (int, 'int') else float
        values[f.name] = _coerce(f.name, raw, kind)

    return Settings(**values), path
