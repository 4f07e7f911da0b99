"""Configuration management for the slidepack tools."""

import copy
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from .errors import ConfigError
from .fetch import HttpOptions
from .package import Compression, PackageOptions

DEFAULTS: Dict[str, Any] = {
    'settings': {
        'logging': {'level': 'INFO'},
        'package': {'compression': 'deflate', 'strict': False},
        'language': None,
        'author': 'slidepack',
        'http': {'timeout': 10.0, 'user_agent': HttpOptions().user_agent},
    },
    'defaults': {'layout': 'TitleAndContent'},
    'paths': {},
}


def load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """Load a YAML file and return its contents."""
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError([f"{file_path}: invalid YAML: {e}"]) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError([f"{file_path}: top level must be a mapping"])
    return data


def merge_dicts(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries, overlay taking precedence."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


class Config:
    """Configuration loaded from YAML and merged over the built-in defaults."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration.

        Args:
            config_path: Path to a YAML configuration file. When omitted,
                ``slidepack.yaml`` in the working directory is used if it
                exists, otherwise the defaults apply.

        Raises:
            FileNotFoundError: An explicitly given file does not exist.
            ConfigError: The file is not valid YAML or has invalid values.
        """
        if config_path is None:
            candidate = Path('slidepack.yaml')
            main_config = load_yaml_file(candidate) if candidate.exists() else {}
            self.config_path = candidate
        else:
            self.config_path = Path(config_path)
            main_config = load_yaml_file(self.config_path)
        self._init(main_config, self.config_path.parent)

    @classmethod
    def from_dict(cls, main_config: Dict[str, Any], config_dir: Path = Path('.')) -> "Config":
        """Create Config instance from an already loaded dictionary.

        Args:
            main_config: Configuration dictionary
            config_dir: Directory relative paths are resolved against

        Returns:
            Configured Config instance
        """
        config = cls.__new__(cls)
        config.config_path = Path(config_dir) / "slidepack.yaml"  # Virtual path
        config._init(main_config, Path(config_dir))
        return config

    def _init(self, main_config: Dict[str, Any], config_dir: Path) -> None:
        paths_config = main_config.get('paths') or {}
        if 'project_root' in paths_config:
            self.project_root = (config_dir / paths_config['project_root']).resolve()
        else:
            self.project_root = Path.cwd()

        self._config = merge_dicts(copy.deepcopy(DEFAULTS), main_config)
        self._paths = self._config.get('paths') or {}
        self.validate()
        self._setup_logging()
        logging.debug(f"Loaded config from: {self.config_path}")

    def _resolve_path_value(self, value: str) -> Path:
        """Resolve a path value relative to project_root if not absolute.

        Args:
            value: Path string to resolve

        Returns:
            Resolved Path object
        """
        if not value:
            return Path()
        p = Path(value)
        if not p.is_absolute():
            return self.project_root / p
        return p.resolve()

    def _setup_logging(self):
        """Setup logging based on configuration."""
        log_level = self.get('settings.logging.level', 'INFO')
        numeric_level = getattr(logging, str(log_level).upper(), logging.INFO)
        logging.basicConfig(
            level=numeric_level,
            format='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def validate(self) -> None:
        """Check value types and enumerations, reporting every problem at once.

        Raises:
            ConfigError: One or more settings are invalid.
        """
        issues = []
        compression = self.get('settings.package.compression')
        if compression not in [c.value for c in Compression]:
            issues.append(f"settings.package.compression: expected 'deflate' or 'store', got {compression!r}")
        if not isinstance(self.get('settings.package.strict'), bool):
            issues.append("settings.package.strict: expected true or false")
        timeout = self.get('settings.http.timeout')
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            issues.append(f"settings.http.timeout: expected a positive number, got {timeout!r}")
        language = self.get('settings.language')
        if language is not None and not isinstance(language, str):
            issues.append("settings.language: expected a language tag such as 'en-US'")
        level = self.get('settings.logging.level')
        if not isinstance(getattr(logging, str(level).upper(), None), int):
            issues.append(f"settings.logging.level: unknown level {level!r}")
        if not isinstance(self._paths, dict):
            issues.append("paths: expected a mapping")
        if issues:
            raise ConfigError(issues)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'settings.package.strict')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set a configuration value using dot notation, creating sections as needed."""
        keys = key_path.split('.')
        section = self._config
        for key in keys[:-1]:
            section = section.setdefault(key, {})
        section[keys[-1]] = value
        if keys[0] == 'paths':
            self._paths = self._config['paths']

    def get_path(self, key: str) -> Path:
        """Get a path from configuration, resolved relative to project_root.

        Args:
            key: Path key in config (e.g., 'content', 'output')

        Returns:
            Resolved Path object
        """
        path_str = self._paths.get(key)
        if path_str is None:
            raise ConfigError([f"paths.{key}: not configured"])
        return self._resolve_path_value(path_str)

    @property
    def package_options(self) -> PackageOptions:
        """Writer options derived from ``settings``."""
        return PackageOptions(
            compression=Compression(self.get('settings.package.compression')),
            strict=self.get('settings.package.strict'),
            language=self.get('settings.language'),
            http=self.http_options,
        )

    @property
    def http_options(self) -> HttpOptions:
        return HttpOptions(
            timeout=float(self.get('settings.http.timeout')),
            user_agent=self.get('settings.http.user_agent'),
        )

    @property
    def author(self) -> str:
        return str(self.get('settings.author', 'slidepack'))

    @property
    def default_layout(self) -> str:
        return str(self.get('defaults.layout', 'TitleAndContent'))

    @property
    def content_path(self) -> Path:
        """Get content markdown file path."""
        return self.get_path('content')

    @property
    def output_path(self) -> Path:
        """Get output PowerPoint file path."""
        return self.get_path('output')

    @property
    def assets_dir(self) -> Path:
        """Get assets directory path."""
        return self.get_path('assets_dir')
