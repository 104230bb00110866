"""
Configuration management for dockpilot.

This module provides configuration file support with YAML format,
user preferences, and default settings.

Features:
- YAML configuration file at ~/.config/dockpilot/config.yaml
- Default values with user overrides
- Keybinding customization for navigation keys
- Color theme support
- Renderer selection (curses or textual)
- Log location and rotation override

Architecture:
- ConfigManager: Main configuration interface
- Merges user config with defaults
- Provides typed access to settings
- Handles missing/invalid config gracefully
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

RENDERERS = ("curses", "textual")


@dataclass
class KeyBindings:
    """Customizable navigation keys (action menu letters are fixed)."""
    quit: str = "q"
    filter: str = "f"
    refresh: str = "r"
    back: str = "b"


@dataclass
class ColorTheme:
    """Color theme configuration."""
    name: str = "default"
    accent: str = "cyan"
    success: str = "green"
    warning: str = "yellow"
    error: str = "red"


@dataclass
class UIConfig:
    """UI-related configuration."""
    color_theme: ColorTheme = field(default_factory=ColorTheme)
    renderer: str = "curses"
    refresh_interval: int = 100  # milliseconds
    output_lines: int = 1000


@dataclass
class DockerConfig:
    """Docker-related configuration."""
    log_tail: Union[str, int] = "all"


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None  # None for default
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class AppConfig:
    """Main application configuration."""
    keybindings: KeyBindings = field(default_factory=KeyBindings)
    ui: UIConfig = field(default_factory=UIConfig)
    docker: DockerConfig = field(default_factory=DockerConfig)
    logging: LogConfig = field(default_factory=LogConfig)


class ConfigManager:
    """Configuration manager with YAML file support."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".config" / "dockpilot"
        self.config_file = self.config_dir / "config.yaml"
        self._config: AppConfig = AppConfig()

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create config directory {self.config_dir}: {e}")

        self.load_config()

    def load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r') as f:
                    user_config = yaml.safe_load(f) or {}

                self._config = self._merge_configs(AppConfig(), user_config)
                logger.debug(f"Loaded configuration from {self.config_file}")
            else:
                self._config = AppConfig()
                self.save_config()
                logger.info(f"Created default configuration at {self.config_file}")
        except Exception as e:
            logger.error(f"Failed to load config: {e}, using defaults")
            self._config = AppConfig()

    def save_config(self) -> None:
        """Save current configuration to YAML file."""
        try:
            config_dict = self._config_to_dict(self._config)
            with open(self.config_file, 'w') as f:
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)
            logger.debug(f"Saved configuration to {self.config_file}")
        except Exception as e:
            logger.error(f"Failed to save config: {e}")

    def get_config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def _merge_configs(self, default: AppConfig, user: Dict[str, Any]) -> AppConfig:
        """Merge user config with defaults."""
        if not isinstance(user, dict):
            raise ValueError(f"expected a mapping at top level, got {type(user).__name__}")
        if 'keybindings' in user:
            self._merge_dataclass(default.keybindings, user['keybindings'])
        if 'ui' in user:
            ui = dict(user['ui'] or {})
            theme = ui.pop('color_theme', None)
            self._merge_dataclass(default.ui, ui)
            if theme:
                self._merge_dataclass(default.ui.color_theme, theme)
        if 'docker' in user:
            self._merge_dataclass(default.docker, user['docker'])
        if 'logging' in user:
            self._merge_dataclass(default.logging, user['logging'])

        if default.ui.renderer not in RENDERERS:
            logger.warning(f"Unknown renderer {default.ui.renderer!r}, using curses")
            default.ui.renderer = "curses"
        return default

    def _merge_dataclass(self, obj: Any, updates: Optional[Dict[str, Any]]) -> None:
        """Merge updates into dataclass object."""
        for key, value in (updates or {}).items():
            if hasattr(obj, key):
                setattr(obj, key, value)
            else:
                logger.warning(f"Ignoring unknown config key {key!r}")

    def _config_to_dict(self, config: AppConfig) -> Dict[str, Any]:
        """Convert config dataclass to dictionary."""
        return {
            'keybindings': {
                'quit': config.keybindings.quit,
                'filter': config.keybindings.filter,
                'refresh': config.keybindings.refresh,
                'back': config.keybindings.back,
            },
            'ui': {
                'color_theme': {
                    'name': config.ui.color_theme.name,
                    'accent': config.ui.color_theme.accent,
                    'success': config.ui.color_theme.success,
                    'warning': config.ui.color_theme.warning,
                    'error': config.ui.color_theme.error,
                },
                'renderer': config.ui.renderer,
                'refresh_interval': config.ui.refresh_interval,
                'output_lines': config.ui.output_lines,
            },
            'docker': {
                'log_tail': config.docker.log_tail,
            },
            'logging': {
                'level': config.logging.level,
                'file_path': config.logging.file_path,
                'max_size_mb': config.logging.max_size_mb,
                'backup_count': config.logging.backup_count,
            }
        }


# Global config instance
config_manager = ConfigManager()
