"""
Server configuration management.

This module handles loading and accessing server configuration from multiple sources
with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/server.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The ServerConfig
dataclass provides typed access to all settings.

Usage:
    from shiritori_server.config import config

    print(config.server.port)
    print(config.session.cookie_name)
    print(config.database.absolute_path)

Environment Variable Mapping:
    SHIRITORI_HOST                 -> server.host
    SHIRITORI_PORT                 -> server.port
    SHIRITORI_DB_PATH              -> database.path
    SHIRITORI_LOG_LEVEL            -> logging.level
    SHIRITORI_LOG_FORMAT           -> logging.format
    SHIRITORI_COOKIE_NAME          -> session.cookie_name
    SHIRITORI_COOKIE_SECURE        -> session.cookie_secure
    SHIRITORI_SEED_WORD            -> game.seed_word
    SHIRITORI_MAX_APPEND_ATTEMPTS  -> game.max_append_attempts
"""

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, data/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "server.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "server.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """Network server configuration."""

    host: str = "0.0.0.0"  # nosec B104 - intentional for server binding
    port: int = 8080


@dataclass
class SessionSettings:
    """Session cookie configuration.

    The cookie is always HttpOnly. ``cookie_secure`` can be switched off for
    plain-HTTP local development where browsers refuse Secure cookies.
    """

    cookie_name: str = "shirid"
    validity_days: int = 365
    cookie_secure: bool = True
    cookie_samesite: Literal["lax", "strict", "none"] = "none"

    @property
    def max_age_seconds(self) -> int:
        return self.validity_days * 24 * 60 * 60


@dataclass
class DatabaseSettings:
    """Database configuration."""

    path: str = "data/shiritori.db"
    wal: bool = True
    busy_timeout_ms: int = 5000

    @property
    def absolute_path(self) -> Path:
        """Get absolute path to database file."""
        p = Path(self.path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class GameSettings:
    """Word-chain rules that are deployment-tunable."""

    seed_word: str = "しりとり"
    # Re-validation rounds when the tail moves between validation and commit.
    max_append_attempts: int = 5


@dataclass
class ServerConfig:
    """
    Complete server configuration.

    This is the main configuration object that aggregates all settings sections.
    Access via the module-level `config` singleton.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    session: SessionSettings = field(default_factory=SessionSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    game: GameSettings = field(default_factory=GameSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _load_from_ini(parser: configparser.ConfigParser, cfg: ServerConfig) -> None:
    """Load configuration from parsed INI file into ServerConfig."""
    # Server section
    if parser.has_section("server"):
        if parser.has_option("server", "host"):
            cfg.server.host = parser.get("server", "host")
        if parser.has_option("server", "port"):
            cfg.server.port = parser.getint("server", "port")

    # Session section
    if parser.has_section("session"):
        if parser.has_option("session", "cookie_name"):
            cfg.session.cookie_name = parser.get("session", "cookie_name")
        if parser.has_option("session", "validity_days"):
            cfg.session.validity_days = parser.getint("session", "validity_days")
        if parser.has_option("session", "cookie_secure"):
            cfg.session.cookie_secure = _parse_bool(parser.get("session", "cookie_secure"))
        if parser.has_option("session", "cookie_samesite"):
            val = parser.get("session", "cookie_samesite").lower()
            if val in ("lax", "strict", "none"):
                cfg.session.cookie_samesite = val  # type: ignore[assignment]

    # Database section
    if parser.has_section("database"):
        if parser.has_option("database", "path"):
            cfg.database.path = parser.get("database", "path")
        if parser.has_option("database", "wal"):
            cfg.database.wal = _parse_bool(parser.get("database", "wal"))
        if parser.has_option("database", "busy_timeout_ms"):
            cfg.database.busy_timeout_ms = parser.getint("database", "busy_timeout_ms")

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]

    # Game section
    if parser.has_section("game"):
        if parser.has_option("game", "seed_word"):
            cfg.game.seed_word = parser.get("game", "seed_word")
        if parser.has_option("game", "max_append_attempts"):
            cfg.game.max_append_attempts = parser.getint("game", "max_append_attempts")


def _apply_env_overrides(cfg: ServerConfig) -> None:
    """Apply environment variable overrides to configuration."""
    # Server settings
    if env_host := os.getenv("SHIRITORI_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("SHIRITORI_PORT"):
        cfg.server.port = int(env_port)

    # Database settings
    if env_db := os.getenv("SHIRITORI_DB_PATH"):
        cfg.database.path = env_db

    # Logging settings
    if env_log := os.getenv("SHIRITORI_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()
    if env_log_format := os.getenv("SHIRITORI_LOG_FORMAT"):
        if env_log_format.lower() in ("simple", "detailed"):
            cfg.logging.format = env_log_format.lower()  # type: ignore[assignment]

    # Session settings
    if env_cookie := os.getenv("SHIRITORI_COOKIE_NAME"):
        cfg.session.cookie_name = env_cookie
    if env_secure := os.getenv("SHIRITORI_COOKIE_SECURE"):
        cfg.session.cookie_secure = _parse_bool(env_secure)

    # Game settings
    if env_seed := os.getenv("SHIRITORI_SEED_WORD"):
        cfg.game.seed_word = env_seed
    if env_attempts := os.getenv("SHIRITORI_MAX_APPEND_ATTEMPTS"):
        cfg.game.max_append_attempts = int(env_attempts)


def load_config() -> ServerConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/server.ini
        3. config/server.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        ServerConfig: Fully populated configuration object.
    """
    cfg = ServerConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "ServerConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton. Use sparingly as it
    doesn't update an already-running application.

    Returns:
        ServerConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

_LOG_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
}


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Install a root logging handler from the logging settings section."""
    settings = settings or config.logging
    logging.basicConfig(
        level=settings.level,
        format=_LOG_FORMATS[settings.format],
        force=True,
    )


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "database_path": str(config.database.absolute_path),
        "cookie_secure": config.session.cookie_secure,
    }


# =============================================================================
# TEST HELPERS
# =============================================================================


class use_test_database:
    """
    Context manager for using a temporary test database.

    Usage:
        from shiritori_server.config import use_test_database

        def test_something(tmp_path):
            with use_test_database(tmp_path / "test.db"):
                ...

    Args:
        db_path: Path to the test database file
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self.original_path: str | None = None

    def __enter__(self) -> Path:
        """Set up test database path."""
        self.original_path = config.database.path
        config.database.path = str(self.db_path)
        return self.db_path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Restore original database path."""
        if self.original_path is not None:
            config.database.path = self.original_path
        return None
