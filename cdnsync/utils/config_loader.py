"""
Configuration loader: defaults, optional JSON overrides, environment credentials.

The loader is the only place that reads the process environment. It
produces an explicit :class:`SyncConfig` that is handed to the pipeline.
"""
import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..exceptions import ConfigError
from ..models.environment import ENVIRONMENT_NAMES, EnvironmentTarget
from .logger import get_logger

log = get_logger(__name__)

DEFAULT_CONFIG_FILENAME = "cdnsync.json"

_WASABI_ENDPOINT = "https://s3.us-central-1.wasabisys.com"
_CDN_BUCKET = "cdn.support.tools"

# Default configuration. A JSON config file may override any key;
# ``environments`` entries are merged per environment.
DEFAULT_CONFIG: Dict[str, Any] = {
    "content_dir": "blog",
    "output_dir": "public",
    "exclude": [".git/*", "*/.git/*", ".DS_Store", "*/.DS_Store"],
    "workers": 8,
    "max_attempts": 3,
    "base_delay": 0.5,
    "max_delay": 8.0,
    "connect_timeout": 10,
    "read_timeout": 60,
    "build_timeout": 600,
    "hugo_binary": "hugo",
    "hugo_args": ["--minify"],
    "environments": {
        "dev": {"bucket": _CDN_BUCKET, "prefix": "dev", "endpoint_url": _WASABI_ENDPOINT,
                "region": "us-central-1", "sync_enabled": False, "acl": "public-read"},
        "tst": {"bucket": _CDN_BUCKET, "prefix": "tst", "endpoint_url": _WASABI_ENDPOINT,
                "region": "us-central-1", "sync_enabled": True, "acl": "public-read"},
        "qas": {"bucket": _CDN_BUCKET, "prefix": "qas", "endpoint_url": _WASABI_ENDPOINT,
                "region": "us-central-1", "sync_enabled": True, "acl": "public-read"},
        "stg": {"bucket": _CDN_BUCKET, "prefix": "stg", "endpoint_url": _WASABI_ENDPOINT,
                "region": "us-central-1", "sync_enabled": True, "acl": "public-read"},
        "prd": {"bucket": _CDN_BUCKET, "prefix": "", "endpoint_url": _WASABI_ENDPOINT,
                "region": "us-central-1", "sync_enabled": True, "acl": "public-read"},
    },
    "notification_enabled": False,
    "notification_type": "slack",
    "notification_webhook_url": "",
}

# Environment variables consulted for each credential/endpoint field,
# first match wins.
ENV_ALIASES = {
    "access_key": ("CDNSYNC_ACCESS_KEY", "WASABI_ACCESS_KEY", "AWS_ACCESS_KEY_ID"),
    "secret_key": ("CDNSYNC_SECRET_KEY", "WASABI_SECRET_KEY", "AWS_SECRET_ACCESS_KEY"),
    "endpoint_url": ("CDNSYNC_ENDPOINT_URL",),
    "region": ("CDNSYNC_REGION", "AWS_REGION"),
    "bucket": ("CDNSYNC_BUCKET",),
    "prefix": ("CDNSYNC_PREFIX",),
    "triggered_by": ("GITHUB_ACTOR", "DRONE_COMMIT_AUTHOR", "USER"),
}


class SyncConfig:
    """
    Everything one pipeline invocation needs: the active environment
    target, credentials, and sync tunables. Read-only for the run.
    """

    def __init__(self, target: EnvironmentTarget, access_key=None, secret_key=None,
                 content_dir="blog", output_dir="public", exclude=None, workers=8,
                 max_attempts=3, base_delay=0.5, max_delay=8.0, connect_timeout=10,
                 read_timeout=60, build_timeout=600, hugo_binary="hugo", hugo_args=None,
                 notifications=None, triggered_by=None):
        self.target = target
        self.access_key = access_key
        self.secret_key = secret_key
        self.content_dir = content_dir
        self.output_dir = output_dir
        self.exclude = list(exclude or [])
        self.workers = max(1, int(workers))
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay = float(base_delay)
        self.max_delay = float(max_delay)
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.build_timeout = build_timeout
        self.hugo_binary = hugo_binary
        self.hugo_args = list(hugo_args or [])
        self.notifications = dict(notifications or {})
        self.triggered_by = triggered_by

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key and self.secret_key)

    def __repr__(self):
        # Never print secrets
        return (
            f"SyncConfig(target={self.target!r}, access_key={mask_secret(self.access_key)!r}, "
            f"workers={self.workers}, max_attempts={self.max_attempts})"
        )


class ConfigLoader:
    """Handles loading configuration and resolving the environment target."""

    @staticmethod
    def get_config_path(explicit_path=None, environ: Optional[Mapping[str, str]] = None):
        """
        Resolve the config file to load.

        Args:
            explicit_path: Path given on the command line (``--config``)
            environ: Environment mapping (defaults to ``os.environ``)

        Returns:
            Path to an existing config file, or None to use defaults only
        """
        environ = os.environ if environ is None else environ

        if explicit_path:
            path = Path(explicit_path)
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        env_path = environ.get("CDNSYNC_CONFIG")
        if env_path:
            path = Path(env_path)
            if not path.exists():
                raise ConfigError(f"CDNSYNC_CONFIG points to a missing file: {path}")
            return path

        default_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
        return default_path if default_path.exists() else None

    @staticmethod
    def load_config_json(path=None) -> Dict[str, Any]:
        """
        Load configuration, merging a JSON file over :data:`DEFAULT_CONFIG`.

        Args:
            path: JSON file path, or None for defaults only

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigError: If the file is unreadable, not an object, or has unknown keys
        """
        config = copy.deepcopy(DEFAULT_CONFIG)
        if path is None:
            return config

        try:
            with open(path, 'r') as f:
                overrides = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Error loading {path}: {e}") from e

        if not isinstance(overrides, dict):
            raise ConfigError(f"{path} must contain a JSON object")

        merge_config(config, overrides)
        log.debug("Loaded configuration from %s", path)
        return config

    @staticmethod
    def resolve_target(config: Dict[str, Any], env_name: str,
                       environ: Optional[Mapping[str, str]] = None) -> EnvironmentTarget:
        """
        Build the active :class:`EnvironmentTarget` for ``env_name``.

        Environment variables (``CDNSYNC_BUCKET``, ``CDNSYNC_PREFIX``,
        ``CDNSYNC_ENDPOINT_URL``, ``CDNSYNC_REGION``) override the
        configured values.
        """
        environ = os.environ if environ is None else environ

        if env_name not in ENVIRONMENT_NAMES:
            raise ConfigError(
                f"Unknown environment '{env_name}' (expected one of: {', '.join(ENVIRONMENT_NAMES)})"
            )

        entry = dict(config.get("environments", {}).get(env_name) or {})
        for field in ("bucket", "prefix", "endpoint_url", "region"):
            value = _lookup_env(environ, ENV_ALIASES[field])
            if value is not None:
                entry[field] = value

        target = EnvironmentTarget.from_dict(env_name, entry)
        if not target.bucket:
            raise ConfigError(f"No bucket configured for environment '{env_name}'")
        return target

    @classmethod
    def build_sync_config(cls, env_name, config_path=None, overrides=None,
                          environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
        """
        Assemble the :class:`SyncConfig` for one invocation.

        Args:
            env_name: Environment target name
            config_path: Optional explicit JSON config path
            overrides: Dict of CLI overrides (None values are ignored)
            environ: Environment mapping (defaults to ``os.environ``)

        Returns:
            SyncConfig ready for the pipeline
        """
        environ = os.environ if environ is None else environ

        path = cls.get_config_path(config_path, environ)
        config = cls.load_config_json(path)
        for key, value in (overrides or {}).items():
            if value is None:
                continue
            if key not in config:
                raise ConfigError(f"Invalid configuration key: {key}")
            config[key] = value

        target = cls.resolve_target(config, env_name, environ)

        return SyncConfig(
            target=target,
            access_key=_lookup_env(environ, ENV_ALIASES["access_key"]),
            secret_key=_lookup_env(environ, ENV_ALIASES["secret_key"]),
            content_dir=config["content_dir"],
            output_dir=config["output_dir"],
            exclude=config["exclude"],
            workers=config["workers"],
            max_attempts=config["max_attempts"],
            base_delay=config["base_delay"],
            max_delay=config["max_delay"],
            connect_timeout=config["connect_timeout"],
            read_timeout=config["read_timeout"],
            build_timeout=config["build_timeout"],
            hugo_binary=config["hugo_binary"],
            hugo_args=config["hugo_args"],
            notifications={k: v for k, v in config.items() if k.startswith("notification_")},
            triggered_by=_lookup_env(environ, ENV_ALIASES["triggered_by"]),
        )


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``overrides`` into ``base`` in place, rejecting unknown keys.

    ``environments`` is merged per environment so a file can override a
    single field of one target.
    """
    invalid_keys = [key for key in overrides if key not in base]
    if invalid_keys:
        raise ConfigError(f"Invalid configuration key(s): {', '.join(sorted(invalid_keys))}")

    for key, value in overrides.items():
        if key != "environments":
            base[key] = value
            continue
        if not isinstance(value, dict):
            raise ConfigError("'environments' must be a JSON object")
        for env_name, entry in value.items():
            if env_name not in ENVIRONMENT_NAMES:
                raise ConfigError(f"Unknown environment '{env_name}' in configuration")
            base["environments"].setdefault(env_name, {}).update(entry or {})

    return base


def mask_secret(value) -> str:
    """Mask a credential for display, keeping the first 4 characters."""
    if not value:
        return ""
    value = str(value)
    if len(value) > 4:
        return f"{value[:4]}...{'*' * 8}"
    return '*' * 8


def _lookup_env(environ: Mapping[str, str], names) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None
