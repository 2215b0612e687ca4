"""Typed configuration loading and access.

The server reads an optional ``tekrel.toml``. Every value has a default, so
a missing file yields the stock configuration used for OpenShift Pipelines
releases.

Example::

    [server]
    transport = "stdio"

    [repos]
    konflux_repo_url = "https://gitlab.example.com/me/konflux-release-data.git"

    [credentials]
    token_env = "MY_GITLAB_TOKEN"
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "CredentialsConfig",
    "ReposConfig",
    "ServerConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_PORT",
    "find_config_path",
    "load_config",
    "load_config_or_default",
]

CONFIG_ENV_VAR = "TEKREL_CONFIG"
CONFIG_FILE_NAME = "tekrel.toml"

DEFAULT_PORT = 3000
_TRANSPORTS = ("http", "stdio")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """How the MCP server is exposed."""

    transport: str = "http"
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT


@dataclass(frozen=True, slots=True)
class ReposConfig:
    """Remote repositories the operations act on."""

    github_org: str = "openshift-pipelines"
    source_branch: str = "next"
    hack_repo_slug: str = "openshift-pipelines/hack"
    hack_repo_url: str = "git@github.com:openshift-pipelines/hack.git"
    konflux_repo_url: str = "https://gitlab.cee.redhat.com/sashture/konflux-release-data.git"
    konflux_base_branch: str = "main"


@dataclass(frozen=True, slots=True)
class CredentialsConfig:
    """Names of the environment variables holding GitLab credentials."""

    username_env: str = "GITLAB_USERNAME"
    token_env: str = "GITLAB_TOKEN"


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    server: ServerConfig = field(default_factory=ServerConfig)
    repos: ReposConfig = field(default_factory=ReposConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If ``server.transport`` is not a known transport.
        """
        server: StrDict = get_table(data, "server") or {}
        repos: StrDict = get_table(data, "repos") or {}
        creds: StrDict = get_table(data, "credentials") or {}

        d_server = ServerConfig()
        d_repos = ReposConfig()
        d_creds = CredentialsConfig()

        transport = get_str(server, "transport") or d_server.transport
        if transport not in _TRANSPORTS:
            raise ValueError(f"server.transport must be one of {', '.join(_TRANSPORTS)}")

        return cls(
            server=ServerConfig(
                transport=transport,
                host=get_str(server, "host") or d_server.host,
                port=get_int(server, "port") or d_server.port,
            ),
            repos=ReposConfig(
                github_org=get_str(repos, "github_org") or d_repos.github_org,
                source_branch=get_str(repos, "source_branch") or d_repos.source_branch,
                hack_repo_slug=get_str(repos, "hack_repo_slug") or d_repos.hack_repo_slug,
                hack_repo_url=get_str(repos, "hack_repo_url") or d_repos.hack_repo_url,
                konflux_repo_url=get_str(repos, "konflux_repo_url") or d_repos.konflux_repo_url,
                konflux_base_branch=get_str(repos, "konflux_base_branch")
                or d_repos.konflux_base_branch,
            ),
            credentials=CredentialsConfig(
                username_env=get_str(creds, "username_env") or d_creds.username_env,
                token_env=get_str(creds, "token_env") or d_creds.token_env,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to tekrel.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def find_config_path(explicit: Path | None = None) -> Path | None:
    """Resolve the config file: explicit path, then $TEKREL_CONFIG, then ./tekrel.toml."""
    if explicit is not None:
        return explicit
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    local = Path.cwd() / CONFIG_FILE_NAME
    return local if local.is_file() else None


def load_config_or_default(path: Path | None) -> Result[Config, ConfigError]:
    """Load config when a file is configured, otherwise return defaults."""
    if path is None:
        return Ok(Config())
    return load_config(path)
