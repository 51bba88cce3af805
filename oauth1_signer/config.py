"""Provider config discovery and loading for oauth1-signer."""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .oauth import SIGNATURE_METHOD_HMAC_SHA1, Authentication, Phase


def _resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} patterns in a string from environment variables.

    Handles:
    - Full replacement: "${VAR}" -> "value"
    - Partial replacement: "prefix_${VAR}_suffix" -> "prefix_value_suffix"
    - Multiple vars: "${VAR1}_${VAR2}" -> "value1_value2"
    - Missing vars resolve to empty string
    """
    if "${" not in value:
        return value

    result = value
    for match in re.finditer(r'\$\{([^}]+)\}', value):
        env_var = match.group(1)
        env_value = os.environ.get(env_var, "")
        result = result.replace(match.group(0), env_value)
    return result


@dataclass
class ProviderConfig:
    """Consumer credentials and endpoints for one OAuth 1.0a provider."""

    name: str
    consumer_key: str
    private_key: str
    signature_method: str = SIGNATURE_METHOD_HMAC_SHA1
    realm: str | None = None
    scope: str | None = None
    callback: str | None = None
    request_token_url: str | None = None
    authorize_token_url: str | None = None
    access_token_url: str | None = None

    def get_resolved(self) -> "ProviderConfig":
        """Return a copy with ${VAR} references expanded in credential fields."""
        return ProviderConfig(
            name=self.name,
            consumer_key=_resolve_env_vars(self.consumer_key),
            private_key=_resolve_env_vars(self.private_key),
            signature_method=self.signature_method,
            realm=self.realm,
            scope=self.scope,
            callback=self.callback,
            request_token_url=self.request_token_url,
            authorize_token_url=self.authorize_token_url,
            access_token_url=self.access_token_url,
        )

    def endpoint_for(self, phase: Phase) -> str | None:
        """Configured URL for a token exchange step, if any."""
        return {
            Phase.REQUEST_TOKEN: self.request_token_url,
            Phase.AUTHORIZE_TOKEN: self.authorize_token_url,
            Phase.ACCESS_TOKEN: self.access_token_url,
        }.get(phase)

    def to_authentication(self) -> Authentication:
        """Build an Authentication from the resolved credentials."""
        resolved = self.get_resolved()
        auth = Authentication(
            resolved.signature_method,
            resolved.consumer_key,
            resolved.private_key,
            realm=resolved.realm,
            service_provider=resolved.name,
        )
        auth.scope = resolved.scope
        auth.callback = resolved.callback
        return auth


@dataclass
class Config:
    """Complete oauth1-signer configuration."""

    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    config_path: Path | None = None  # Primary config (first found)
    config_paths: list[Path] = field(default_factory=list)  # All config files loaded
    env_path: Path | None = None


USER_CONFIG_DIR = Path.home() / ".config" / "oauth1-signer"

# Directories to search for config files, in priority order
CONFIG_SEARCH_DIRS = [
    Path("."),          # Current directory
    USER_CONFIG_DIR,    # User-level config directory
]

# Env file search paths in priority order
ENV_SEARCH_PATHS = [
    Path(".env"),
    USER_CONFIG_DIR / ".env",
]


def find_config_files(explicit_path: Path | None = None) -> list[Path]:
    """Find all config files with 'oauth' in the filename.

    Args:
        explicit_path: If provided, returns only this path if it exists.

    Returns:
        List of found config file paths, ordered by search directory priority.
    """
    if explicit_path:
        if explicit_path.exists():
            return [explicit_path]
        return []

    found_files: list[Path] = []
    seen_resolved: set[Path] = set()  # Track resolved paths to avoid duplicates

    for search_dir in CONFIG_SEARCH_DIRS:
        if not search_dir.exists() or not search_dir.is_dir():
            continue

        for json_file in sorted(search_dir.glob("*.json")):
            if "oauth" not in json_file.name.lower():
                continue

            resolved = json_file.resolve()
            if resolved in seen_resolved:
                continue
            seen_resolved.add(resolved)

            found_files.append(json_file)

    return found_files


def find_env_file(explicit_path: Path | None = None) -> Path | None:
    """Find the .env file, checking project then user level."""
    if explicit_path:
        if explicit_path.exists():
            return explicit_path
        return None

    for path in ENV_SEARCH_PATHS:
        if path.exists():
            return path
    return None


def parse_provider_config(name: str, data: dict[str, Any]) -> ProviderConfig:
    """Parse a provider configuration from JSON data."""
    return ProviderConfig(
        name=name,
        consumer_key=data.get("consumerKey", ""),
        private_key=data.get("privateKey", ""),
        signature_method=data.get("signatureMethod", SIGNATURE_METHOD_HMAC_SHA1),
        realm=data.get("realm"),
        scope=data.get("scope"),
        callback=data.get("callback"),
        request_token_url=data.get("requestTokenUrl"),
        authorize_token_url=data.get("authorizeTokenUrl"),
        access_token_url=data.get("accessTokenUrl"),
    )


def load_config(
    config_path: Path | None = None,
    env_path: Path | None = None,
) -> Config:
    """Load provider configuration from discovered or explicit paths.

    Args:
        config_path: Explicit path to config file (optional)
        env_path: Explicit path to .env file (optional)

    Returns:
        Config object with providers from all found config files

    Raises:
        FileNotFoundError: If no config file is found
        json.JSONDecodeError: If any config file is invalid JSON
    """
    # Find and load .env file first
    env_file = find_env_file(env_path)
    if env_file:
        load_dotenv(env_file)

    config_files = find_config_files(config_path)
    if not config_files:
        searched = ", ".join(str(p) for p in CONFIG_SEARCH_DIRS)
        raise FileNotFoundError(
            f"No OAuth provider config file found.\n\n"
            f"Searched directories for *oauth*.json files:\n"
            f"  {searched}\n\n"
            f"Create a config file with your providers. Example (oauth.json):\n\n"
            f'{{\n  "oauthProviders": {{\n'
            f'    "google": {{\n'
            f'      "consumerKey": "anonymous",\n'
            f'      "privateKey": "${{GOOGLE_CONSUMER_SECRET}}",\n'
            f'      "scope": "https://www.google.com/calendar/feeds/"\n'
            f"    }}\n  }}\n}}"
        )

    providers: dict[str, ProviderConfig] = {}
    for config_file in config_files:
        with open(config_file) as f:
            data = json.load(f)

        for name, provider_data in data.get("oauthProviders", {}).items():
            if name not in providers:  # First definition wins
                providers[name] = parse_provider_config(name, provider_data)

    return Config(
        providers=providers,
        config_path=config_files[0],
        config_paths=config_files,
        env_path=env_file,
    )
