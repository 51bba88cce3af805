"""oauth1-signer - OAuth 1.0a request signing for httpx clients."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("oauth1-signer")
except PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development

__all__ = [
    "__version__",
    "Authentication",
    "OAuth1Auth",
    "Config",
    "ProviderConfig",
    "load_config",
    "OutputHandler",
]


# Lazy imports to avoid circular dependencies
def __getattr__(name: str) -> object:
    """Lazy import module components."""
    if name in ("Authentication", "OAuth1Auth"):
        from .oauth import Authentication, OAuth1Auth
        return {"Authentication": Authentication, "OAuth1Auth": OAuth1Auth}[name]
    elif name in ("Config", "ProviderConfig", "load_config"):
        from .config import Config, ProviderConfig, load_config
        return {"Config": Config, "ProviderConfig": ProviderConfig, "load_config": load_config}[name]
    elif name == "OutputHandler":
        from .output import OutputHandler
        return OutputHandler
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
