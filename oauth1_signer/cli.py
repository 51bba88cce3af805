"""CLI entry point for oauth1-signer."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
import httpx

from . import __version__
from .config import Config, load_config
from .oauth import (
    FixedClockAndNonce,
    MalformedResponseError,
    OAuthSigningError,
    Phase,
    dictionary_with_response_string,
    parameters_from_persistence_string,
    persistence_string,
)
from .oauth.params import OAuthParam, ParameterStore
from .output import OutputHandler

# Logger for CLI
logger = logging.getLogger("oauth1")

SIGNED_PHASES = [Phase.REQUEST_TOKEN.value, Phase.ACCESS_TOKEN.value, Phase.RESOURCE.value]


@click.group()
@click.option("--json", "json_mode", is_flag=True, help="Output in JSON format")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Path to provider config file")
@click.option("--env-file", "env_path", type=click.Path(exists=True), help="Path to .env file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, json_mode: bool, config_path: str | None, env_path: str | None, verbose: bool) -> None:
    """oauth1-signer - Sign and inspect OAuth 1.0a requests."""
    ctx.ensure_object(dict)
    ctx.obj["json_mode"] = json_mode
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["env_path"] = Path(env_path) if env_path else None
    ctx.obj["output"] = OutputHandler(json_mode)

    # Configure logging based on verbosity
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(level=logging.WARNING)


def get_config(ctx: click.Context) -> Config | NoReturn:
    """Get config from context, handling errors."""
    output: OutputHandler = ctx.obj["output"]
    try:
        return load_config(ctx.obj["config_path"], ctx.obj["env_path"])
    except FileNotFoundError as e:
        output.error(e, help_text=str(e))
        raise SystemExit(1)  # Never reached due to sys.exit in output.error
    except json.JSONDecodeError as e:
        output.error(
            e,
            error_type="ConfigParseError",
            help_text="The config file contains invalid JSON. Check for syntax errors.",
        )
        raise SystemExit(1)  # Never reached due to sys.exit in output.error


@main.command()
@click.pass_context
def providers(ctx: click.Context) -> None:
    """List configured OAuth providers."""
    output: OutputHandler = ctx.obj["output"]
    config = get_config(ctx)

    rows = [
        [name, provider.signature_method, provider.consumer_key, provider.scope or ""]
        for name, provider in sorted(config.providers.items())
    ]
    output.table(["PROVIDER", "METHOD", "CONSUMER KEY", "SCOPE"], rows)


@main.command()
@click.argument("provider")
@click.argument("url", required=False)
@click.option("--method", "-X", default="GET", help="HTTP method")
@click.option("--phase", type=click.Choice(SIGNED_PHASES), default=Phase.RESOURCE.value, help="Token exchange step")
@click.option("--token", help="Request or access token")
@click.option("--token-secret", help="Secret of the token")
@click.option("--verifier", help="Verifier from the authorize step")
@click.option("--params", "use_params", is_flag=True, help="Put OAuth parameters in the URL instead of a header")
@click.option("--timestamp", help="Fixed oauth_timestamp (requires --nonce)")
@click.option("--nonce", help="Fixed oauth_nonce (requires --timestamp)")
@click.option("--show-base-string", is_flag=True, help="Include the signature base string")
@click.pass_context
def sign(
    ctx: click.Context,
    provider: str,
    url: str | None,
    method: str,
    phase: str,
    token: str | None,
    token_secret: str | None,
    verifier: str | None,
    use_params: bool,
    timestamp: str | None,
    nonce: str | None,
    show_base_string: bool,
) -> None:
    """Sign a request for PROVIDER and print the Authorization header.

    URL defaults to the provider's configured endpoint for the request and
    access steps.
    """
    output: OutputHandler = ctx.obj["output"]
    config = get_config(ctx)

    if provider not in config.providers:
        available = ", ".join(sorted(config.providers)) or "(none)"
        output.error(
            KeyError(f"Provider '{provider}' not found"),
            error_type="ProviderNotFound",
            help_text=f"Configured providers: {available}",
        )
        return

    provider_config = config.providers[provider]
    if url is None:
        url = provider_config.endpoint_for(Phase(phase))
    if url is None:
        output.error(
            click.UsageError(f"No URL given and provider '{provider}' has no {phase} endpoint"),
            help_text="Pass URL or set requestTokenUrl/accessTokenUrl in the provider config.",
        )
        return

    if (timestamp is None) != (nonce is None):
        output.error(click.UsageError("--timestamp and --nonce must be given together"))
        return

    logger.debug(f"Signing {phase} request for provider {provider}")
    auth = provider_config.to_authentication()
    auth.token = token
    auth.token_secret = token_secret
    auth.verifier = verifier
    if timestamp is not None and nonce is not None:
        auth.clock = FixedClockAndNonce(timestamp, nonce)

    request = httpx.Request(method.upper(), url)
    try:
        signed = auth.sign_request(request, Phase(phase), use_header=not use_params)
    except OAuthSigningError as e:
        output.error(e, help_text="Check the provider credentials and the token options.")
        return

    result = {
        "method": request.method,
        "url": str(request.url),
        "authorization": request.headers.get("Authorization"),
    }
    if show_base_string and signed is not None:
        result["base_string"] = signed.base_string

    if ctx.obj["json_mode"]:
        output.success(result)
        return

    lines = []
    if result["authorization"]:
        lines.append(f"Authorization: {result['authorization']}")
    lines.append(f"URL: {result['url']}")
    if "base_string" in result:
        lines.append(f"Base string: {result['base_string']}")
    output.success(result, "\n".join(lines))


@main.command("authorize-url")
@click.argument("provider")
@click.option("--token", required=True, help="Request token from the request step")
@click.option("--hosted-domain", help="Hosted domain (hd)")
@click.option("--language", help="Language of the authorize page (hl)")
@click.pass_context
def authorize_url(
    ctx: click.Context,
    provider: str,
    token: str,
    hosted_domain: str | None,
    language: str | None,
) -> None:
    """Print the URL that sends the user to PROVIDER's authorize page."""
    output: OutputHandler = ctx.obj["output"]
    config = get_config(ctx)

    if provider not in config.providers:
        available = ", ".join(sorted(config.providers)) or "(none)"
        output.error(
            KeyError(f"Provider '{provider}' not found"),
            error_type="ProviderNotFound",
            help_text=f"Configured providers: {available}",
        )
        return

    provider_config = config.providers[provider]
    url = provider_config.endpoint_for(Phase.AUTHORIZE_TOKEN)
    if url is None:
        output.error(
            click.UsageError(f"Provider '{provider}' has no authorize endpoint"),
            help_text="Set authorizeTokenUrl in the provider config.",
        )
        return

    auth = provider_config.to_authentication()
    auth.token = token
    auth.hosted_domain = hosted_domain
    auth.language = language

    request = httpx.Request("GET", url)
    auth.sign_request(request, Phase.AUTHORIZE_TOKEN)
    output.success({"url": str(request.url)}, str(request.url))


@main.command("parse-response")
@click.argument("text", required=False)
@click.pass_context
def parse_response(ctx: click.Context, text: str | None) -> None:
    """Parse a form-encoded provider response (reads stdin if TEXT is omitted or '-')."""
    output: OutputHandler = ctx.obj["output"]

    if text is None or text == "-":
        text = sys.stdin.read()

    try:
        values = dictionary_with_response_string(text, strict=True)
    except MalformedResponseError as e:
        output.error(e, help_text="Expected a body like oauth_token=...&oauth_token_secret=...")
        return

    output.mapping(values)


@main.command()
@click.option("--token", required=True, help="Access token")
@click.option("--token-secret", required=True, help="Access token secret")
@click.pass_context
def persist(ctx: click.Context, token: str, token_secret: str) -> None:
    """Print the persistence string for a token and secret."""
    output: OutputHandler = ctx.obj["output"]
    store = ParameterStore()
    store.set(OAuthParam.TOKEN, token)
    store.set(OAuthParam.TOKEN_SECRET, token_secret)

    text = persistence_string(store)
    output.success({"persistence": text}, text)


@main.command()
@click.argument("text")
@click.pass_context
def restore(ctx: click.Context, text: str) -> None:
    """Decode a persistence string back into token and secret."""
    output: OutputHandler = ctx.obj["output"]
    output.mapping(parameters_from_persistence_string(text).to_dict())


if __name__ == "__main__":
    main()
