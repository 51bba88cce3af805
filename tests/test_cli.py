"""Tests for CLI module."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from oauth1_signer.cli import main
from oauth1_signer.oauth import percent_encode

from .vectors import (
    ACCESS_TOKEN_URL,
    REQUEST_TOKEN_URL,
    RFC_NONCE,
    RFC_SIGNATURE,
    RFC_TIMESTAMP,
    RFC_TOKEN,
    RFC_TOKEN_SECRET,
    RFC_URL,
)

AUTHORIZE_TOKEN_URL = "https://www.google.com/accounts/OAuthAuthorizeToken"

RFC_ENCODED_SIGNATURE = "tR3%2BTy81lMeYAr%2FFid0kMTYa%2FWM%3D"


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def sign_args(config_file: Path) -> list[str]:
    """Arguments that sign the Appendix A photos request."""
    return [
        "--config", str(config_file),
        "sign", "photos", RFC_URL,
        "--token", RFC_TOKEN,
        "--token-secret", RFC_TOKEN_SECRET,
        "--timestamp", RFC_TIMESTAMP,
        "--nonce", RFC_NONCE,
    ]


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch):
    """Keep config and .env discovery inside the test directory."""
    monkeypatch.chdir(tmp_path)


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output.lower()

    def test_help(self, runner: CliRunner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "OAuth 1.0a" in result.output
        for command in ("providers", "sign", "authorize-url", "parse-response", "persist", "restore"):
            assert command in result.output


class TestProvidersCommand:
    """Tests for the providers command."""

    def test_lists_providers(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(main, ["--config", str(config_file), "providers"])
        assert result.exit_code == 0
        assert "google" in result.output
        assert "photos" in result.output
        assert "HMAC-SHA1" in result.output

    def test_json(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(main, ["--json", "--config", str(config_file), "providers"])
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert [row["PROVIDER"] for row in data] == ["google", "photos"]

    def test_no_config(self, runner: CliRunner):
        """Test the error when no config file is discovered."""
        result = runner.invoke(main, ["providers"])
        assert result.exit_code == 1
        assert "No OAuth provider config file found" in result.output

    def test_invalid_json(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "oauth.json"
        path.write_text("{broken")
        result = runner.invoke(main, ["--json", "--config", str(path), "providers"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["type"] == "ConfigParseError"


class TestSignCommand:
    """Tests for the sign command."""

    def test_resource_header(self, runner: CliRunner, sign_args: list[str]):
        result = runner.invoke(main, sign_args)

        assert result.exit_code == 0
        assert 'Authorization: OAuth realm="Photos", ' in result.output
        assert f'oauth_signature="{RFC_ENCODED_SIGNATURE}"' in result.output
        assert f"URL: {RFC_URL}" in result.output

    def test_json_with_base_string(self, runner: CliRunner, sign_args: list[str]):
        result = runner.invoke(main, ["--json", *sign_args, "--show-base-string"])

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["method"] == "GET"
        assert data["url"] == RFC_URL
        assert RFC_ENCODED_SIGNATURE in data["authorization"]
        assert data["base_string"].startswith("GET&http%3A%2F%2Fphotos.example.net%2Fphotos&")

    def test_params_mode(self, runner: CliRunner, sign_args: list[str]):
        result = runner.invoke(main, ["--json", *sign_args, "--params"])

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["authorization"] is None
        assert f"oauth_signature={RFC_ENCODED_SIGNATURE}" in data["url"]

    def test_unknown_provider(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main, ["--json", "--config", str(config_file), "sign", "nope", RFC_URL]
        )
        assert result.exit_code == 1
        error = json.loads(result.output)["error"]
        assert error["type"] == "ProviderNotFound"
        assert "google, photos" in error["help"]

    def test_missing_token(self, runner: CliRunner, config_file: Path):
        """Test that a resource request without a token fails to sign."""
        result = runner.invoke(main, ["--config", str(config_file), "sign", "photos", RFC_URL])
        assert result.exit_code == 1
        assert "oauth_token" in result.output

    def test_timestamp_without_nonce(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main,
            ["--config", str(config_file), "sign", "photos", RFC_URL, "--timestamp", "1"],
        )
        assert result.exit_code == 1
        assert "--nonce" in result.output

    def test_authorize_phase_not_signable(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main,
            ["--config", str(config_file), "sign", "photos", RFC_URL, "--phase", "authorize"],
        )
        assert result.exit_code == 2

    def test_request_token_phase(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main,
            [
                "--json", "--config", str(config_file),
                "sign", "google", "https://www.google.com/accounts/OAuthGetRequestToken",
                "-X", "post", "--phase", "request",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["method"] == "POST"
        assert "oauth_callback=" in data["authorization"]
        assert "scope=" in data["url"]

    def test_request_url_from_config(self, runner: CliRunner, config_file: Path):
        """Test that the request step defaults to the configured endpoint."""
        result = runner.invoke(
            main,
            ["--json", "--config", str(config_file), "sign", "google", "-X", "post", "--phase", "request"],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["url"].startswith(f"{REQUEST_TOKEN_URL}?")
        assert "oauth_callback=" in data["authorization"]

    def test_access_url_from_config(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main,
            [
                "--json", "--config", str(config_file),
                "sign", "google", "--phase", "access",
                "--token", "4/req", "--token-secret", "s", "--verifier", "v",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["url"] == ACCESS_TOKEN_URL
        assert 'oauth_verifier="v"' in data["authorization"]

    def test_resource_needs_url(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main,
            ["--config", str(config_file), "sign", "google", "--token", "t", "--token-secret", "s"],
        )
        assert result.exit_code == 1
        assert "no resource endpoint" in result.output

    def test_provider_without_endpoint(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main, ["--config", str(config_file), "sign", "photos", "--phase", "request"]
        )
        assert result.exit_code == 1
        assert "no request endpoint" in result.output


class TestAuthorizeUrlCommand:
    """Tests for the authorize-url command."""

    def test_builds_url(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main,
            ["--config", str(config_file), "authorize-url", "google", "--token", "4/abc", "--language", "fr"],
        )
        assert result.exit_code == 0
        url = result.output.strip()
        assert url.startswith(f"{AUTHORIZE_TOKEN_URL}?")
        assert "oauth_token=4%2Fabc" in url
        assert "hl=fr" in url
        assert "scope=" in url
        assert "oauth_signature" not in url

    def test_json(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main, ["--json", "--config", str(config_file), "authorize-url", "google", "--token", "t"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["url"].startswith(AUTHORIZE_TOKEN_URL)

    def test_no_authorize_endpoint(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main, ["--config", str(config_file), "authorize-url", "photos", "--token", "t"]
        )
        assert result.exit_code == 1
        assert "authorizeTokenUrl" in result.output

    def test_unknown_provider(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            main, ["--json", "--config", str(config_file), "authorize-url", "nope", "--token", "t"]
        )
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["type"] == "ProviderNotFound"


class TestParseResponseCommand:
    """Tests for the parse-response command."""

    def test_argument(self, runner: CliRunner):
        result = runner.invoke(
            main, ["--json", "parse-response", "oauth_token=a%2Fb&oauth_token_secret=c"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["data"] == {
            "oauth_token": "a/b",
            "oauth_token_secret": "c",
        }

    def test_stdin(self, runner: CliRunner):
        result = runner.invoke(main, ["parse-response"], input="oauth_token=xyz\n")
        assert result.exit_code == 0
        assert "xyz" in result.output

    def test_malformed(self, runner: CliRunner):
        result = runner.invoke(main, ["parse-response", "<html>"])
        assert result.exit_code == 1
        assert "no key=value pairs" in result.output


class TestPersistenceCommands:
    """Tests for persist and restore."""

    def test_persist(self, runner: CliRunner):
        result = runner.invoke(main, ["persist", "--token", "1/abc", "--token-secret", "s e"])
        assert result.exit_code == 0
        assert result.output.strip() == "oauth_token=1%2Fabc&oauth_token_secret=s%20e"

    def test_restore_json(self, runner: CliRunner):
        result = runner.invoke(
            main,
            ["--json", "restore", "oauth_token=1%2Fabc&oauth_token_secret=s%20e&junk=1"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["data"] == {
            "oauth_token": "1/abc",
            "oauth_token_secret": "s e",
        }


def test_rfc_signature_constant_matches_encoding():
    """Guard the encoded constant used throughout these tests."""
    assert percent_encode(RFC_SIGNATURE) == RFC_ENCODED_SIGNATURE
