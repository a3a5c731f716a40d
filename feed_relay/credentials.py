"""Bot token loading for the feed relay."""

import json

import boto3
from botocore.exceptions import ClientError

from .config import Config
from .logging_config import create_execution_logger

TOKEN_KEYS = ("token", "bot_token", "discord_token", "discord_bot_token")


def resolve_bot_token(config: Config, execution_id: str | None = None) -> str:
    """
    Return the Discord bot token.

    DISCORD_TOKEN wins; otherwise the token is read from the Secrets Manager
    secret named by DISCORD_SECRET_NAME.

    Raises:
        RuntimeError: If no token can be obtained
    """
    if config.discord_token:
        return config.discord_token

    if config.discord_secret_name:
        return get_discord_token(
            config.discord_secret_name, config.aws_region, execution_id
        )

    raise RuntimeError(
        "Missing DISCORD_TOKEN env var (or DISCORD_SECRET_NAME pointing at a secret)"
    )


def get_discord_token(
    secret_name: str, aws_region: str, execution_id: str | None = None
) -> str:
    """
    Retrieve the Discord bot token from AWS Secrets Manager.

    Supports both plain string secrets and JSON objects carrying one of
    TOKEN_KEYS. The token itself is never logged.

    Args:
        secret_name: Name of the secret in Secrets Manager
        aws_region: AWS region for Secrets Manager client
        execution_id: Execution ID for logging context

    Returns:
        The bot token

    Raises:
        RuntimeError: If the secret cannot be retrieved or holds no token
    """
    secrets_logger = create_execution_logger("secrets_manager", execution_id)

    if not secret_name or not secret_name.strip():
        raise ValueError("Secret name cannot be empty")

    try:
        secrets_logger.info(f"Retrieving Discord token from Secrets Manager: {secret_name}")
        secrets_client = boto3.client("secretsmanager", region_name=aws_region)
        response = secrets_client.get_secret_value(SecretId=secret_name)
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        secrets_logger.error(
            f"AWS Secrets Manager error retrieving {secret_name}: {error_code}"
        )
        raise RuntimeError(f"Failed to retrieve secret {secret_name}") from e

    secret_value = (response.get("SecretString") or "").strip()
    if not secret_value:
        raise RuntimeError(f"Secret {secret_name} does not contain a string value")

    try:
        secret_data = json.loads(secret_value)
    except json.JSONDecodeError:
        secrets_logger.info("Retrieved token from plain text secret")
        return secret_value

    if isinstance(secret_data, (str, int)):
        # Numeric-looking or quoted plain secrets
        return str(secret_data).strip()
    if not isinstance(secret_data, dict):
        raise RuntimeError(f"JSON secret {secret_name} must be an object")

    for key in TOKEN_KEYS:
        value = secret_data.get(key)
        if isinstance(value, str) and value.strip():
            secrets_logger.info("Retrieved token from JSON secret", secret_key=key)
            return value.strip()

    raise RuntimeError(f"No token found in JSON secret {secret_name}")
