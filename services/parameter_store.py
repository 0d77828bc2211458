"""
AWS Systems Manager Parameter Store configuration.

Values are resolved from environment variables first (with a local .env file
loaded through python-dotenv), then from Parameter Store under the
``/kefir-tracker`` prefix, then from a default.
"""

import os
from functools import lru_cache
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError
from dotenv import load_dotenv

from utils.logging import setup_logger

logger = setup_logger(__name__)

# Load .env file for local development
load_dotenv()

_ssm_client = None

TRUTHY = {"1", "true", "yes", "on"}


def get_ssm_client():
    """Get or create SSM client with caching."""
    global _ssm_client
    if _ssm_client is None:
        _ssm_client = boto3.client("ssm")
    return _ssm_client


@lru_cache(maxsize=128)
def get_parameter(parameter_name: str, decrypt: bool = True) -> Optional[str]:
    """
    Get a parameter from AWS Parameter Store with caching.

    Args:
        parameter_name: Full parameter name, including the prefix
        decrypt: Whether to decrypt SecureString parameters

    Returns:
        Parameter value or None if not found
    """
    try:
        ssm = get_ssm_client()
        response = ssm.get_parameter(Name=parameter_name, WithDecryption=decrypt)
        logger.debug(f"Retrieved parameter {parameter_name} from Parameter Store")
        return response["Parameter"]["Value"]

    except ClientError as e:
        error_code = e.response["Error"]["Code"]

        if error_code == "ParameterNotFound":
            logger.warning(f"Parameter {parameter_name} not found in Parameter Store")
        else:
            logger.error(f"Error retrieving parameter {parameter_name}: {e}")

        return None


def env_var_name(key: str) -> str:
    """Map a parameter key such as ``table-name`` to ``TABLE_NAME``."""
    return key.replace("/", "_").replace("-", "_").upper()


class ParameterStoreConfig:
    """
    Configuration class that loads parameters from the environment or
    Parameter Store.

    Offline mode (``IS_OFFLINE=true``) never touches Parameter Store.
    """

    def __init__(self, parameter_prefix: str = "/kefir-tracker"):
        self.parameter_prefix = parameter_prefix.rstrip("/")
        self._config_cache = {}

    @property
    def is_offline(self) -> bool:
        return os.getenv("IS_OFFLINE", "").strip().lower() in TRUTHY

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key, e.g. ``table-name``
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        local_value = os.getenv(env_var_name(key))
        if local_value:
            return local_value

        if key in self._config_cache:
            return self._config_cache[key]

        value = None
        if not self.is_offline:
            value = get_parameter(f"{self.parameter_prefix}/{key}")

        if value is None:
            return default

        self._config_cache[key] = value
        return value

    def get_required(self, key: str) -> str:
        """
        Get a required configuration value.

        Raises:
            ValueError: If the value is not configured anywhere
        """
        value = self.get(key)
        if value is None:
            raise ValueError(
                f"Required parameter {self.parameter_prefix}/{key} not found"
            )
        return value

    @property
    def table_name(self) -> str:
        return self.get("table-name", "KefirTable")

    @property
    def bucket_name(self) -> Optional[str]:
        return self.get("bucket-name")

    @property
    def scheduler_group_name(self) -> str:
        return self.get("scheduler-group-name", "default")

    @property
    def stage(self) -> str:
        return self.get("stage", "dev")

    @property
    def region(self) -> str:
        return os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1"

    @property
    def account_id(self) -> Optional[str]:
        return self.get("aws-account-id")

    @property
    def dynamodb_endpoint(self) -> Optional[str]:
        """Endpoint override for DynamoDB Local; unset means the AWS default."""
        return os.getenv("DYNAMODB_ENDPOINT") or None

    @property
    def expo_access_token(self) -> Optional[str]:
        return self.get("expo-access-token")


# Global config instance
config = ParameterStoreConfig()


def clear_cache():
    """Clear parameter cache. Useful for testing or config updates."""
    get_parameter.cache_clear()
    config._config_cache.clear()
    logger.info("Parameter Store cache cleared")
