"""AWS Lambda API access: deploying artifacts and reading function metadata."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from . import output
from .config import TargetConfig
from .errors import DeployError, FunctionNotFoundError, PlatformError

LAMBDA_API_VERSION = "2015-03-31"


def _is_not_found(error: ClientError) -> bool:
    code = error.response.get("Error", {}).get("Code")
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code == "ResourceNotFoundException" or status == 404


def create_lambda_client(config: TargetConfig):
    """
    Builds a boto3 Lambda client for the target's region.

    Empty credential fields are left unset so botocore falls back to its
    usual credential chain.
    """
    creds = config.credentials
    return boto3.client(
        "lambda",
        api_version=LAMBDA_API_VERSION,
        region_name=config.region,
        aws_access_key_id=creds.access_key_id or None,
        aws_secret_access_key=creds.secret_access_key or None,
        aws_session_token=creds.session_token or None,
    )


class LambdaPlatformClient:
    """Deploys and inspects one Lambda function through boto3."""

    def __init__(self, config: TargetConfig, client=None):
        self.config = config
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = create_lambda_client(self.config)
        return self._client

    def get_function_info(self, function_name: Optional[str]) -> Dict[str, Any]:
        """Returns the GetFunction response for function_name."""
        if not function_name:
            raise PlatformError("No function name resolved for this execution mode")
        try:
            return self.client.get_function(FunctionName=function_name)
        except ClientError as e:
            if _is_not_found(e):
                raise FunctionNotFoundError(function_name) from e
            raise PlatformError(f"GetFunction failed for {function_name}: {e}") from e
        except BotoCoreError as e:
            raise PlatformError(f"GetFunction failed for {function_name}: {e}") from e

    def _settings(self, config: TargetConfig) -> Dict[str, Any]:
        settings: Dict[str, Any] = {
            "FunctionName": config.function_name,
            "Handler": config.handler,
            "Runtime": config.runtime,
        }
        if config.role:
            settings["Role"] = config.role
        if config.timeout is not None:
            settings["Timeout"] = config.timeout
        if config.memory_size is not None:
            settings["MemorySize"] = config.memory_size
        if config.description is not None:
            settings["Description"] = config.description
        if config.environment:
            settings["Environment"] = {"Variables": dict(config.environment)}
        return settings

    def _exists(self, function_name: str) -> bool:
        try:
            self.client.get_function(FunctionName=function_name)
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise
        return True

    def deploy_artifact(self, zip_path: Path, config: TargetConfig) -> Dict[str, Any]:
        """
        Uploads zip_path as the code of config.function_name.

        An existing function gets its code and then its configuration updated;
        a missing one is created, which requires config.role.
        """
        name = config.function_name
        if not name:
            raise DeployError("No function name resolved for this execution mode")

        zip_path = Path(zip_path)
        if not zip_path.is_file():
            raise DeployError(f"Artifact {zip_path} does not exist. Run 'package' first.")
        code = zip_path.read_bytes()
        settings = self._settings(config)

        try:
            if not self._exists(name):
                if not config.role:
                    raise DeployError(
                        f"Lambda function {name} does not exist and no role is configured to create it"
                    )
                output.log(f"Creating lambda function {name} in {config.region}...")
                return self.client.create_function(
                    Code={"ZipFile": code}, Publish=config.publish, **settings
                )

            output.log(f"Updating code of lambda function {name} in {config.region}...")
            self.client.update_function_code(
                FunctionName=name, ZipFile=code, Publish=config.publish
            )
            self.client.get_waiter("function_updated").wait(FunctionName=name)

            output.log(f"Updating configuration of lambda function {name}...")
            return self.client.update_function_configuration(**settings)
        except (ClientError, BotoCoreError) as e:
            raise DeployError(f"Deploying {name} failed: {e}") from e
