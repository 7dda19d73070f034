from pathlib import Path

import pytest
from lambda_tasks.config import (
    DEFAULT_REGION,
    ExecutionMode,
    FixedName,
    LambdaConfigFile,
    PerModeName,
    load_config_file,
    resolve,
)


def test_resolve_without_config_file(make_target):
    target = make_target("payments")

    config = resolve(target)

    assert config.function_name == "payments"
    assert config.region == DEFAULT_REGION == "us-west-2"
    assert config.credentials.access_key_id == ""
    assert config.credentials.secret_access_key == ""
    assert config.credentials.session_token == ""
    assert config.handler == "handler.handler"
    assert config.runtime == "python3.12"


def test_resolve_per_mode_name_develop(make_target):
    target = make_target(
        "orders",
        files={
            "lambda-config.yaml": """
functionName:
  production: orders-prod
  develop: orders-dev
"""
        },
    )

    assert resolve(target).function_name == "orders-dev"
    assert resolve(target, ExecutionMode.DEVELOP).function_name == "orders-dev"


def test_resolve_per_mode_name_production(make_target):
    target = make_target(
        "orders",
        files={
            "lambda-config.yaml": """
functionName:
  production: orders-prod
  develop: orders-dev
"""
        },
    )

    config = resolve(target, ExecutionMode.PRODUCTION)

    assert config.function_name == "orders-prod"
    assert isinstance(config.function_name, str)


def test_resolve_per_mode_name_missing_mode_yields_none(make_target):
    target = make_target(
        "orders", files={"lambda-config.yaml": "functionName:\n  production: orders-prod\n"}
    )

    assert resolve(target, ExecutionMode.DEVELOP).function_name is None
    assert resolve(target, ExecutionMode.PRODUCTION).function_name == "orders-prod"


def test_resolve_fixed_name_ignores_mode(make_target):
    target = make_target("orders", files={"lambda-config.yaml": "functionName: shared-orders\n"})

    assert resolve(target, ExecutionMode.DEVELOP).function_name == "shared-orders"
    assert resolve(target, ExecutionMode.PRODUCTION).function_name == "shared-orders"


def test_resolve_empty_function_name_falls_back_to_directory(make_target):
    target = make_target("orders", files={"lambda-config.yaml": 'functionName: ""\n'})

    assert resolve(target).function_name == "orders"


def test_resolve_full_config_accepts_camel_and_snake_case(make_target):
    target = make_target(
        "billing",
        files={
            "lambda-config.yml": """
region: eu-west-1
accessKeyId: AKIA123
secret_access_key: s3cr3t
sessionToken: tok
role: arn:aws:iam::123456789012:role/billing
memorySize: 256
timeout: 30
publish: true
environment:
  STAGE: dev
"""
        },
    )

    config = resolve(target)

    assert config.region == "eu-west-1"
    assert config.credentials.access_key_id == "AKIA123"
    assert config.credentials.secret_access_key == "s3cr3t"
    assert config.credentials.session_token == "tok"
    assert config.role == "arn:aws:iam::123456789012:role/billing"
    assert config.memory_size == 256
    assert config.timeout == 30
    assert config.publish is True
    assert config.environment == {"STAGE": "dev"}


def test_resolve_numeric_and_boolean_environment_values(make_target):
    target = make_target(
        "orders",
        files={
            "lambda-config.yaml": """
functionName:
  production: orders-prod
  develop: orders-dev
region: eu-west-1
environment:
  PORT: 8080
  DEBUG: true
  RATIO: 0.5
"""
        },
    )

    assert load_config_file(target).error is None
    config = resolve(target)

    assert config.function_name == "orders-dev"
    assert config.region == "eu-west-1"
    assert config.environment == {"PORT": "8080", "DEBUG": "true", "RATIO": "0.5"}


@pytest.mark.parametrize(
    "content",
    [
        "functionName: [unclosed\n",
        "- just\n- a\n- list\n",
        "functionName: 42\n",
        "timeout: forever\n",
        "\tfunctionName: tabs\n",
    ],
)
def test_malformed_config_resolves_like_empty_config(make_target, tmp_path, content):
    broken = make_target("payments", files={"lambda-config.yaml": content})
    empty_dir = tmp_path / "empty"
    empty_dir.mkdir()
    empty = empty_dir / "payments"
    empty.mkdir()
    (empty / "lambda-config.yaml").write_text("{}\n")

    assert load_config_file(broken).error is not None
    assert resolve(broken) == resolve(empty)


def test_empty_config_file_is_valid(make_target):
    target = make_target("payments", files={"lambda-config.yaml": ""})

    load = load_config_file(target)

    assert load.error is None
    assert load.config == LambdaConfigFile()


def test_missing_config_file_reports_error(make_target):
    target = make_target("payments")

    load = load_config_file(target)

    assert load.config is None
    assert "not found" in str(load.error)
    assert load.or_empty() == LambdaConfigFile()


def test_identity_spec_variants():
    assert LambdaConfigFile().identity_spec("api") == FixedName(value="api")
    assert LambdaConfigFile(function_name="x").identity_spec("api") == FixedName(value="x")

    per_mode = LambdaConfigFile.model_validate(
        {"functionName": {"production": "p", "develop": "d"}}
    ).identity_spec("api")
    assert isinstance(per_mode, PerModeName)
    assert per_mode.resolve(ExecutionMode.PRODUCTION) == "p"
    assert per_mode.resolve(ExecutionMode.DEVELOP) == "d"


def test_orders_sample_config():
    sample = Path(__file__).parent.parent / "samples" / "orders"

    develop = resolve(sample)
    production = resolve(sample, ExecutionMode.PRODUCTION)

    assert develop.function_name == "orders-dev"
    assert production.function_name == "orders-prod"
    assert develop.region == "eu-west-1"
    assert develop.memory_size == 256
    assert develop.environment == {"STAGE": "dev"}
