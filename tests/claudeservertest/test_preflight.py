import uuid
from unittest import mock

import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from claudeserver.preflight import (
    ensure_parameter_exists,
    parameter_exists,
    put_password_parameter,
)

from .helpers import has_aws_creds, stubbed_client

PARAMETER = "/claude-server/code-server-password"
REGION = "us-east-1"


@pytest.fixture()
def ssm():
    client = stubbed_client("ssm", REGION)
    with Stubber(client) as stubber, mock.patch(
        "claudeserver.preflight.boto3.client", return_value=client
    ) as client_factory:
        yield stubber, client_factory


def _expect_found(stubber):
    stubber.add_response(
        "get_parameter",
        {
            "Parameter": {
                "Name": PARAMETER,
                "Type": "SecureString",
                "Value": "ciphertext",
                "Version": 1,
            }
        },
        expected_params={"Name": PARAMETER, "WithDecryption": False},
    )


def test_existing_parameter_returns(ssm, capsys):
    stubber, client_factory = ssm
    _expect_found(stubber)

    assert ensure_parameter_exists(PARAMETER, REGION) is None

    client_factory.assert_called_once_with("ssm", region_name=REGION)
    stubber.assert_no_pending_responses()
    assert capsys.readouterr().out == ""


def test_missing_parameter_exits_with_instructions(ssm, capsys):
    stubber, _ = ssm
    stubber.add_client_error(
        "get_parameter",
        service_error_code="ParameterNotFound",
        http_status_code=400,
        expected_params={"Name": PARAMETER, "WithDecryption": False},
    )

    with pytest.raises(SystemExit) as exc_info:
        ensure_parameter_exists(PARAMETER, REGION)

    assert exc_info.value.code == 1
    out = capsys.readouterr().out
    assert PARAMETER in out
    assert REGION in out
    assert "put-parameter" in out


def test_other_errors_propagate(ssm, capsys):
    stubber, _ = ssm
    stubber.add_client_error(
        "get_parameter",
        service_error_code="AccessDeniedException",
        http_status_code=400,
    )

    with pytest.raises(ClientError) as exc_info:
        ensure_parameter_exists(PARAMETER, REGION)

    assert exc_info.value.response["Error"]["Code"] == "AccessDeniedException"
    assert "not found" not in capsys.readouterr().out


def test_parameter_exists(ssm):
    stubber, _ = ssm
    _expect_found(stubber)
    stubber.add_client_error("get_parameter", service_error_code="ParameterNotFound")

    assert parameter_exists(PARAMETER, REGION) is True
    assert parameter_exists(PARAMETER, REGION) is False


def test_put_password_parameter(ssm):
    stubber, _ = ssm
    stubber.add_response(
        "put_parameter",
        {"Version": 3, "Tier": "Standard"},
        expected_params={
            "Name": PARAMETER,
            "Description": "code-server password for Claude Server",
            "Value": "hunter22",
            "Type": "SecureString",
            "Overwrite": True,
        },
    )

    assert put_password_parameter(PARAMETER, REGION, "hunter22", overwrite=True) == 3
    stubber.assert_no_pending_responses()


@pytest.mark.skipif(not has_aws_creds(), reason="No AWS credentials found")
def test_missing_parameter_against_aws():
    name = f"/claude-server-test/{uuid.uuid4()}"
    assert parameter_exists(name, REGION) is False
