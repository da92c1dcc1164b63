import aws_cdk as cdk
import pytest

from idp_infra.stack_config import compose
from idp_infra.stacks.base_stack import BaseStack, BaseStackConfig

from tests.helpers import BASE_SETTINGS


@pytest.fixture()
def app():
    return cdk.App()


@pytest.fixture()
def base_stack(app):
    return BaseStack(app, "dev-base", config=compose(BaseStackConfig, BASE_SETTINGS))


@pytest.fixture()
def settings():
    return {
        "region": "us-east-1",
        "account": None,
        "base": {
            "id": "dev-base",
            "cidr": "10.1.0.0/16",
            "profile": "AWS_PROFILE",
            "availability_zones": ["us-east-1a", "us-east-1b", "us-east-1c"],
        },
        "pet_apps": [
            {
                "id": "petapp-test",
                "repository": "acme/petapp",
                "owner": "admin",
                "branch": "develop",
            }
        ],
    }
