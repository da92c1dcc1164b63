import aws_cdk as cdk
import pytest

from idp_infra.contrib.petapp.pet_app_stack import PetAppStack
from idp_infra.platform import build_platform
from idp_infra.stack_config import ConfigurationError
from idp_infra.stacks.base_stack import BaseStack


def test_base_stack_is_declared_before_application_stacks(app, settings):
    base, pet_apps = build_platform(app, settings)

    assert isinstance(base, BaseStack)
    assert [type(stack) for stack in pet_apps] == [PetAppStack]
    stack_ids = [child.node.id for child in app.node.children if isinstance(child, cdk.Stack)]
    assert stack_ids == ["dev-base", "petapp-test"]
    assert base in pet_apps[0].dependencies


def test_one_base_stack_for_many_application_stacks(app, settings):
    settings["pet_apps"].append({
        "id": "petapp-prod",
        "repository": "acme/petapp",
        "owner": "admin",
        "branch": "main",
    })
    base, pet_apps = build_platform(app, settings)

    assert [stack.node.id for stack in pet_apps] == ["petapp-test", "petapp-prod"]
    assert len([child for child in app.node.children if isinstance(child, BaseStack)]) == 1


def test_synthesizes_every_stack(app, settings):
    build_platform(app, settings)
    assembly = app.synth()
    assert sorted(stack.stack_name for stack in assembly.stacks) == ["dev-base", "petapp-test"]


def test_stacks_share_the_configured_region(app, settings):
    base, pet_apps = build_platform(app, settings)
    assert base.region == "us-east-1"
    assert pet_apps[0].region == "us-east-1"


def test_unknown_base_setting_halts_before_any_application_stack(app, settings):
    settings["base"]["flavour"] = "vanilla"
    with pytest.raises(ConfigurationError) as excinfo:
        build_platform(app, settings)
    assert excinfo.value.field == "flavour"
    assert len(app.node.children) == 0


def test_invalid_application_settings(app, settings):
    settings["pet_apps"][0]["owner"] = 7
    with pytest.raises(ConfigurationError) as excinfo:
        build_platform(app, settings)
    assert excinfo.value.field == "owner"
    assert [child.node.id for child in app.node.children if isinstance(child, cdk.Stack)] == ["dev-base"]
