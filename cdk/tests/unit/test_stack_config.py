"""Unit tests for configuration composition and validation."""
from typing import List, Optional

import aws_cdk as cdk
import pytest
from aws_cdk import aws_ec2 as ec2
from pydantic import StrictInt, ValidationError

from idp_infra.stack_config import (
    ConfigurationError,
    ConstructHandle,
    NonEmptyStr,
    StackConfig,
    compose,
    ensure_same_app,
    required_fields,
    split_repository,
    union_of,
    validate,
)


class Network(StackConfig):
    vpc_id: NonEmptyStr
    subnets: List[NonEmptyStr]


class Sizing(StackConfig):
    replicas: StrictInt = 1
    label: Optional[NonEmptyStr] = None


class Firewall(StackConfig):
    security_group: ConstructHandle


Combined = union_of("Combined", Network, Sizing)


class TestUnionOf:
    def test_fields_are_the_union(self):
        assert set(Combined.model_fields) == {"vpc_id", "subnets", "replicas", "label"}

    def test_required_fields_keep_their_defaults(self):
        assert required_fields(Combined) == {"vpc_id", "subnets"}

    def test_union_is_not_a_subclass(self):
        assert not issubclass(Combined, Network)

    def test_conflicting_declarations_are_rejected(self):
        class OtherNetwork(StackConfig):
            vpc_id: int

        with pytest.raises(ConfigurationError) as excinfo:
            union_of("Broken", Network, OtherNetwork)
        assert excinfo.value.field == "vpc_id"


class TestCompose:
    def test_merges_records_and_mappings(self):
        config = compose(Combined, Network(vpc_id="vpc-1", subnets=["subnet-1"]), {"replicas": 3})
        assert config.vpc_id == "vpc-1"
        assert config.subnets == ["subnet-1"]
        assert config.replicas == 3
        assert config.label is None

    def test_missing_required_field(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compose(Combined, {"vpc_id": "vpc-1"})
        assert excinfo.value.field == "subnets"

    def test_unknown_field(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compose(Combined, {"vpc_id": "vpc-1", "subnets": [], "branch": "main"})
        assert excinfo.value.field == "branch"

    def test_field_supplied_twice(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compose(Combined, {"vpc_id": "vpc-1", "subnets": []}, {"vpc_id": "vpc-2"})
        assert excinfo.value.field == "vpc_id"

    @pytest.mark.parametrize(
        "values, field",
        [
            ({"vpc_id": 42, "subnets": []}, "vpc_id"),
            ({"vpc_id": "", "subnets": []}, "vpc_id"),
            ({"vpc_id": "vpc-1", "subnets": "subnet-1"}, "subnets"),
            ({"vpc_id": "vpc-1", "subnets": ["subnet-1", None]}, "subnets"),
            ({"vpc_id": "vpc-1", "subnets": [], "replicas": "2"}, "replicas"),
            ({"vpc_id": "vpc-1", "subnets": [], "replicas": True}, "replicas"),
        ],
    )
    def test_wrong_value_type(self, values, field):
        with pytest.raises(ConfigurationError) as excinfo:
            compose(Combined, values)
        assert excinfo.value.field == field

    def test_handle_must_be_a_construct(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compose(Firewall, {"security_group": "sg-123"})
        assert excinfo.value.field == "security_group"

    def test_imported_handle_is_accepted(self):
        stack = cdk.Stack(cdk.App(), "Stack")
        imported = ec2.SecurityGroup.from_security_group_id(stack, "Imported", "sg-0123456789abcdef0")
        assert compose(Firewall, {"security_group": imported}).security_group is imported

    def test_record_partials_supply_only_what_they_set(self):
        config = compose(Combined, Sizing(), {"vpc_id": "vpc-1", "subnets": [], "replicas": 2})
        assert config.replicas == 2

    def test_unvalidated_partials_are_checked_once_merged(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compose(Combined, Network.model_construct(vpc_id=42, subnets=[]))
        assert excinfo.value.field == "vpc_id"

    def test_records_are_frozen(self):
        config = compose(Combined, {"vpc_id": "vpc-1", "subnets": []})
        with pytest.raises(ValidationError):
            config.vpc_id = "vpc-2"

    def test_rejects_non_record_partials(self):
        with pytest.raises(ConfigurationError):
            compose(Combined, ["vpc-1"])


class TestValidate:
    def test_returns_a_validated_record(self):
        config = validate(Network.model_construct(vpc_id="vpc-1", subnets=("subnet-1",)))
        assert config.subnets == ["subnet-1"]

    def test_rejects_an_unvalidated_record(self):
        with pytest.raises(ConfigurationError) as excinfo:
            validate(Network.model_construct(vpc_id="", subnets=[]))
        assert excinfo.value.field == "vpc_id"

    def test_rejects_a_plain_mapping(self):
        with pytest.raises(ConfigurationError):
            validate({"vpc_id": "vpc-1", "subnets": []})


class TestEnsureSameApp:
    def test_handle_from_the_same_app(self):
        app = cdk.App()
        stack = cdk.Stack(app, "Producer")
        vpc = ec2.Vpc.from_vpc_attributes(stack, "Vpc", vpc_id="vpc-1", availability_zones=["us-east-1a"])
        config = Firewall(security_group=ec2.SecurityGroup(stack, "Group", vpc=vpc))
        ensure_same_app(app, config)

    def test_handle_from_another_app(self):
        stack = cdk.Stack(cdk.App(), "Producer")
        vpc = ec2.Vpc.from_vpc_attributes(stack, "Vpc", vpc_id="vpc-1", availability_zones=["us-east-1a"])
        config = Firewall(security_group=ec2.SecurityGroup(stack, "Group", vpc=vpc))
        with pytest.raises(ConfigurationError) as excinfo:
            ensure_same_app(cdk.App(), config)
        assert excinfo.value.field == "security_group"


@pytest.mark.parametrize("repository", ["acme", "acme/", "/petapp", "acme/pet/app"])
def test_split_repository_rejects_malformed_identifiers(repository):
    with pytest.raises(ConfigurationError):
        split_repository(repository)


def test_split_repository():
    assert split_repository("acme/petapp") == ("acme", "petapp")
