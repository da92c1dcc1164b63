from typing import List

from idp_infra.stack_config import ConstructHandle, NonEmptyStr, StackConfig, union_of


class CommonStackConfig(StackConfig):
    owner: NonEmptyStr


class PetAppBaseConfig(StackConfig):
    profile: NonEmptyStr
    # GitHub "owner/name"
    repository: NonEmptyStr
    vpc_id: NonEmptyStr
    # ec2.ISecurityGroup
    app_security_group: ConstructHandle
    public_security_group: ConstructHandle
    public_subnets: List[NonEmptyStr]
    app_subnets: List[NonEmptyStr]
    ecs_cluster_name: NonEmptyStr


class PetAppCustomConfig(StackConfig):
    branch: NonEmptyStr


PetAppStackConfig = union_of(
    "PetAppStackConfig",
    CommonStackConfig,
    PetAppBaseConfig,
    PetAppCustomConfig,
)
