from idp_infra.contrib.petapp.interfaces import PetAppBaseConfig
from idp_infra.stack_config import ConfigurationError, compose
from idp_infra.stacks.base_stack import BaseStack


def get_base_config(base: BaseStack, repository: str) -> PetAppBaseConfig:
    """Pick the fields PetApp inherits from an already constructed base stack."""
    if base is None:
        raise ConfigurationError("PetApp needs a base stack, and none has been constructed")
    handles = base.handles

    vpc = handles.vpc
    cluster = handles.ecs_cluster
    if vpc is None:
        raise ConfigurationError("Base stack exposes no VPC", field="vpc_id")
    if cluster is None:
        raise ConfigurationError("Base stack exposes no ECS cluster", field="ecs_cluster_name")

    return compose(
        PetAppBaseConfig,
        {
            "repository": repository,
            "profile": base.profile,
            "vpc_id": vpc.vpc_id,
            "public_security_group": handles.public_security_group,
            "app_security_group": handles.app_security_group,
            "public_subnets": [subnet.subnet_id for subnet in vpc.public_subnets],
            "app_subnets": [subnet.subnet_id for subnet in vpc.private_subnets],
            "ecs_cluster_name": cluster.cluster_name,
        },
    )
