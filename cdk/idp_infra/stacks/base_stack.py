import logging
from dataclasses import dataclass
from typing import List, Optional

from aws_cdk import (
    aws_dynamodb as dynamodb,
    aws_ec2 as ec2,
    aws_ecs as ecs,
    Stack,
    Tags,
)
from constructs import Construct
from pydantic import Field, StrictInt

from idp_infra.constructs.activation_construct import ActivationInstanceConstruct
from idp_infra.constructs.codebuild_construct import EnvironmentTypeSyncConstruct
from idp_infra.constructs.dynamodb_construct import EnvironmentTablesConstruct
from idp_infra.constructs.ecs_construct import EcsClusterConstruct
from idp_infra.constructs.security_groups_construct import TierSecurityGroupsConstruct
from idp_infra.constructs.vpc_construct import VpcConstruct
from idp_infra.stack_config import (
    ConfigurationError,
    NonEmptyStr,
    StackConfig,
    split_repository,
    validate,
)

logger = logging.getLogger(__name__)


class BaseStackConfig(StackConfig):
    cidr: NonEmptyStr
    profile: NonEmptyStr
    availability_zones: List[NonEmptyStr] = Field(default_factory=lambda: ["us-east-1a", "us-east-1b", "us-east-1c"])
    subnet_cidr_mask: StrictInt = 24
    cluster_name: NonEmptyStr = "main"
    table_read_capacity: StrictInt = 2
    table_write_capacity: StrictInt = 2
    # GitHub "owner/name" holding the environment types; no sync job without it
    sync_repository: Optional[NonEmptyStr] = None
    sync_branch: NonEmptyStr = "main"


@dataclass(frozen=True)
class BaseStackHandles:
    """Outputs of the base stack that other stacks may build on."""
    vpc: ec2.IVpc
    public_security_group: ec2.ISecurityGroup
    app_security_group: ec2.ISecurityGroup
    data_security_group: ec2.ISecurityGroup
    ecs_cluster: ecs.ICluster
    dynamodb_table: dynamodb.ITable


class BaseStack(Stack):
    """Shared network, security tiers, ECS cluster and lookup tables."""

    @property
    def handles(self) -> BaseStackHandles:
        if self._handles is None:
            raise ConfigurationError(f"Base stack '{self.node.id}' has not finished construction")
        return self._handles

    def __init__(self, scope: Construct, id: str, *, config: BaseStackConfig, **kwargs):
        config = validate(config)
        sync_source = None
        if config.sync_repository:
            sync_source = split_repository(config.sync_repository, field="sync_repository")

        super().__init__(scope, id, **kwargs)
        self._handles = None

        self.profile = config.profile
        Tags.of(self).add("Profile", config.profile)

        # Network Layer
        self.vpc_construct = VpcConstruct(
            self, "VpcConstruct",
            vpc_name=f"{id}-main",
            vpc_cidr=config.cidr,
            availability_zones=config.availability_zones,
            cidr_mask=config.subnet_cidr_mask
        )
        self.vpc: ec2.Vpc = self.vpc_construct.vpc

        # Security tiers: public -> app -> data
        self.security_groups = TierSecurityGroupsConstruct(self, "SecurityGroups", vpc=self.vpc)
        self.public_security_group = self.security_groups.public_security_group
        self.app_security_group = self.security_groups.app_security_group
        self.data_security_group = self.security_groups.data_security_group

        # Compute
        self.ecs_construct = EcsClusterConstruct(
            self, "EcsConstruct",
            vpc=self.vpc,
            cluster_name=config.cluster_name
        )
        self.ecs_cluster = self.ecs_construct.cluster

        # Lookup tables
        self.tables = EnvironmentTablesConstruct(
            self, "EnvironmentTables",
            name_prefix=id,
            read_capacity=config.table_read_capacity,
            write_capacity=config.table_write_capacity
        )
        self.dynamodb_table = self.tables.environment_table
        self.environment_types_table = self.tables.environment_types_table

        if sync_source:
            owner, repo = sync_source
            self.environment_type_sync = EnvironmentTypeSyncConstruct(
                self, "EnvironmentTypeSync",
                vpc=self.vpc,
                security_group=self.app_security_group,
                table=self.environment_types_table,
                github_owner=owner,
                github_repo=repo,
                branch=config.sync_branch
            )
        else:
            self.environment_type_sync = None
            logger.warning("%s: no sync_repository configured, skipping the environment type sync job", id)

        self.activation = ActivationInstanceConstruct(
            self, "Activation",
            vpc=self.vpc,
            security_group=self.app_security_group
        )

        self._handles = BaseStackHandles(
            vpc=self.vpc,
            public_security_group=self.public_security_group,
            app_security_group=self.app_security_group,
            data_security_group=self.data_security_group,
            ecs_cluster=self.ecs_cluster,
            dynamodb_table=self.dynamodb_table,
        )
        logger.info("Declared base stack %s (%s)", id, config.cidr)
