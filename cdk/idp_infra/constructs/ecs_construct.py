from aws_cdk import (
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_iam as iam,
)
from constructs import Construct


class EcsClusterConstruct(Construct):

    @property
    def cluster(self) -> ecs.Cluster:
        return self._cluster

    def __init__(self, scope: Construct, id: str, *, vpc: ec2.IVpc, cluster_name: str, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        # Fails if the account already has the role; import it instead in that case
        self.service_linked_role = iam.CfnServiceLinkedRole(
            self,
            "EcsServiceLinkedRole",
            aws_service_name="ecs.amazonaws.com"
        )

        self._cluster = ecs.Cluster(
            self,
            "Cluster",
            cluster_name=cluster_name,
            vpc=vpc,
            enable_fargate_capacity_providers=True
        )
        self._cluster.node.add_dependency(self.service_linked_role)
