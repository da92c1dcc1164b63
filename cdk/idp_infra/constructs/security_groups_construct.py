from aws_cdk import aws_ec2 as ec2
from constructs import Construct


def allow_from_upstream_tier(downstream: ec2.ISecurityGroup,
                             upstream: ec2.ISecurityGroup,
                             tier_name: str) -> None:
    """Open ``downstream`` to all traffic originating from ``upstream``.

    The rule's source is the upstream group itself, so it follows the group
    whatever addresses its members get.
    """
    downstream.add_ingress_rule(
        peer=upstream,
        connection=ec2.Port.all_traffic(),
        description=f"Allow all traffic from the {tier_name} tier"
    )


class TierSecurityGroupsConstruct(Construct):
    """Public, app and data security groups, each reachable only from the tier above it."""

    @property
    def public_security_group(self) -> ec2.SecurityGroup:
        return self._public_security_group

    @property
    def app_security_group(self) -> ec2.SecurityGroup:
        return self._app_security_group

    @property
    def data_security_group(self) -> ec2.SecurityGroup:
        return self._data_security_group

    def __init__(self, scope: Construct, id: str, *, vpc: ec2.IVpc, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        self._public_security_group = self._tier_security_group(
            "PublicSecurityGroup", vpc, "public"
        )
        self._public_security_group.add_ingress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=ec2.Port.tcp(80),
            description="Allow HTTP access from anywhere"
        )
        self._public_security_group.add_ingress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=ec2.Port.tcp(443),
            description="Allow HTTPS access from anywhere"
        )

        self._app_security_group = self._tier_security_group("AppSecurityGroup", vpc, "app")
        allow_from_upstream_tier(self._app_security_group, self._public_security_group, "public")

        self._data_security_group = self._tier_security_group("DataSecurityGroup", vpc, "data")
        allow_from_upstream_tier(self._data_security_group, self._app_security_group, "app")

    def _tier_security_group(self, id: str, vpc: ec2.IVpc, name: str) -> ec2.SecurityGroup:
        security_group = ec2.SecurityGroup(
            self,
            id,
            vpc=vpc,
            security_group_name=name,
            allow_all_outbound=True,
            description=f"Security Group for the {name} tier"
        )
        # Members of a tier talk to each other freely
        security_group.connections.allow_internally(
            ec2.Port.all_traffic(),
            f"Allow all traffic within the {name} tier"
        )
        return security_group
