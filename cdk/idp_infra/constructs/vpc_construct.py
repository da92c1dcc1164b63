from typing import List

from aws_cdk import aws_ec2 as ec2
from constructs import Construct


class VpcConstruct(Construct):

    @property
    def vpc(self) -> ec2.Vpc:
        return self._vpc

    def __init__(self,
                 scope: Construct,
                 id: str,
                 *,
                 vpc_name: str,
                 vpc_cidr: str,
                 availability_zones: List[str],
                 cidr_mask: int = 24) -> None:
        super().__init__(scope, id)

        # One public, private and database subnet per AZ
        self._vpc = ec2.Vpc(
            self, "MainVPC",
            vpc_name=vpc_name,
            ip_addresses=ec2.IpAddresses.cidr(vpc_cidr),
            availability_zones=availability_zones,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=cidr_mask
                ),
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                    cidr_mask=cidr_mask
                ),
                ec2.SubnetConfiguration(
                    name="Database",
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                    cidr_mask=cidr_mask
                )
            ],
            # NAT gateway per AZ
            nat_gateways=len(availability_zones),
            enable_dns_hostnames=True,
            enable_dns_support=True
        )
