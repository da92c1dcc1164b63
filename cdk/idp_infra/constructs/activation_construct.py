from aws_cdk import aws_ec2 as ec2
from constructs import Construct

AMAZON_LINUX_2_AMI_PARAMETER = "/aws/service/ami-amazon-linux-latest/amzn2-ami-hvm-x86_64-gp2"


class ActivationInstanceConstruct(Construct):
    """Always-on instance that lifts a new account's concurrent ECS task limit.

    Until an account has launched an EC2 instance, starting more than two
    ECS tasks fails with "You've reached the limit on the number of tasks
    you can run concurrently".
    """

    @property
    def instance(self) -> ec2.Instance:
        return self._instance

    def __init__(self,
                 scope: Construct,
                 id: str,
                 *,
                 vpc: ec2.IVpc,
                 security_group: ec2.ISecurityGroup,
                 **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        self._instance = ec2.Instance(
            self,
            "ActivationInstance",
            vpc=vpc,
            # Free tier; use t3.micro where t2.micro is not offered
            instance_type=ec2.InstanceType("t2.micro"),
            machine_image=ec2.MachineImage.from_ssm_parameter(AMAZON_LINUX_2_AMI_PARAMETER),
            vpc_subnets=ec2.SubnetSelection(subnets=[vpc.private_subnets[0]]),
            security_group=security_group,
            associate_public_ip_address=False
        )
