import logging

from aws_cdk import (
    aws_codebuild as codebuild,
    aws_ec2 as ec2,
    aws_ecr as ecr,
    aws_ecs as ecs,
    aws_elasticloadbalancingv2 as elbv2,
    aws_iam as iam,
    Fn,
    RemovalPolicy,
    Stack,
    Tags,
)
from constructs import Construct

from idp_infra.stack_config import ConfigurationError, ensure_same_app, split_repository, validate

logger = logging.getLogger(__name__)

CONTAINER_NAME = "petapp"
CONTAINER_PORT = 80


class PetAppStack(Stack):
    """Sample application running on the base stack's cluster and network.

    Builds the GitHub repository on every push to the configured branch,
    publishes the image to ECR and redeploys the Fargate service behind an
    internet-facing load balancer.
    """

    def __init__(self, scope: Construct, id: str, *, config, **kwargs):
        # Nothing is declared unless the configuration is complete and its
        # handles come from stacks that already exist in this app
        config = validate(config)
        ensure_same_app(scope, config)
        if len(config.public_subnets) == 0 or len(config.app_subnets) == 0:
            raise ConfigurationError(f"{id}: the base network exposes no subnets", field="public_subnets")
        github_owner, github_repo = split_repository(config.repository)

        super().__init__(scope, id, **kwargs)

        for key, value in (("Owner", config.owner), ("Branch", config.branch), ("Profile", config.profile)):
            Tags.of(self).add(key, value)

        # Base network, seen through its ids. The bundle carries no zone names, so the
        # zones are positional labels for the imported subnets; nothing here is zone-aware.
        self.vpc = ec2.Vpc.from_vpc_attributes(
            self, "Vpc",
            vpc_id=config.vpc_id,
            availability_zones=[Fn.select(i, Fn.get_azs()) for i in range(len(config.public_subnets))],
            public_subnet_ids=config.public_subnets,
            private_subnet_ids=config.app_subnets
        )

        self.cluster = ecs.Cluster.from_cluster_attributes(
            self, "Cluster",
            cluster_name=config.ecs_cluster_name,
            vpc=self.vpc,
            security_groups=[]
        )

        self.repository = ecr.Repository(
            self, "Repository",
            removal_policy=RemovalPolicy.DESTROY,
            empty_on_delete=True
        )

        # Service
        task_definition = ecs.FargateTaskDefinition(
            self, "TaskDefinition",
            cpu=256,
            memory_limit_mib=512
        )
        task_definition.add_container(
            CONTAINER_NAME,
            image=ecs.ContainerImage.from_ecr_repository(self.repository, tag="latest"),
            port_mappings=[ecs.PortMapping(container_port=CONTAINER_PORT)],
            logging=ecs.LogDrivers.aws_logs(stream_prefix=id)
        )

        self.service = ecs.FargateService(
            self, "Service",
            cluster=self.cluster,
            task_definition=task_definition,
            desired_count=1,
            security_groups=[config.app_security_group],
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS)
        )

        # Load balancer in the public tier
        self.load_balancer = elbv2.ApplicationLoadBalancer(
            self, "LoadBalancer",
            vpc=self.vpc,
            internet_facing=True,
            security_group=config.public_security_group,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC)
        )
        # The public tier already admits 80/443 from anywhere
        listener = self.load_balancer.add_listener("HTTPListener", port=80, open=False)
        listener.add_targets(
            "Service",
            port=CONTAINER_PORT,
            targets=[self.service],
            health_check=elbv2.HealthCheck(path="/")
        )

        # Build and deploy on push
        self.project = codebuild.Project(
            self, "Build",
            source=codebuild.Source.git_hub(
                owner=github_owner,
                repo=github_repo,
                clone_depth=1,
                report_build_status=True,
                webhook=True,
                webhook_filters=[
                    codebuild.FilterGroup.in_event_of(codebuild.EventAction.PUSH).and_branch_is(config.branch)
                ]
            ),
            environment=codebuild.BuildEnvironment(
                build_image=codebuild.LinuxBuildImage.STANDARD_7_0,
                compute_type=codebuild.ComputeType.SMALL,
                # docker build
                privileged=True
            ),
            environment_variables={
                "REPOSITORY_URI": codebuild.BuildEnvironmentVariable(value=self.repository.repository_uri),
                "ECS_CLUSTER_NAME": codebuild.BuildEnvironmentVariable(value=config.ecs_cluster_name),
                "ECS_SERVICE_NAME": codebuild.BuildEnvironmentVariable(value=self.service.service_name),
            },
            build_spec=codebuild.BuildSpec.from_object({
                "version": "0.2",
                "phases": {
                    "pre_build": {
                        "commands": [
                            "aws ecr get-login-password | docker login --username AWS --password-stdin ${REPOSITORY_URI%%/*}"
                        ]
                    },
                    "build": {
                        "commands": [
                            "docker build -t $REPOSITORY_URI:latest .",
                            "docker push $REPOSITORY_URI:latest"
                        ]
                    },
                    "post_build": {
                        "commands": [
                            "aws ecs update-service --cluster $ECS_CLUSTER_NAME --service $ECS_SERVICE_NAME --force-new-deployment"
                        ]
                    }
                }
            }),
            vpc=self.vpc,
            subnet_selection=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS),
            security_groups=[config.app_security_group]
        )
        self.repository.grant_pull_push(self.project)
        self.project.add_to_role_policy(
            iam.PolicyStatement(
                actions=["ecs:UpdateService"],
                resources=[self.service.service_arn]
            )
        )

        logger.info("Declared application stack %s (%s@%s)", id, config.repository, config.branch)
