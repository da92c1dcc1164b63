from aws_cdk import (
    aws_codebuild as codebuild,
    aws_dynamodb as dynamodb,
    aws_ec2 as ec2,
    aws_iam as iam,
)
from constructs import Construct

PROJECT_NAME = "infra-environment-types-dynamodb-sync"


class EnvironmentTypeSyncConstruct(Construct):
    """CodeBuild job that syncs environment types into DynamoDB on every push."""

    @property
    def project(self) -> codebuild.Project:
        return self._project

    def __init__(self,
                 scope: Construct,
                 id: str,
                 *,
                 vpc: ec2.IVpc,
                 security_group: ec2.ISecurityGroup,
                 table: dynamodb.ITable,
                 github_owner: str,
                 github_repo: str,
                 branch: str = "main",
                 **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        service_role = iam.Role(
            self, "ServiceRole",
            role_name=f"codebuild-service-role-{PROJECT_NAME}",
            assumed_by=iam.ServicePrincipal("codebuild.amazonaws.com"),
            description="IAM role for the environment types sync job"
        )

        # Permission 1: logs, artifacts and the network interfaces CodeBuild needs inside a VPC
        iam.ManagedPolicy(
            self, "ServicePolicy",
            roles=[service_role],
            statements=[
                iam.PolicyStatement(
                    actions=[
                        "cloudwatch:*",
                        "logs:CreateLogGroup",
                        "logs:CreateLogStream",
                        "logs:PutLogEvents",
                        "s3:PutObject",
                        "s3:GetObject",
                        "s3:GetObjectVersion",
                        "s3:GetBucketAcl",
                        "s3:GetBucketLocation",
                        "ec2:CreateNetworkInterface",
                        "ec2:DescribeDhcpOptions",
                        "ec2:DescribeNetworkInterfaces",
                        "ec2:DeleteNetworkInterface",
                        "ec2:DescribeSubnets",
                        "ec2:DescribeSecurityGroups",
                        "ec2:DescribeVpcs",
                        "ec2:CreateNetworkInterfacePermission",
                    ],
                    resources=["*"]
                )
            ]
        )

        # Permission 2: DynamoDB
        service_role.add_managed_policy(
            iam.ManagedPolicy.from_aws_managed_policy_name("AmazonDynamoDBFullAccess")
        )

        self._project = codebuild.Project(
            self,
            "Project",
            project_name=PROJECT_NAME,
            role=service_role,
            source=codebuild.Source.git_hub(
                owner=github_owner,
                repo=github_repo,
                # Only get the latest revision
                clone_depth=1,
                fetch_submodules=True,
                report_build_status=True,
                webhook=True,
                webhook_filters=[
                    codebuild.FilterGroup.in_event_of(codebuild.EventAction.PUSH).and_branch_is(branch)
                ]
            ),
            environment=codebuild.BuildEnvironment(
                build_image=codebuild.LinuxBuildImage.STANDARD_5_0,
                compute_type=codebuild.ComputeType.SMALL,
                privileged=False
            ),
            environment_variables={
                "DYNAMODB_TABLE_NAME": codebuild.BuildEnvironmentVariable(value=table.table_name)
            },
            build_spec=codebuild.BuildSpec.from_object({
                "version": "0.2",
                "phases": {
                    "install": {
                        "runtime-versions": {"nodejs": 14}
                    },
                    "pre_build": {
                        "commands": [
                            "echo Installing dependencies",
                            "npm install"
                        ]
                    },
                    "build": {
                        "commands": [
                            "echo Running synchronization script",
                            "npx ts-node ./scripts/syncEnvType.ts"
                        ]
                    }
                }
            }),
            vpc=vpc,
            subnet_selection=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS),
            security_groups=[security_group]
        )
        self._project.node.add_dependency(table)
