BASE_SETTINGS = {"cidr": "10.1.0.0/16", "profile": "AWS_PROFILE"}


def security_group_ingress_sources(template, stack, security_group):
    """Sources of the standalone ingress rules attached to ``security_group``."""
    group_id = stack.resolve(security_group.security_group_id)
    return [
        resource["Properties"].get("SourceSecurityGroupId", resource["Properties"].get("CidrIp"))
        for resource in template.find_resources("AWS::EC2::SecurityGroupIngress").values()
        if resource["Properties"]["GroupId"] == group_id
    ]


def group_id(stack, security_group):
    return stack.resolve(security_group.security_group_id)
