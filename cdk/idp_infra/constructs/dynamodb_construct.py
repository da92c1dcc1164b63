from aws_cdk import aws_dynamodb as dynamodb
from constructs import Construct


class EnvironmentTablesConstruct(Construct):
    """Lookup tables for environments and environment types."""

    @property
    def environment_table(self) -> dynamodb.Table:
        return self._environment_table

    @property
    def environment_types_table(self) -> dynamodb.Table:
        return self._environment_types_table

    def __init__(self,
                 scope: Construct,
                 id: str,
                 *,
                 name_prefix: str,
                 read_capacity: int = 2,
                 write_capacity: int = 2,
                 **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        self._environment_table = self._lookup_table(
            "EnvironmentTable", f"{name_prefix}-idp-environment", "environment",
            read_capacity, write_capacity
        )
        self._environment_types_table = self._lookup_table(
            "EnvironmentTypesTable", f"{name_prefix}-idp-environment-type", "envType",
            read_capacity, write_capacity
        )

    def _lookup_table(self, id: str, table_name: str, hash_key: str,
                      read_capacity: int, write_capacity: int) -> dynamodb.Table:
        return dynamodb.Table(
            self,
            id,
            table_name=table_name,
            partition_key=dynamodb.Attribute(
                name=hash_key,
                type=dynamodb.AttributeType.STRING
            ),
            billing_mode=dynamodb.BillingMode.PROVISIONED,
            read_capacity=read_capacity,
            write_capacity=write_capacity
        )
