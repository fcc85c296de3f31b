from aws_cdk import (
    aws_ec2 as ec2,
    aws_rds as rds)
from constructs import Construct

from shared.variables import Db
from .input import DatabaseParams
from .util import subnet_selection, credentials_factory


class AuroraDb(Construct):
    """Aurora PostgreSQL cluster with a single Serverless v2 writer."""

    def __init__(self, scope: Construct, vpc: ec2.IVpc, params: DatabaseParams,
                 sec_group: ec2.SecurityGroup) -> None:
        super().__init__(scope, Db.construct_id)

        engine = rds.DatabaseClusterEngine.aurora_postgres(
            version=rds.AuroraPostgresEngineVersion.of(params.engine_version, params.engine_major_version))

        # parameter group must already exist in the account
        parameter_group = rds.ParameterGroup.from_parameter_group_name(self, Db.parameter_group_id,
                                                                        params.parameter_group_name)

        self.sec_group = sec_group
        self.cluster = rds.DatabaseCluster(self, Db.cluster_name,
                                           engine=engine,
                                           vpc=vpc,
                                           vpc_subnets=subnet_selection(params.subnet_role),
                                           security_groups=[sec_group],
                                           default_database_name=params.database_name,
                                           parameter_group=parameter_group,
                                           credentials=credentials_factory(self, params.credentials),
                                           port=params.port,
                                           serverless_v2_min_capacity=params.min_capacity,
                                           serverless_v2_max_capacity=params.max_capacity,
                                           writer=rds.ClusterInstance.serverless_v2(Db.writer_name),
                                           enable_data_api=params.enable_data_api)
