import aws_cdk as cdk
from aws_cdk import Stack
from constructs import Construct

from shared.variables import Outputs
from .bastion import AuroraBastion
from .db import AuroraDb
from .input import DeploymentConfig
from .util import create_security_groups
from .validation import validate
from .vpc import AuroraVpc


class AuroraServerlessStack(Stack):

    def __init__(self, scope: Construct, config: DeploymentConfig, **kwargs) -> None:
        # nothing is added to the app when the configuration is broken
        warnings = validate(config)
        super().__init__(scope, config.stack_name, **kwargs)

        for i, warning in enumerate(warnings):
            cdk.Annotations.of(self).add_warning_v2(f'aurora:validation:{i}', warning)

        self.vpc = AuroraVpc(self, config.network).vpc
        self.sec_groups = create_security_groups(self, self.vpc, config.security_boundaries)

        self.bastion = None
        if config.bastion is not None:
            self.bastion = AuroraBastion(self, self.vpc, config.bastion,
                                         self.sec_groups[config.bastion.security_boundary])

        self.db = AuroraDb(self, self.vpc, config.database, self.sec_groups[config.database.security_boundary])

        if self.bastion is not None:
            cdk.CfnOutput(self, Outputs.bastion_public_ip, value=self.bastion.public_ip,
                          description='Public address of the bastion host')

        cdk.CfnOutput(self, Outputs.db_cluster_endpoint, value=self.db.cluster.cluster_endpoint.socket_address,
                      description='Aurora cluster endpoint (host:port)')


def build_app(config: DeploymentConfig, env: cdk.Environment = None, outdir: str = None) -> cdk.App:
    app = cdk.App(outdir=outdir)
    AuroraServerlessStack(app, config, env=env)
    return app
