from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from shared.variables import Vpc
from .input import NetworkParams
from .util import subnet_configuration


class AuroraVpc(Construct):

    def __init__(self, scope: Construct, network: NetworkParams) -> None:
        super().__init__(scope, Vpc.construct_id)

        kwargs = {}
        if network.subnet_roles is not None:
            kwargs['subnet_configuration'] = [subnet_configuration(role) for role in network.subnet_roles]
        if network.nat_gateways is not None:
            kwargs['nat_gateways'] = network.nat_gateways
        if network.cidr:
            kwargs['ip_addresses'] = ec2.IpAddresses.cidr(network.cidr)

        self.vpc = ec2.Vpc(self, Vpc.net_prefix, max_azs=network.max_azs,
                           enable_dns_support=True,
                           enable_dns_hostnames=True,
                           **kwargs)
