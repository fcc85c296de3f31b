from typing import Optional

from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from shared.variables import Bastion
from .input import BastionParams
from .util import subnet_selection


class AuroraBastion(Construct):

    def __init__(self, scope: Construct, vpc: ec2.IVpc, params: BastionParams,
                 sec_group: ec2.SecurityGroup) -> None:
        super().__init__(scope, Bastion.construct_id)

        if params.machine_image_name:
            machine_image = ec2.MachineImage.lookup(name=params.machine_image_name)
        else:
            machine_image = ec2.MachineImage.latest_amazon_linux2023()

        self.sec_group = sec_group
        self.instance = ec2.Instance(self, Bastion.instance_name,
                                     vpc=vpc,
                                     instance_type=ec2.InstanceType(
                                         f'{params.instance_class}.{params.instance_size}'),
                                     machine_image=machine_image,
                                     vpc_subnets=subnet_selection(params.subnet_role),
                                     security_group=sec_group,
                                     key_pair=ec2.KeyPair.from_key_pair_name(self, Bastion.key_pair, params.key_name))

        self.elastic_ip: Optional[ec2.CfnEIP] = None
        if params.elastic_ip:
            self.elastic_ip = ec2.CfnEIP(self, Bastion.elastic_ip, domain='vpc',
                                         instance_id=self.instance.instance_id)

    @property
    def public_ip(self) -> str:
        if self.elastic_ip is not None:
            return self.elastic_ip.attr_public_ip
        return self.instance.instance_public_ip
