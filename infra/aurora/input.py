import os
from enum import Enum
from typing import List, Optional, Sequence

from aws_cdk import aws_ec2 as ec2
from dotenv import load_dotenv

from shared.variables import Env, Common, Vpc, Db, Bastion


class SubnetRole(Enum):
    PUBLIC = 'public'
    PRIVATE_WITH_EGRESS = 'private-with-outbound-gateway'
    ISOLATED = 'isolated'

    @property
    def subnet_type(self) -> ec2.SubnetType:
        return {
            SubnetRole.PUBLIC: ec2.SubnetType.PUBLIC,
            SubnetRole.PRIVATE_WITH_EGRESS: ec2.SubnetType.PRIVATE_WITH_EGRESS,
            SubnetRole.ISOLATED: ec2.SubnetType.PRIVATE_ISOLATED,
        }[self]


class AccessRule:
    port: int
    protocol: str
    source_cidr: Optional[str]
    source_group: Optional[str]
    description: Optional[str]

    def __init__(self, port: int, source_cidr: str = None, source_group: str = None, protocol: str = Common.tcp,
                 description: str = None):
        self.port = port
        self.protocol = protocol
        self.source_cidr = source_cidr
        self.source_group = source_group
        self.description = description

    @classmethod
    def any_ipv4(cls, port: int, description: str = None) -> 'AccessRule':
        return cls(port, source_cidr=Common.any_ipv4, description=description)

    @classmethod
    def from_group(cls, name: str, port: int, description: str = None) -> 'AccessRule':
        return cls(port, source_group=name, description=description)

    def allows_any_ipv4(self) -> bool:
        return self.source_cidr == Common.any_ipv4

    def __repr__(self):
        source = self.source_group or self.source_cidr
        return f'AccessRule({source} -> {self.protocol}/{self.port})'


class SecurityBoundary:
    name: str
    rules: List[AccessRule]
    allow_all_outbound: bool
    description: Optional[str]

    def __init__(self, name: str, rules: Sequence[AccessRule] = (), allow_all_outbound: bool = True,
                 description: str = None):
        self.name = name
        self.rules = list(rules)
        self.allow_all_outbound = allow_all_outbound
        self.description = description


class NetworkParams:
    max_azs: int
    subnet_roles: Optional[List[SubnetRole]]
    nat_gateways: Optional[int]
    cidr: Optional[str]

    def __init__(self, max_azs: int = Vpc.max_azs, subnet_roles: Sequence[SubnetRole] = None,
                 nat_gateways: int = None, cidr: str = None):
        self.max_azs = max_azs
        self.subnet_roles = list(subnet_roles) if subnet_roles is not None else None
        self.nat_gateways = nat_gateways
        self.cidr = cidr

    def effective_subnet_roles(self) -> List[SubnetRole]:
        # the engine's default split when none is given
        if self.subnet_roles is None:
            if self.nat_gateways == 0:
                return [SubnetRole.PUBLIC, SubnetRole.ISOLATED]
            return [SubnetRole.PUBLIC, SubnetRole.PRIVATE_WITH_EGRESS]
        return list(self.subnet_roles)


class BastionParams:
    key_name: str
    security_boundary: str
    instance_class: str
    instance_size: str
    machine_image_name: Optional[str]
    subnet_role: SubnetRole
    elastic_ip: bool

    def __init__(self, key_name: str, security_boundary: str = Bastion.sec_group,
                 instance_class: str = Bastion.instance_class, instance_size: str = Bastion.instance_size,
                 machine_image_name: str = None, subnet_role: SubnetRole = SubnetRole.PUBLIC,
                 elastic_ip: bool = True):
        self.key_name = key_name
        self.security_boundary = security_boundary
        self.instance_class = instance_class
        self.instance_size = instance_size
        self.machine_image_name = machine_image_name
        self.subnet_role = subnet_role
        self.elastic_ip = elastic_ip


class DatabaseCredentials:
    """Database login.

    ``secret_name`` points at an existing Secrets Manager secret holding
    ``username`` and ``password`` keys. With neither a secret name nor a
    password, the engine generates and stores a secret for ``username``.
    A literal ``password`` ends up in the template and is reported as a
    warning by validation.
    """
    username: str
    secret_name: Optional[str]
    password: Optional[str]

    def __init__(self, username: str = Db.user, secret_name: str = None, password: str = None):
        self.username = username
        self.secret_name = secret_name
        self.password = password

    def is_literal(self) -> bool:
        return self.password is not None


class DatabaseParams:
    database_name: str
    security_boundary: str
    credentials: DatabaseCredentials
    parameter_group_name: str
    engine_version: str
    engine_major_version: str
    min_capacity: float
    max_capacity: float
    subnet_role: SubnetRole
    port: int
    enable_data_api: bool

    def __init__(self, database_name: str = Db.database_name, security_boundary: str = Db.sec_group,
                 credentials: DatabaseCredentials = None, parameter_group_name: str = Db.parameter_group,
                 engine_version: str = Db.engine_version, engine_major_version: str = Db.engine_major_version,
                 min_capacity: float = Db.min_capacity, max_capacity: float = Db.max_capacity,
                 subnet_role: SubnetRole = SubnetRole.PRIVATE_WITH_EGRESS, port: int = Db.port,
                 enable_data_api: bool = True):
        self.database_name = database_name
        self.security_boundary = security_boundary
        self.credentials = credentials or DatabaseCredentials()
        self.parameter_group_name = parameter_group_name
        self.engine_version = engine_version
        self.engine_major_version = engine_major_version
        self.min_capacity = min_capacity
        self.max_capacity = max_capacity
        self.subnet_role = subnet_role
        self.port = port
        self.enable_data_api = enable_data_api


class DeploymentConfig:
    stack_name: str
    network: NetworkParams
    security_boundaries: List[SecurityBoundary]
    database: DatabaseParams
    bastion: Optional[BastionParams]
    allow_public_db_access: bool

    def __init__(self, network: NetworkParams, security_boundaries: Sequence[SecurityBoundary],
                 database: DatabaseParams, bastion: BastionParams = None, allow_public_db_access: bool = False,
                 stack_name: str = Common.stack_name):
        self.stack_name = stack_name
        self.network = network
        self.security_boundaries = list(security_boundaries)
        self.database = database
        self.bastion = bastion
        self.allow_public_db_access = allow_public_db_access

    def boundary(self, name: str) -> Optional[SecurityBoundary]:
        return next((b for b in self.security_boundaries if b.name == name), None)


def minimal_config(database: DatabaseParams = None, max_azs: int = Vpc.max_azs,
                   stack_name: str = Common.stack_name) -> DeploymentConfig:
    """Single network, database reachable from any IPv4 address, no bastion.

    Opts into ``allow_public_db_access``; nothing else in this preset would
    let a client reach the database.
    """
    database = database or DatabaseParams()
    db_boundary = SecurityBoundary(database.security_boundary,
                                   [AccessRule.any_ipv4(database.port, 'Allow PostgreSQL from any IPv4')],
                                   description=Db.sec_group_description)
    return DeploymentConfig(network=NetworkParams(max_azs=max_azs),
                            security_boundaries=[db_boundary],
                            database=database,
                            allow_public_db_access=True,
                            stack_name=stack_name)


def bastion_config(key_name: str = Bastion.instance_key_name, database: DatabaseParams = None,
                   max_azs: int = Vpc.max_azs, elastic_ip: bool = True, machine_image_name: str = None,
                   stack_name: str = Common.stack_name) -> DeploymentConfig:
    """Database in private subnets, reachable only through an SSH bastion."""
    database = database or DatabaseParams()
    bastion = BastionParams(key_name=key_name, elastic_ip=elastic_ip, machine_image_name=machine_image_name)
    bastion_boundary = SecurityBoundary(bastion.security_boundary,
                                        [AccessRule.any_ipv4(Bastion.sec_group_ingress_allow_port,
                                                             'Allow SSH from any IPv4')],
                                        description=Bastion.sec_group_description)
    db_boundary = SecurityBoundary(database.security_boundary,
                                   [AccessRule.from_group(bastion.security_boundary, database.port,
                                                          'Allow PostgreSQL from the bastion host')],
                                   description=Db.sec_group_description)
    network = NetworkParams(max_azs=max_azs,
                            subnet_roles=[SubnetRole.PUBLIC, SubnetRole.PRIVATE_WITH_EGRESS],
                            nat_gateways=Vpc.nat_gateways)
    return DeploymentConfig(network=network,
                            security_boundaries=[bastion_boundary, db_boundary],
                            database=database,
                            bastion=bastion,
                            stack_name=stack_name)


def _flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in Common.true_values


def _number(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f'{name} must be a number, got {value!r}.') from None
    return int(number) if number.is_integer() else number


def _count(name: str, default: int) -> int:
    number = _number(name, default)
    if number != int(number):
        raise ValueError(f'{name} must be a whole number, got {number}.')
    return int(number)


def load_config() -> DeploymentConfig:
    load_dotenv()

    credentials = DatabaseCredentials(username=os.getenv(Env.db_user, Db.user),
                                      secret_name=os.getenv(Env.db_secret_name),
                                      password=os.getenv(Env.db_pass))
    database = DatabaseParams(database_name=os.getenv(Env.db_name, Db.database_name),
                              credentials=credentials,
                              parameter_group_name=os.getenv(Env.db_parameter_group, Db.parameter_group),
                              engine_version=os.getenv(Env.db_engine_version, Db.engine_version),
                              min_capacity=_number(Env.db_min_capacity, Db.min_capacity),
                              max_capacity=_number(Env.db_max_capacity, Db.max_capacity))
    max_azs = _count(Env.max_azs, Vpc.max_azs)
    stack_name = os.getenv(Env.stack_name, Common.stack_name)

    if not _flag(Env.bastion_enabled, default=True):
        config = minimal_config(database=database, max_azs=max_azs, stack_name=stack_name)
        # public database access has to be asked for explicitly
        if not _flag(Env.db_public_access):
            config.allow_public_db_access = False
            config.boundary(database.security_boundary).rules = []
        return config

    config = bastion_config(key_name=os.getenv(Env.bastion_instance_key_name, Bastion.instance_key_name),
                            database=database,
                            max_azs=max_azs,
                            elastic_ip=_flag(Env.bastion_elastic_ip, default=True),
                            machine_image_name=os.getenv(Env.bastion_ami),
                            stack_name=stack_name)
    config.network.nat_gateways = _count(Env.nat_gateways, Vpc.nat_gateways)
    return config
