class Env:
    aws_account = 'AWS_ACCOUNT'
    aws_region = 'AWS_REGION'
    stack_name = 'STACK_NAME'
    max_azs = 'MAX_AZS'
    nat_gateways = 'NAT_GATEWAYS'
    db_name = 'DB_NAME'
    db_user = 'DB_USER'
    db_pass = 'DB_PASS'
    db_secret_name = 'DB_SECRET_NAME'
    db_parameter_group = 'DB_PARAMETER_GROUP'
    db_engine_version = 'DB_ENGINE_VERSION'
    db_min_capacity = 'DB_MIN_CAPACITY'
    db_max_capacity = 'DB_MAX_CAPACITY'
    db_public_access = 'DB_PUBLIC_ACCESS'
    bastion_enabled = 'BASTION_ENABLED'
    bastion_ami = 'BASTION_AMI'
    bastion_instance_key_name = 'BASTION_INSTANCE_KEY_NAME'
    bastion_elastic_ip = 'BASTION_ELASTIC_IP'


# --- Common Project Variables ---

class Common:
    stack_name = 'MyAuroraServerlessProjectStack'
    any_ipv4 = '0.0.0.0/0'
    tcp = 'tcp'
    udp = 'udp'
    protocols = (tcp, udp)
    true_values = ('1', 'true', 'yes', 'on')


class Vpc:
    construct_id = 'Vpc'
    net_prefix = 'aurora_vpc'
    max_azs = 2
    nat_gateways = 1


class Db:
    construct_id = 'Db'
    cluster_name = 'PortalAuroraProd'
    writer_name = 'writer'
    sec_group = 'aurora_db_sec_group'
    sec_group_description = 'Aurora PostgreSQL access'
    database_name = 'envirologix'
    parameter_group = 'default.aurora-postgresql13'
    parameter_group_id = 'ParameterGroup'
    engine_version = '13.12'
    engine_major_version = '13'
    port = 5432
    min_capacity = 2
    max_capacity = 2
    min_capacity_bound = 0.5
    max_capacity_bound = 256
    user = 'postgres'
    credentials_secret = 'aurora_db_credentials'


class Bastion:
    construct_id = 'Bastion'
    sec_group = 'aurora_bastion_sec_group'
    sec_group_description = 'SSH access to the bastion host'
    sec_group_ingress_allow_port = 22
    instance_name = 'aurora_bastion_host'
    instance_class = 't2'
    instance_size = 'micro'
    elastic_ip = 'aurora_bastion_eip'
    instance_key_name = 'aurora-test'
    key_pair = 'KeyPair'


class Outputs:
    db_cluster_endpoint = 'DBClusterEndpoint'
    bastion_public_ip = 'BastionPublicIp'
