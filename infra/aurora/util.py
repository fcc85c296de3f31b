from typing import Dict, Sequence

from aws_cdk import (
    SecretValue,
    aws_ec2 as ec2,
    aws_rds as rds,
    aws_secretsmanager as secretsmanager)
from constructs import Construct

from shared.variables import Common, Vpc, Db
from .input import SubnetRole, SecurityBoundary, AccessRule, DatabaseCredentials


def subnet_selection(role: SubnetRole) -> ec2.SubnetSelection:
    return ec2.SubnetSelection(subnet_type=role.subnet_type)


def subnet_configuration(role: SubnetRole) -> ec2.SubnetConfiguration:
    suffix = role.name.lower()
    return ec2.SubnetConfiguration(name=f'{Vpc.net_prefix}_{suffix}', subnet_type=role.subnet_type)


def port_factory(rule: AccessRule) -> ec2.Port:
    if rule.protocol == Common.tcp:
        return ec2.Port.tcp(rule.port)
    if rule.protocol == Common.udp:
        return ec2.Port.udp(rule.port)
    raise ValueError(f'Unsupported protocol {rule.protocol!r} in {rule!r}.')


def peer_factory(rule: AccessRule, groups: Dict[str, ec2.SecurityGroup]) -> ec2.IPeer:
    if rule.source_group is not None:
        return groups[rule.source_group]
    if rule.allows_any_ipv4():
        return ec2.Peer.any_ipv4()
    return ec2.Peer.ipv4(rule.source_cidr)


def create_security_groups(scope: Construct, vpc: ec2.IVpc,
                           boundaries: Sequence[SecurityBoundary]) -> Dict[str, ec2.SecurityGroup]:
    """Declares every group before any rule so rules can point at any of them."""
    groups = {}
    for boundary in boundaries:
        groups[boundary.name] = ec2.SecurityGroup(scope, boundary.name, vpc=vpc,
                                                  description=boundary.description,
                                                  allow_all_outbound=boundary.allow_all_outbound)

    for boundary in boundaries:
        for rule in boundary.rules:
            groups[boundary.name].add_ingress_rule(peer_factory(rule, groups), port_factory(rule),
                                                   rule.description)
    return groups


def credentials_factory(scope: Construct, credentials: DatabaseCredentials) -> rds.Credentials:
    if credentials.secret_name:
        secret = secretsmanager.Secret.from_secret_name_v2(scope, Db.credentials_secret, credentials.secret_name)
        return rds.Credentials.from_secret(secret, credentials.username)
    if credentials.is_literal():
        return rds.Credentials.from_password(credentials.username,
                                             SecretValue.unsafe_plain_text(credentials.password))
    return rds.Credentials.from_generated_secret(credentials.username)
