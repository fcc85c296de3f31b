import logging
from typing import List

from shared.variables import Common, Db
from .input import DeploymentConfig, SecurityBoundary, SubnetRole

logger = logging.getLogger(__name__)


class DescriptorError(ValueError):
    """A declaration references something the descriptor does not define, or contradicts itself."""

    def __init__(self, message: str, reference: str = None):
        super().__init__(message)
        self.reference = reference


def validate(config: DeploymentConfig) -> List[str]:
    """Check the configuration before any resource is declared.

    Raises DescriptorError on the first broken reference or inconsistency and
    returns the warnings that do not stop the build.
    """
    _validate_network(config)
    _validate_boundaries(config)
    _validate_placement(config)
    _validate_capacity(config)
    _validate_db_exposure(config)

    warnings = _collect_warnings(config)
    for warning in warnings:
        logger.warning(warning)
    return warnings


def _validate_network(config: DeploymentConfig):
    network = config.network
    if network.max_azs < 1:
        raise DescriptorError(f'Network must span at least one availability zone, got {network.max_azs}.')

    roles = network.effective_subnet_roles()
    if not roles:
        raise DescriptorError('Network must define at least one subnet role.')
    if len(set(roles)) != len(roles):
        raise DescriptorError(f'Network subnet roles must be unique, got {[r.value for r in roles]}.')

    if network.nat_gateways is not None:
        if network.nat_gateways < 0:
            raise DescriptorError(f'NAT gateway count cannot be negative, got {network.nat_gateways}.')
        if network.nat_gateways == 0 and SubnetRole.PRIVATE_WITH_EGRESS in roles:
            raise DescriptorError(
                f"Subnet role '{SubnetRole.PRIVATE_WITH_EGRESS.value}' needs at least one NAT gateway.",
                reference=SubnetRole.PRIVATE_WITH_EGRESS.value)


def _validate_boundaries(config: DeploymentConfig):
    names = set()
    for boundary in config.security_boundaries:
        if not boundary.name:
            raise DescriptorError('Security boundary name cannot be empty.')
        if boundary.name in names:
            raise DescriptorError(f"Security boundary '{boundary.name}' is declared more than once.",
                                  reference=boundary.name)
        names.add(boundary.name)

    for boundary in config.security_boundaries:
        for rule in boundary.rules:
            if (rule.source_cidr is None) == (rule.source_group is None):
                raise DescriptorError(
                    f"Access rule {rule!r} in security boundary '{boundary.name}' "
                    f"must have exactly one source, a CIDR or a security boundary.",
                    reference=boundary.name)
            if rule.protocol not in Common.protocols:
                raise DescriptorError(
                    f"Access rule {rule!r} in security boundary '{boundary.name}' has unsupported protocol "
                    f"'{rule.protocol}' (supported: {', '.join(Common.protocols)}).",
                    reference=boundary.name)
            if not 1 <= rule.port <= 65535:
                raise DescriptorError(
                    f"Access rule {rule!r} in security boundary '{boundary.name}' has invalid port {rule.port}.",
                    reference=boundary.name)
            if rule.source_group is not None and rule.source_group not in names:
                raise DescriptorError(
                    f"Access rule {rule!r} in security boundary '{boundary.name}' "
                    f"references unknown security boundary '{rule.source_group}'.",
                    reference=rule.source_group)


def _require_boundary(config: DeploymentConfig, owner: str, name: str) -> SecurityBoundary:
    boundary = config.boundary(name)
    if boundary is None:
        raise DescriptorError(f"{owner} references unknown security boundary '{name}'.", reference=name)
    return boundary


def _require_subnet_role(config: DeploymentConfig, owner: str, role: SubnetRole):
    roles = config.network.effective_subnet_roles()
    if role not in roles:
        raise DescriptorError(
            f"{owner} is placed in subnet role '{role.value}' which the network does not define "
            f"(defined: {', '.join(r.value for r in roles)}).",
            reference=role.value)


def _validate_placement(config: DeploymentConfig):
    database = config.database
    if not database.database_name:
        raise DescriptorError('Database name cannot be empty.')
    if not database.parameter_group_name:
        raise DescriptorError('Database parameter group name cannot be empty.')
    if not database.credentials.username:
        raise DescriptorError('Database username cannot be empty.')
    if database.credentials.secret_name and database.credentials.is_literal():
        raise DescriptorError(f"Database credentials set both secret '{database.credentials.secret_name}' "
                              f"and a literal password; set only one.",
                              reference=database.credentials.secret_name)
    _require_boundary(config, 'Database cluster', database.security_boundary)
    _require_subnet_role(config, 'Database cluster', database.subnet_role)

    bastion = config.bastion
    if bastion is None:
        return
    if not bastion.key_name:
        raise DescriptorError('Bastion host needs a key pair name.')
    _require_boundary(config, 'Bastion host', bastion.security_boundary)
    _require_subnet_role(config, 'Bastion host', bastion.subnet_role)
    if bastion.security_boundary == database.security_boundary:
        raise DescriptorError('Bastion host and database cluster cannot share a security boundary.',
                              reference=bastion.security_boundary)


def _validate_capacity(config: DeploymentConfig):
    database = config.database
    for label, value in (('minimum', database.min_capacity), ('maximum', database.max_capacity)):
        if not Db.min_capacity_bound <= value <= Db.max_capacity_bound:
            raise DescriptorError(f'Database {label} capacity {value} is outside '
                                  f'{Db.min_capacity_bound}..{Db.max_capacity_bound} capacity units.')
        if value * 2 != int(value * 2):
            raise DescriptorError(f'Database {label} capacity {value} must be a multiple of 0.5.')
    if database.min_capacity > database.max_capacity:
        raise DescriptorError(f'Database minimum capacity {database.min_capacity} '
                              f'exceeds maximum capacity {database.max_capacity}.')


def _validate_db_exposure(config: DeploymentConfig):
    database = config.database
    boundary = config.boundary(database.security_boundary)
    db_rules = [r for r in boundary.rules if r.port == database.port]

    # with a bastion, the bastion's group is the only source allowed on the database port
    if config.bastion is not None:
        allowed = config.bastion.security_boundary
        for rule in db_rules:
            if rule.source_group != allowed:
                raise DescriptorError(
                    f"Security boundary '{boundary.name}' admits {rule.source_group or rule.source_cidr} "
                    f"on database port {database.port} while a bastion host is present; "
                    f"only '{allowed}' may reach the database.",
                    reference=boundary.name)
        return

    if any(r.allows_any_ipv4() for r in db_rules) and not config.allow_public_db_access:
        raise DescriptorError(
            f"Security boundary '{boundary.name}' admits any IPv4 address on database port {database.port}; "
            f"set allow_public_db_access to expose the database publicly.",
            reference=boundary.name)


def _collect_warnings(config: DeploymentConfig) -> List[str]:
    database = config.database
    warnings = []

    if database.credentials.is_literal():
        warnings.append(f"Database password for user '{database.credentials.username}' is a literal value; "
                        f"use a Secrets Manager secret instead.")

    if config.allow_public_db_access and config.bastion is None:
        warnings.append(f'Database port {database.port} is open to any IPv4 address (allow_public_db_access).')

    if database.min_capacity == database.max_capacity:
        warnings.append(f'Database capacity is pinned at {database.min_capacity} capacity units; '
                        f'no scaling range.')

    bastion = config.bastion
    if bastion is not None:
        boundary = config.boundary(database.security_boundary)
        reachable = any(r.source_group == bastion.security_boundary and r.port == database.port
                        for r in boundary.rules)
        if not reachable:
            warnings.append(f"Security boundary '{boundary.name}' has no rule admitting "
                            f"'{bastion.security_boundary}' on port {database.port}; "
                            f"the bastion host cannot reach the database.")

    return warnings
