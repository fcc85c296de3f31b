import os
import unittest
from unittest import mock

from infra.aurora.input import load_config, SubnetRole
from infra.aurora.validation import validate
from shared.variables import Env, Db, Bastion, Common

env_names = [v for k, v in vars(Env).items() if not k.startswith('_')]


def environment(**values) -> dict:
    base = {k: v for k, v in os.environ.items() if k not in env_names}
    return base | values


@mock.patch('infra.aurora.input.load_dotenv')
class Test(unittest.TestCase):

    def test_defaults_to_bastion(self, _):
        with mock.patch.dict(os.environ, environment(), clear=True):
            config = load_config()

        assert config.bastion is not None
        assert config.bastion.key_name == Bastion.instance_key_name
        assert config.allow_public_db_access is False
        assert config.network.nat_gateways == 1
        assert config.network.subnet_roles == [SubnetRole.PUBLIC, SubnetRole.PRIVATE_WITH_EGRESS]
        assert config.stack_name == Common.stack_name
        validate(config)

    def test_env_values(self, _):
        values = {
            Env.bastion_instance_key_name: 'ops-key',
            Env.bastion_elastic_ip: 'false',
            Env.db_name: 'portal',
            Env.db_user: 'admin',
            Env.db_secret_name: 'portal/db',
            Env.db_min_capacity: '0.5',
            Env.db_max_capacity: '4',
            Env.max_azs: '3',
            Env.stack_name: 'PortalDb',
        }
        with mock.patch.dict(os.environ, environment(**values), clear=True):
            config = load_config()

        assert config.bastion.key_name == 'ops-key'
        assert config.bastion.elastic_ip is False
        assert config.database.database_name == 'portal'
        assert config.database.credentials.username == 'admin'
        assert config.database.credentials.secret_name == 'portal/db'
        assert not config.database.credentials.is_literal()
        assert config.database.min_capacity == 0.5
        assert config.database.max_capacity == 4
        assert config.network.max_azs == 3
        assert config.stack_name == 'PortalDb'

    def test_minimal_is_closed_without_override(self, _):
        with mock.patch.dict(os.environ, environment(**{Env.bastion_enabled: 'false'}), clear=True):
            config = load_config()

        assert config.bastion is None
        assert config.allow_public_db_access is False
        assert config.boundary(Db.sec_group).rules == []
        validate(config)

    def test_minimal_with_public_override(self, _):
        values = {Env.bastion_enabled: 'false', Env.db_public_access: 'true'}
        with mock.patch.dict(os.environ, environment(**values), clear=True):
            config = load_config()

        rules = config.boundary(Db.sec_group).rules
        assert config.allow_public_db_access is True
        assert len(rules) == 1
        assert rules[0].allows_any_ipv4()
        assert rules[0].port == Db.port
        validate(config)

    def test_literal_password(self, _):
        with mock.patch.dict(os.environ, environment(**{Env.db_pass: 'postgres'}), clear=True):
            config = load_config()

        assert config.database.credentials.is_literal()
        assert any('literal' in w for w in validate(config))

    def test_fractional_zone_count_is_rejected(self, _):
        with mock.patch.dict(os.environ, environment(**{Env.max_azs: '2.5'}), clear=True):
            with self.assertRaises(ValueError) as ctx:
                load_config()

        assert Env.max_azs in str(ctx.exception)

    def test_fractional_nat_count_is_rejected(self, _):
        with mock.patch.dict(os.environ, environment(**{Env.nat_gateways: '1.5'}), clear=True):
            with self.assertRaises(ValueError) as ctx:
                load_config()

        assert Env.nat_gateways in str(ctx.exception)

    def test_non_numeric_capacity_names_the_variable(self, _):
        with mock.patch.dict(os.environ, environment(**{Env.db_min_capacity: 'two'}), clear=True):
            with self.assertRaises(ValueError) as ctx:
                load_config()

        assert Env.db_min_capacity in str(ctx.exception)


if __name__ == '__main__':
    unittest.main()
