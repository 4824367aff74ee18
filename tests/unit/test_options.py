import pytest
from sqlalchemy.pool import NullPool
from sqlite_plugin.connection import create_url_from_options
from sqlite_plugin.connection import get_engine_for_options
from sqlite_plugin.options import PluginOptions, parse_connection_string


def test_init_defaults():
    """Test default initialization"""
    options = PluginOptions(database='data.db')

    assert options.mode == 'ReadWriteCreate'
    assert options.cache == 'Default'
    assert options.timeout == 30
    assert options.foreign_keys is True
    assert not options.is_memory
    assert not options.uses_uri


def test_connection_string_fields():
    """Test connection string keywords map onto option fields"""
    options = PluginOptions(
        connection_string='Data Source=orders.db;Mode=ReadOnly;Cache=Shared;Default Timeout=5;Foreign Keys=False'
    )

    assert options.database == 'orders.db'
    assert options.mode == 'ReadOnly'
    assert options.cache == 'Shared'
    assert options.timeout == 5
    assert options.foreign_keys is False
    assert options.uses_uri


def test_connection_string_overrides_fields():
    options = PluginOptions(connection_string='DataSource=b.db', database='a.db', timeout=9)
    assert options.database == 'b.db'
    assert options.timeout == 9


def test_connection_string_keywords_case_and_spacing():
    parsed = parse_connection_string(' data source = "my file.db" ; MODE=readwrite ; ')
    assert parsed == {'database': 'my file.db', 'mode': 'readwrite'}


def test_bare_path_connection_string():
    assert parse_connection_string('/var/data/app.db') == {'database': '/var/data/app.db'}
    assert parse_connection_string('') == {}
    assert parse_connection_string(None) == {}


def test_filename_alias_and_pooling_ignored():
    parsed = parse_connection_string('Filename=x.db;Pooling=False;Command Timeout=3')
    assert parsed == {'database': 'x.db', 'timeout': 3}


def test_memory_database():
    options = PluginOptions(database=':memory:')
    assert options.is_memory
    assert PluginOptions(mode='memory').is_memory


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        PluginOptions()

    with pytest.raises(ValueError, match='mode'):
        PluginOptions(database='a.db', mode='Sideways')

    with pytest.raises(ValueError, match='cache'):
        PluginOptions(database='a.db', cache='Huge')

    with pytest.raises(ValueError):
        PluginOptions(database='a.db', timeout=-1)

    with pytest.raises(ValueError, match='Unsupported connection string keyword'):
        PluginOptions(connection_string='Data Source=a.db;Password=secret')

    with pytest.raises(ValueError, match='Foreign Keys'):
        PluginOptions(connection_string='Data Source=a.db;Foreign Keys=maybe')

    with pytest.raises(ValueError, match='Malformed'):
        PluginOptions(connection_string='Data Source=a.db;junk')


def test_url_plain_file():
    url = create_url_from_options(PluginOptions(database='data.db'))
    assert url.drivername == 'sqlite'
    assert url.database == 'data.db'
    assert not url.query


def test_url_memory():
    url = create_url_from_options(PluginOptions(mode='Memory'))
    assert url.database == ':memory:'


def test_url_read_only_uses_uri():
    url = create_url_from_options(PluginOptions(connection_string='Data Source=data.db;Mode=ReadOnly'))
    assert url.database == 'file:data.db'
    assert url.query['mode'] == 'ro'
    assert url.query['uri'] == 'true'
    assert 'cache' not in url.query


def test_url_shared_cache():
    url = create_url_from_options(PluginOptions(database='data.db', cache='Shared'))
    assert url.query['mode'] == 'rwc'
    assert url.query['cache'] == 'shared'


def test_engine_registry_reuses_unpooled_engine():
    options = PluginOptions(database='data.db')
    engine1 = get_engine_for_options(options)
    engine2 = get_engine_for_options(PluginOptions(database='data.db'))

    assert engine1 is engine2
    assert isinstance(engine1.pool, NullPool)
    assert get_engine_for_options(PluginOptions(database='other.db')) is not engine1
