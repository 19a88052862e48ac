import textwrap

import pytest

from datastore_config import ConfigLoadError, DataStoreConfig, MongoConfig, load_config
from file_logger import LogLevel
from mongo_store import DataStoreError, MongoStore

CONFIG = textwrap.dedent(
    """
    logging:
      level: warning
    DataStores:
      - dataStore:
          mongo:
            uri: mongodb://localhost:27017
            timeout: 5
            databaseName: testdb
            collectionName: testcol
      - dataStore:
          redis:
            uri: redis://localhost:6379
    """
)


@pytest.fixture()
def config_dir(tmp_path):
    (tmp_path / "config.yaml").write_text(CONFIG, encoding="utf-8")
    return tmp_path


def test_load_from_directory(config_dir):
    config = load_config(config_dir)

    assert config.logging.level == "warning"
    assert config.log_level() is LogLevel.WARN
    assert len(config.data_stores) == 2
    mongo = config.first_mongo()
    assert mongo == MongoConfig(
        uri="mongodb://localhost:27017",
        timeout=5,
        database_name="testdb",
        collection_name="testcol",
    )
    assert config.data_stores[1].data_store.redis.uri == "redis://localhost:6379"
    assert config.mongo_configs() == [mongo]


def test_load_from_file_path(config_dir):
    config = load_config(config_dir / "config.yaml")

    assert config.first_mongo().database_name == "testdb"


def test_yml_extension_is_found(tmp_path):
    (tmp_path / "config.yml").write_text(CONFIG, encoding="utf-8")

    assert load_config(tmp_path).first_mongo().collection_name == "testcol"


def test_empty_file_gives_defaults(tmp_path):
    (tmp_path / "config.yaml").write_text("", encoding="utf-8")

    config = load_config(tmp_path)

    assert config == DataStoreConfig()
    assert config.first_mongo() is None
    assert config.log_level() is LogLevel.INFO


def test_missing_config(tmp_path):
    with pytest.raises(ConfigLoadError) as excinfo:
        load_config(tmp_path)

    assert excinfo.value.code == 1100
    assert isinstance(excinfo.value, DataStoreError)

    with pytest.raises(ConfigLoadError):
        load_config(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("logging: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigLoadError) as excinfo:
        load_config(tmp_path)

    assert excinfo.value.code == 1101


def test_non_mapping_document(tmp_path):
    (tmp_path / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigLoadError) as excinfo:
        load_config(tmp_path)

    assert excinfo.value.code == 1101


def test_invalid_values(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "DataStores:\n  - dataStore:\n      mongo:\n        timeout: soon\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigLoadError) as excinfo:
        load_config(tmp_path)

    assert excinfo.value.code == 1102
    assert excinfo.value.cause is not None


def test_mongo_section_builds_store_settings(config_dir):
    settings = load_config(config_dir).first_mongo().to_store_settings()

    assert settings.uri == "mongodb://localhost:27017"
    assert settings.timeout == 5
    assert settings.database_name == "testdb"
    assert settings.collection_name == "testcol"


def test_zero_timeout_falls_back_to_default():
    assert MongoConfig(timeout=0).to_store_settings().timeout == 30


def test_store_from_config(config_dir):
    store = MongoStore.from_config(load_config(config_dir).first_mongo())

    assert store.settings.collection_name == "testcol"
