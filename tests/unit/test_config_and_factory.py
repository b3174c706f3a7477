import pytest
import yaml

from db_introspection import (
    ConnectorProfile,
    MysqlConnector,
    SqliteConnector,
    UnsupportedEngineError,
    get_profile,
    load_profiles,
    make_connector,
    make_engine,
)
from db_introspection.factory import connector_class
from db_introspection.settings import Settings


@pytest.fixture
def profiles_file(tmp_path):
    path = tmp_path / "datasources.yaml"
    path.write_text(yaml.safe_dump([
        {"id": "warehouse", "engine": "postgres", "sqlalchemy_url": "postgresql://u:p@db/warehouse",
         "exclude_schemas": ["pg_catalog", "information_schema"]},
        {"id": "local", "engine": "sqlite", "sqlalchemy_url": "sqlite:///:memory:", "statement_timeout_ms": 500},
    ]))
    return path


def test_load_profiles_from_yaml(profiles_file):
    # Validates profile loading because connectors are built from profiles.
    # Act
    profiles = load_profiles(profiles_file, settings=Settings(STATEMENT_TIMEOUT_MS=1234))

    # Assert
    assert set(profiles) == {"warehouse", "local"}
    warehouse = get_profile(profiles, "warehouse")
    assert warehouse.exclude_schemas == ["pg_catalog", "information_schema"]
    assert warehouse.statement_timeout_ms == 1234
    assert profiles["local"].statement_timeout_ms == 500
    assert profiles["local"].exclude_schemas == []


def test_profiles_path_comes_from_environment(profiles_file, monkeypatch):
    monkeypatch.setenv("INTROSPECTION_PROFILES", str(profiles_file))

    assert "local" in load_profiles()


def test_missing_profiles_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_profiles(tmp_path / "nope.yaml")


def test_profiles_file_must_be_a_list(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("id: warehouse\n")

    with pytest.raises(ValueError):
        load_profiles(path)


def test_unknown_profile_id_raises(profiles_file):
    with pytest.raises(KeyError, match="missing"):
        get_profile(load_profiles(profiles_file), "missing")


def test_connector_class_by_engine_tag():
    assert connector_class("SQLite") is SqliteConnector
    assert connector_class("mariadb") is MysqlConnector
    with pytest.raises(UnsupportedEngineError) as exc:
        connector_class("oracle")
    assert exc.value.details == {"engine": "oracle"}


def test_make_connector_rejects_unsupported_engine():
    # Validates early rejection because an unknown engine has no catalog queries.
    profile = ConnectorProfile(id="legacy", engine="db2", sqlalchemy_url="db2://x")

    with pytest.raises(UnsupportedEngineError):
        make_connector(profile)


def test_make_engine_for_sqlite():
    engine = make_engine(ConnectorProfile(id="local", engine="sqlite", sqlalchemy_url="sqlite:///:memory:"))
    try:
        assert engine.dialect.name == "sqlite"
    finally:
        engine.dispose()


def test_make_connector_passes_exclusions():
    profile = ConnectorProfile(
        id="local", engine="sqlite", sqlalchemy_url="sqlite:///:memory:", exclude_schemas=["temp"],
    )

    with make_connector(profile) as connector:
        assert isinstance(connector, SqliteConnector)
        assert connector.exclude_schemas == {"temp"}
        assert connector.connection.dialect == "sqlite"
