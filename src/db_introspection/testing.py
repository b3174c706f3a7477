"""
Standard compliance suite for introspection connectors.
Any new engine adapter should pass these tests.
"""
import pytest

from db_introspection import DatabaseSchema, IntrospectionConnector, IntrospectionError


class ConnectorComplianceSuite:
    @pytest.fixture
    def connector(self) -> IntrospectionConnector:
        """Override this fixture in subclass to return the connector under test."""
        raise NotImplementedError

    @pytest.fixture
    def schema_name(self) -> str:
        """Override to name a schema the connector can introspect."""
        raise NotImplementedError

    def test_list_schemas_contract(self, connector, schema_name):
        """Schemas come back as plain names and include the target schema."""
        schemas = connector.list_schemas()
        assert all(isinstance(name, str) for name in schemas)
        assert schema_name in schemas

    def test_introspect_contract(self, connector, schema_name):
        """Introspection returns a canonical snapshot that survives a round trip."""
        schema = connector.introspect(schema_name)
        assert isinstance(schema, DatabaseSchema)
        assert DatabaseSchema.from_json(schema.to_json()) == schema
        for table in schema.tables:
            assert schema.get_table(table.name) is table

    def test_introspect_is_deterministic(self, connector, schema_name):
        """Two reads of an unchanged schema produce the same snapshot."""
        assert connector.introspect(schema_name).fingerprint() == connector.introspect(schema_name).fingerprint()

    def test_unknown_schema_fails_or_is_empty(self, connector):
        """A missing schema never yields a partial snapshot."""
        try:
            schema = connector.introspect("schema_that_does_not_exist_xyz_123")
        except IntrospectionError:
            return
        assert schema.tables == []
