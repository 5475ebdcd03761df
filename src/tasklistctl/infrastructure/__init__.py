"""Infrastructure: SQLite storage gateway, schema, migrations, query composition."""
