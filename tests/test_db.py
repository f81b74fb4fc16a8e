from unittest.mock import MagicMock, patch

import clinicdesk.db as db_module


class TestGetEngine:
    def test_creates_engine(self, monkeypatch):
        monkeypatch.setattr(db_module, "_engine", None)
        with patch.object(db_module, "settings") as mock_settings:
            mock_settings.db_url = "sqlite:///:memory:"
            engine = db_module.get_engine()
            assert engine is not None
            assert db_module._engine is engine

    def test_returns_cached_engine(self, monkeypatch):
        sentinel = MagicMock()
        monkeypatch.setattr(db_module, "_engine", sentinel)
        engine = db_module.get_engine()
        assert engine is sentinel


class TestEngineOptions:
    def test_sqlite_allows_cross_thread_use(self):
        options = db_module._engine_options("sqlite:///clinicdesk.db")
        assert options == {"connect_args": {"check_same_thread": False}}

    def test_server_database_recycles_connections(self):
        options = db_module._engine_options("postgresql://clinic:secret@db/clinicdesk")
        assert options["pool_pre_ping"] is True
        assert options["pool_recycle"] == 1800


class TestGetConnection:
    def test_creates_connection(self, monkeypatch):
        monkeypatch.setattr(db_module, "_connection", None)
        mock_engine = MagicMock()
        mock_conn = MagicMock()
        mock_engine.connect.return_value = mock_conn
        with patch.object(db_module, "get_engine", return_value=mock_engine):
            conn = db_module.get_connection()
            assert conn is mock_conn

    def test_returns_cached_connection(self, monkeypatch):
        sentinel = MagicMock()
        monkeypatch.setattr(db_module, "_connection", sentinel)
        conn = db_module.get_connection()
        assert conn is sentinel


class TestCloseConnection:
    def test_closes_and_forgets(self, monkeypatch):
        conn = MagicMock()
        monkeypatch.setattr(db_module, "_connection", conn)
        db_module.close_connection()
        conn.close.assert_called_once()
        assert db_module._connection is None

    def test_noop_without_connection(self, monkeypatch):
        monkeypatch.setattr(db_module, "_connection", None)
        db_module.close_connection()
        assert db_module._connection is None


class TestAlembicConfig:
    def test_points_at_project_alembic(self):
        cfg = db_module._get_alembic_config()
        location = cfg.get_main_option("script_location")
        assert location == str(db_module.PROJECT_ROOT / "alembic")
        assert (db_module.PROJECT_ROOT / "alembic" / "env.py").is_file()

    def test_url_from_settings(self):
        with patch.object(db_module, "settings") as mock_settings:
            mock_settings.db_url = "sqlite:///from-settings.db"
            cfg = db_module._get_alembic_config()
        assert cfg.get_main_option("sqlalchemy.url") == "sqlite:///from-settings.db"

    def test_explicit_url_keeps_percent_signs(self):
        cfg = db_module._get_alembic_config("postgresql://clinic:p%40ss@db/clinicdesk")
        assert cfg.get_main_option("sqlalchemy.url") == "postgresql://clinic:p%40ss@db/clinicdesk"


class TestInitializeDb:
    @patch("clinicdesk.db.command")
    @patch("clinicdesk.db._get_alembic_config")
    def test_calls_alembic_upgrade(self, mock_config, mock_command):
        mock_cfg = MagicMock()
        mock_config.return_value = mock_cfg
        db_module.initialize_db()
        mock_config.assert_called_once_with(None)
        mock_command.upgrade.assert_called_once_with(mock_cfg, "head")

    def test_migrations_build_schema(self, tmp_path):
        from sqlalchemy import create_engine, inspect

        url = f"sqlite:///{tmp_path / 'migrated.db'}"
        db_module.initialize_db(url)

        tables = set(inspect(create_engine(url)).get_table_names())
        assert {"clinics", "invoices", "invoice_line_items", "subscriptions"} <= tables
