from fitness_tracker.config import Config, _norm_db_url


def test_norm_db_url_sqlite_to_aiosqlite() -> None:
    assert _norm_db_url("sqlite:///test.db") == "sqlite+aiosqlite:///test.db"
    assert _norm_db_url("sqlite:///:memory:") == "sqlite+aiosqlite:///:memory:"
    # already using aiosqlite should stay untouched
    assert _norm_db_url("sqlite+aiosqlite:///test.db") == "sqlite+aiosqlite:///test.db"


def test_norm_db_url_postgres_to_asyncpg() -> None:
    assert _norm_db_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert _norm_db_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert _norm_db_url(None) is None


def test_gym_equipment_is_normalised(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("GYM_EQUIPMENT", '[" Barbell ", "Bench", ""]')
    cfg = Config()  # pyright: ignore[reportCallIssue]
    assert cfg.GYM_EQUIPMENT == ["barbell", "bench"]
    assert cfg.DATABASE_URL == "sqlite+aiosqlite:///x.db"


def test_feature_flags_parse_env(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("FF_MEAL_VISION", "off")
    monkeypatch.setenv("FF_SEED_CATALOG", "yes")
    cfg = Config()  # pyright: ignore[reportCallIssue]
    assert cfg.FF_MEAL_VISION is False
    assert cfg.FF_SEED_CATALOG is True
