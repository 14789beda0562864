import os

base_dir = os.path.abspath(os.path.dirname(__file__))


def _env_float(name, default):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class Config:
    """
    Settings read by app.config.from_object(). Every value can be overridden from the
    environment so the same code runs locally and in a container.
    """

    SQLALCHEMY_DATABASE_URI = os.environ.get("DARTS_DATABASE_URI") or "sqlite:///" + os.path.join(base_dir, "darts.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("DARTS_LOG_LEVEL", "INFO").upper()
    # Operator calibration for AI accuracy; the persisted Settings row wins once it exists
    AI_GLOBAL_MULTIPLIER = max(0.5, min(2.0, _env_float("DARTS_AI_MULTIPLIER", 1.0)))
    AI_SEED = _env_int("DARTS_AI_SEED")
    # Games kept in memory; the oldest unfinished game is dropped beyond this
    MAX_ACTIVE_GAMES = _env_int("DARTS_MAX_ACTIVE_GAMES") or 100
    TESTING = False


class TestConfig(Config):
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    TESTING = True
    AI_SEED = 1234
