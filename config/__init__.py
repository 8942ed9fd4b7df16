import os

_SETTINGS_BY_ENV = {
    "dev": "config.development",
    "development": "config.development",
    "test": "config.testing",
    "testing": "config.testing",
    "prod": "config.production",
    "production": "config.production",
}


def get_settings_module() -> str:
    """Dotted path of the settings module picked by ``APP_ENV``.

    Unknown or missing values fall back to development.
    """

    env = os.getenv("APP_ENV", "development").strip().lower()
    return _SETTINGS_BY_ENV.get(env, "config.development")
