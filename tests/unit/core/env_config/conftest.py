import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Без NETWORKER_* переменных и без .env в рабочей директории."""
    for key in list(os.environ):
        if key.upper().startswith("NETWORKER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
