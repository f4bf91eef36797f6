import base64

import pytest

from l1m.config import ENV_VARS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep settings from the developer's shell out of the tests."""
    for env_var in list(ENV_VARS.values()) + ["L1M_CONFIG_PATH"]:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def person_schema():
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "age": {"type": "number"},
        },
        "required": ["name", "age"],
    }


# Signature plus IHDR chunk of a 1x1 RGB PNG
PNG_HEADER = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
    b"\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02\x00\x00\x00\x90wS\xde"
)


@pytest.fixture
def png_base64():
    return base64.b64encode(PNG_HEADER).decode("ascii")
