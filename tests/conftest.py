# ===============================================
# tests/conftest.py
# ===============================================

import pytest

from fakes import ScriptedModelClient


@pytest.fixture
def model_client():
    return ScriptedModelClient()
