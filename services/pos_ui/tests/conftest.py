import os
import sys

# The app runs with its own directory on sys.path (``streamlit run app/app.py``)
# and uses flat imports; mirror that for the tests.
APP_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "app"))
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

import pytest

from db import make_engine
from storage import KeyValueStore


@pytest.fixture
def kv(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'pos_ui.db'}")
    yield KeyValueStore(engine)
    engine.dispose()
