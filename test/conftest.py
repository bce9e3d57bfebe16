from __future__ import annotations

from test import pytest_conf

_IS_SYNC = True

pytest_collection_modifyitems = pytest_conf.pytest_collection_modifyitems
