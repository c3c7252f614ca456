from __future__ import annotations

import pytest

from registrar.config import RegistryConfig, load_config
from registrar.runtime.context import Host, TxContext
from registrar.tests import BUYER, NOW, make_host


@pytest.fixture()
def cfg() -> RegistryConfig:
    return load_config(env={})


@pytest.fixture()
def host(cfg: RegistryConfig) -> Host:
    return make_host(cfg)


@pytest.fixture()
def ctx() -> TxContext:
    return TxContext.signed_by(NOW, BUYER)
