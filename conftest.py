import pytest

from collective_signature import CollectiveBlindSignature
from gost_params import generate_domain_parameters


@pytest.fixture(scope="session")
def params64():
    return generate_domain_parameters(64)


@pytest.fixture
def scheme(params64):
    return CollectiveBlindSignature(params64)


@pytest.fixture
def key_pairs(scheme):
    return [scheme.issue_key_pair() for _ in range(3)]
