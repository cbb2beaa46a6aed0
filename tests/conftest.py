import pytest

from hostreconcile.adapters import MellanoxNetworkAdapter, PowerShellStateQuery, PriorityVLANTagReconciler

from tests.fixtures.mock_objects import ScriptedCommandExecutor


@pytest.fixture
def executor():
    return ScriptedCommandExecutor()


@pytest.fixture
def query(executor):
    return PowerShellStateQuery(executor)


@pytest.fixture
def adapter(query):
    return MellanoxNetworkAdapter(query)


@pytest.fixture
def reconciler(adapter):
    return PriorityVLANTagReconciler(adapter)
