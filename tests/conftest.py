import pytest

from branchsource.scm import RepositoryRef

from fakes import FakeConnector, make_yolo_connector


@pytest.fixture
def yolo() -> RepositoryRef:
    return RepositoryRef("cloudbeers", "yolo")


@pytest.fixture
def yolo_connector() -> FakeConnector:
    return make_yolo_connector()
