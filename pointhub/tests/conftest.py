import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    # Never read a developer's real config.yaml or touch a real data dir / desktop
    monkeypatch.setenv("POINTHUB_CONFIG", str(tmp_path / "no-config.yaml"))
    monkeypatch.setenv("POINTHUB_DATA_DIR", str(tmp_path / "appdata"))
    monkeypatch.delenv("POINTHUB_DB_PATH", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("USERPROFILE", str(tmp_path / "home"))
    yield


@pytest.fixture()
def db_path(tmp_path):
    return str(tmp_path / "pointhub_test.db")


@pytest.fixture()
def store(db_path):
    """Schema initialized, no demo data."""
    from pointhub.db import open_store
    s = open_store(db_path, seed=False)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(store):
    from fastapi.testclient import TestClient
    from pointhub.api import create_app
    with TestClient(create_app(store)) as c:
        yield c


@pytest.fixture()
def make_class(store):
    from pointhub.domain.models import CreateClassRequest
    from pointhub.services import class_svc

    def _make(name="1A", description=None):
        return class_svc.create_class(store, CreateClassRequest(name=name, description=description))
    return _make


@pytest.fixture()
def make_student(store):
    from pointhub.domain.models import CreateStudentRequest
    from pointhub.services import student_svc

    def _make(class_id, name="Amy", student_number="001", points=10):
        return student_svc.create_student(
            store,
            CreateStudentRequest(name=name, student_number=student_number, points=points, class_id=class_id),
        )
    return _make


@pytest.fixture()
def make_product(store):
    from pointhub.domain.models import CreateProductRequest
    from pointhub.services import product_svc

    def _make(class_id, name="Pencil", points=5, stock=10):
        return product_svc.create_product(
            store, CreateProductRequest(name=name, points=points, stock=stock, class_id=class_id)
        )
    return _make
