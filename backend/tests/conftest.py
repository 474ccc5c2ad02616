import os

# The app engine is built at import time, keep it off the developer's database file.
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"
os.environ["AUTO_CREATE_SCHEMA"] = "false"

import pytest
from fastapi.testclient import TestClient  # calls the FastAPI routes without running a server
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import horario_escolar.models  # noqa: F401
from horario_escolar.api.deps import get_db
from horario_escolar.api.routes import health
from horario_escolar.core.security import get_password_hash
from horario_escolar.db.base import Base
from horario_escolar.main import app
from horario_escolar.models.user import User, UserRole
from horario_escolar.schemas.timetable import SchoolLayout

DEFAULT_PASSWORD = "senha123"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db_session):
    """Insert a user straight into the database, for service-level tests."""
    counter = {"value": 0}

    def _make(role: UserRole = UserRole.direcao, name: str | None = None) -> User:
        counter["value"] += 1
        user = User(
            name=name or f"Usuário {counter['value']}",
            email=f"usuario{counter['value']}@escola.example.com",
            hashed_password=get_password_hash(DEFAULT_PASSWORD),
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def client(engine, session_factory, monkeypatch):
    monkeypatch.setattr(health, "engine", engine)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def register_user(client, *, email, role, name="Usuário Teste", password=DEFAULT_PASSWORD):
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, "role": role},
    )
    assert response.status_code == 201
    return response.json()


def login_user(client, email, password=DEFAULT_PASSWORD, role=None):
    payload = {"email": email, "password": password}
    if role is not None:
        payload["role"] = role
    response = client.post("/api/auth/login", json=payload)
    assert response.status_code == 200
    return response.json()["access_token"]


def _headers_for(client, *, email, role, name):
    register_user(client, email=email, role=role, name=name)
    token = login_user(client, email, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def editor_headers(client):
    return _headers_for(client, email="diretora@escola.example.com", role="direcao", name="Ana Diretora")


@pytest.fixture()
def professor_headers(client):
    return _headers_for(client, email="professor@escola.example.com", role="professor", name="Paulo Professor")


@pytest.fixture()
def coordination_headers(client):
    return _headers_for(client, email="coord@escola.example.com", role="coordenacao", name="Clara Coordenadora")


@pytest.fixture()
def small_layout():
    """Single group whose break sits between lessons 3 and 4."""
    return SchoolLayout.model_validate(
        {
            "grupos": [{"id": "fund2", "nome": "6º ao 8º ano"}],
            "slotsPorGrupo": {
                "fund2": [
                    {"id": 1, "label": "Aula 1", "tipo": "aula"},
                    {"id": 2, "label": "Aula 2", "tipo": "aula"},
                    {"id": 3, "label": "Aula 3", "tipo": "aula"},
                    {"id": 4, "label": "Intervalo", "tipo": "intervalo"},
                    {"id": 5, "label": "Aula 4", "tipo": "aula"},
                ]
            },
            "diasSemana": ["Segunda", "Terça"],
        }
    )
