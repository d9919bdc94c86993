"""
Configuración de fixtures para pytest.

Este módulo contiene fixtures reutilizables para todos los tests.
"""

import pytest
import os
from typing import Generator, Dict, Any
from datetime import datetime, time, timedelta
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Configurar para usar base de datos en memoria para tests
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from main import app
from database.db import get_db, Base, hash_password
from database.models import (
    UsuarioORM,
    PropietarioORM,
    PacienteORM,
    CitaORM,
    ConsultaORM,
    VacunaORM,
    ProductoORM,
)
from auth import create_access_token
from utils.datetime_utils import get_local_today, get_local_naive_now

PASSWORD = "password123"


# ==================== Database Fixtures ====================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== Staff Fixtures ====================

def _crear_usuario(db_session: Session, id: str, nombre: str, email: str, rol: str) -> UsuarioORM:
    salt_hex, hash_hex = hash_password(PASSWORD)
    usuario = UsuarioORM(
        id=id,
        nombre=nombre,
        email=email,
        telefono="3001234567",
        rol=rol,
        password_salt=salt_hex,
        password_hash=hash_hex,
    )
    db_session.add(usuario)
    db_session.commit()
    db_session.refresh(usuario)
    return usuario


@pytest.fixture
def admin_usuario(db_session: Session) -> UsuarioORM:
    return _crear_usuario(
        db_session, "ffffffff-ffff-ffff-ffff-ffffffffffff", "Admin Test", "admin@clinica.test", "ADMIN"
    )


@pytest.fixture
def veterinario_usuario(db_session: Session) -> UsuarioORM:
    return _crear_usuario(
        db_session, "87654321-4321-8765-4321-876543218765", "Dra. Veterinaria Test", "vet@clinica.test", "VET"
    )


@pytest.fixture
def recepcion_usuario(db_session: Session) -> UsuarioORM:
    return _crear_usuario(
        db_session, "eeeeeeee-eeee-eeee-eeee-eeeeeeeeeeee", "Recepción Test", "recepcion@clinica.test", "RECEPCION"
    )


# ==================== Propietario / Paciente Fixtures ====================

@pytest.fixture
def propietario_data() -> Dict[str, Any]:
    """Sample propietario data for testing."""
    return {
        "nombre": "Laura Gómez",
        "documento": "1020304050",
        "email": "laura@correo.test",
        "telefono": "3104567890",
        "direccion": "Calle 10 # 20-30",
    }


@pytest.fixture
def propietario_instance(db_session: Session, propietario_data: Dict[str, Any]) -> PropietarioORM:
    """Propietario con cuenta en el portal de clientes."""
    salt_hex, hash_hex = hash_password(PASSWORD)
    propietario = PropietarioORM(
        id="12345678-1234-5678-1234-567812345678",
        password_salt=salt_hex,
        password_hash=hash_hex,
        **propietario_data,
    )
    db_session.add(propietario)
    db_session.commit()
    db_session.refresh(propietario)
    return propietario


@pytest.fixture
def paciente_instance(db_session: Session, propietario_instance: PropietarioORM) -> PacienteORM:
    paciente = PacienteORM(
        id="aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa",
        nombre="Firulais",
        especie="Perro",
        raza="Labrador",
        sexo="MACHO",
        edad_meses=36,
        peso_kg=25.5,
        id_propietario=propietario_instance.id,
    )
    db_session.add(paciente)
    db_session.commit()
    db_session.refresh(paciente)
    return paciente


@pytest.fixture
def otro_paciente(db_session: Session) -> PacienteORM:
    """Paciente de otro propietario (para probar el control de acceso)."""
    propietario = PropietarioORM(
        id="99999999-9999-9999-9999-999999999999",
        nombre="Otro Propietario",
        email="otro@correo.test",
        documento="9988776655",
    )
    db_session.add(propietario)
    db_session.commit()

    paciente = PacienteORM(
        id="bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb",
        nombre="Michi",
        especie="Gato",
        raza="Siamés",
        id_propietario=propietario.id,
    )
    db_session.add(paciente)
    db_session.commit()
    db_session.refresh(paciente)
    return paciente


# ==================== Auth Token Fixtures ====================

@pytest.fixture
def admin_token(admin_usuario: UsuarioORM) -> str:
    return create_access_token(data={"sub": admin_usuario.id, "rol": "ADMIN", "tipo": "usuario"})


@pytest.fixture
def veterinario_token(veterinario_usuario: UsuarioORM) -> str:
    return create_access_token(data={"sub": veterinario_usuario.id, "rol": "VET", "tipo": "usuario"})


@pytest.fixture
def recepcion_token(recepcion_usuario: UsuarioORM) -> str:
    return create_access_token(data={"sub": recepcion_usuario.id, "rol": "RECEPCION", "tipo": "usuario"})


@pytest.fixture
def cliente_token(propietario_instance: PropietarioORM) -> str:
    return create_access_token(data={"sub": propietario_instance.id, "rol": "CLIENTE", "tipo": "propietario"})


@pytest.fixture
def auth_headers_admin(admin_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def auth_headers_veterinario(veterinario_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {veterinario_token}"}


@pytest.fixture
def auth_headers_recepcion(recepcion_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {recepcion_token}"}


@pytest.fixture
def auth_headers_cliente(cliente_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {cliente_token}"}


# ==================== Agenda / Clínica Fixtures ====================

def proximo_dia_habil(hora: int = 10, minuto: int = 0, dias_minimos: int = 2) -> datetime:
    """Próximo lunes-viernes a la hora indicada (hora local naive)."""
    dia = get_local_today() + timedelta(days=dias_minimos)
    while dia.weekday() >= 5:
        dia += timedelta(days=1)
    return datetime.combine(dia, time(hora, minuto))


def proximo_dia_semana(weekday: int, hora: int = 10, minuto: int = 0) -> datetime:
    """Próxima fecha futura (al menos mañana) con ese día de la semana (0 = lunes)."""
    dia = get_local_today() + timedelta(days=1)
    while dia.weekday() != weekday:
        dia += timedelta(days=1)
    return datetime.combine(dia, time(hora, minuto))


@pytest.fixture
def cita_instance(
    db_session: Session,
    paciente_instance: PacienteORM,
    veterinario_usuario: UsuarioORM
) -> CitaORM:
    cita = CitaORM(
        id="cccccccc-cccc-cccc-cccc-cccccccccccc",
        fecha=proximo_dia_habil(10, 0),
        motivo="Control de rutina",
        estado="PENDIENTE",
        id_paciente=paciente_instance.id,
        id_propietario=paciente_instance.id_propietario,
        id_profesional=veterinario_usuario.id,
    )
    db_session.add(cita)
    db_session.commit()
    db_session.refresh(cita)
    return cita


@pytest.fixture
def consulta_instance(
    db_session: Session,
    paciente_instance: PacienteORM,
    veterinario_usuario: UsuarioORM
) -> ConsultaORM:
    consulta = ConsultaORM(
        id="dddddddd-dddd-dddd-dddd-dddddddddddd",
        fecha=get_local_naive_now().replace(microsecond=0),
        temperatura=38.5,
        diagnostico="Otitis externa",
        tratamiento="Limpieza y gotas óticas",
        id_paciente=paciente_instance.id,
        id_profesional=veterinario_usuario.id,
    )
    db_session.add(consulta)
    db_session.commit()
    db_session.refresh(consulta)
    return consulta


@pytest.fixture
def vacuna_instance(db_session: Session) -> VacunaORM:
    """Vacuna de tres dosis con 21 días entre dosis."""
    vacuna = VacunaORM(
        id="11111111-2222-3333-4444-555555555555",
        nombre="Polivalente canina",
        especie="Perro",
        numero_dosis=3,
        intervalo_dias=21,
    )
    db_session.add(vacuna)
    db_session.commit()
    db_session.refresh(vacuna)
    return vacuna


@pytest.fixture
def producto_instance(db_session: Session) -> ProductoORM:
    producto = ProductoORM(
        id="22222222-3333-4444-5555-666666666666",
        codigo="AMOX-500",
        nombre="Amoxicilina 500 mg",
        stock_actual=10,
        stock_minimo=3,
        costo=1000,
        precio_venta=2500,
    )
    db_session.add(producto)
    db_session.commit()
    db_session.refresh(producto)
    return producto


# ==================== Utility Functions ====================

def assert_valid_uuid(uuid_string: str) -> bool:
    """Assert that a string is a valid UUID."""
    from uuid import UUID
    try:
        UUID(str(uuid_string))
        return True
    except (ValueError, AttributeError):
        return False


def assert_datetime_format(dt_string: str) -> bool:
    """Assert that a string is a valid datetime in ISO format."""
    try:
        datetime.fromisoformat(dt_string.replace('Z', '+00:00'))
        return True
    except (ValueError, AttributeError):
        return False


def assert_error_body(response, status_code: int) -> dict:
    """Verifica el cuerpo uniforme de error y lo devuelve."""
    assert response.status_code == status_code
    body = response.json()
    assert body["status"] == status_code
    assert "message" in body
    assert "timestamp" in body
    assert "path" in body
    return body
