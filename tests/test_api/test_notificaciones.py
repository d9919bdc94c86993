"""
Pruebas para endpoints de Notificaciones.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict, List

from database.models import NotificacionORM, UsuarioORM
from tests.conftest import assert_error_body


@pytest.fixture
def notificaciones_vet(db_session: Session, veterinario_usuario: UsuarioORM) -> List[NotificacionORM]:
    notificaciones = [
        NotificacionORM(
            id_usuario=veterinario_usuario.id,
            titulo=f"Aviso {i}",
            mensaje="Nueva cita asignada",
            tipo="CITA",
            leida=False,
        )
        for i in range(3)
    ]
    db_session.add_all(notificaciones)
    db_session.commit()
    return notificaciones


class TestNotificaciones:

    def test_listar_y_contar(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        notificaciones_vet: List[NotificacionORM]
    ):
        response = client.get("/notificaciones/", headers=auth_headers_veterinario)
        assert response.status_code == 200
        assert len(response.json()) == 3

        conteo = client.get("/notificaciones/no-leidas/conteo", headers=auth_headers_veterinario)
        assert conteo.json() == {"no_leidas": 3}

    def test_otro_usuario_no_ve_las_notificaciones(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        notificaciones_vet: List[NotificacionORM]
    ):
        response = client.get("/notificaciones/", headers=auth_headers_recepcion)
        assert response.json() == []

    def test_marcar_leida(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        notificaciones_vet: List[NotificacionORM]
    ):
        objetivo = notificaciones_vet[0].id
        response = client.put(f"/notificaciones/{objetivo}/leer", headers=auth_headers_veterinario)
        assert response.status_code == 200
        assert response.json()["leida"] is True

        no_leidas = client.get("/notificaciones/no-leidas", headers=auth_headers_veterinario).json()
        assert objetivo not in [n["id_notificacion"] for n in no_leidas]
        assert len(no_leidas) == 2

    def test_marcar_notificacion_ajena(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        notificaciones_vet: List[NotificacionORM]
    ):
        response = client.put(
            f"/notificaciones/{notificaciones_vet[0].id}/leer",
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 403)

    def test_marcar_todas_leidas(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        notificaciones_vet: List[NotificacionORM]
    ):
        response = client.put("/notificaciones/leer-todas", headers=auth_headers_veterinario)
        assert response.status_code == 200
        assert response.json()["data"] == {"actualizadas": 3}

        conteo = client.get("/notificaciones/no-leidas/conteo", headers=auth_headers_veterinario)
        assert conteo.json()["no_leidas"] == 0

    def test_eliminar(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_veterinario: Dict[str, str],
        notificaciones_vet: List[NotificacionORM]
    ):
        objetivo = notificaciones_vet[1].id
        response = client.delete(f"/notificaciones/{objetivo}", headers=auth_headers_veterinario)
        assert response.status_code == 200
        assert response.json()["soft_delete"] is False

        db_session.expire_all()
        assert db_session.get(NotificacionORM, objetivo) is None

    def test_cliente_no_tiene_notificaciones(
        self,
        client: TestClient,
        auth_headers_cliente: Dict[str, str]
    ):
        assert_error_body(client.get("/notificaciones/", headers=auth_headers_cliente), 403)
