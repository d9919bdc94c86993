"""
Pruebas para endpoints de Vacunas y Vacunaciones.
"""

from datetime import timedelta
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict

from database.models import PacienteORM, UsuarioORM, VacunaORM, VacunacionORM
from utils.datetime_utils import get_local_today
from tests.conftest import assert_error_body


def _registrar(client, headers, paciente, vacuna, fecha, numero_dosis=1):
    return client.post(
        "/vacunaciones/",
        json={
            "id_paciente": paciente.id,
            "id_vacuna": vacuna.id,
            "fecha_aplicacion": fecha.isoformat(),
            "numero_dosis": numero_dosis,
            "lote": "L-2291",
        },
        headers=headers
    )


class TestCatalogo:
    """Pruebas para /vacunas."""

    def test_crear_vacuna(self, client: TestClient, auth_headers_veterinario: Dict[str, str]):
        response = client.post(
            "/vacunas/",
            json={"nombre": "Antirrábica", "numero_dosis": 1, "intervalo_dias": 0},
            headers=auth_headers_veterinario
        )
        assert response.status_code == 201
        assert response.json()["especie"] is None

    def test_recepcion_no_modifica_el_catalogo(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        response = client.post("/vacunas/", json={"nombre": "Triple felina"}, headers=auth_headers_recepcion)
        assert_error_body(response, 403)


class TestVacunacion:
    """Pruebas para POST /vacunaciones/."""

    def test_primera_dosis_programa_la_siguiente(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        veterinario_usuario: UsuarioORM,
        paciente_instance: PacienteORM,
        vacuna_instance: VacunaORM
    ):
        hoy = get_local_today()
        response = _registrar(client, auth_headers_veterinario, paciente_instance, vacuna_instance, hoy)
        assert response.status_code == 201
        data = response.json()
        assert data["proxima_dosis"] == (hoy + timedelta(days=21)).isoformat()
        assert data["id_profesional"] == veterinario_usuario.id
        assert data["vacuna_nombre"] == "Polivalente canina"

    def test_ultima_dosis_sin_proxima(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        paciente_instance: PacienteORM,
        vacuna_instance: VacunaORM
    ):
        response = _registrar(
            client, auth_headers_veterinario, paciente_instance, vacuna_instance, get_local_today(), 3
        )
        assert response.status_code == 201
        assert response.json()["proxima_dosis"] is None

    def test_dosis_mayor_al_esquema(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        paciente_instance: PacienteORM,
        vacuna_instance: VacunaORM
    ):
        response = _registrar(
            client, auth_headers_veterinario, paciente_instance, vacuna_instance, get_local_today(), 4
        )
        body = assert_error_body(response, 400)
        assert "numero_dosis" in body["errors"]

    def test_fecha_futura(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        paciente_instance: PacienteORM,
        vacuna_instance: VacunaORM
    ):
        manana = get_local_today() + timedelta(days=1)
        response = _registrar(client, auth_headers_veterinario, paciente_instance, vacuna_instance, manana)
        body = assert_error_body(response, 400)
        assert "fecha_aplicacion" in body["errors"]

    def test_vacuna_inactiva(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_veterinario: Dict[str, str],
        paciente_instance: PacienteORM,
        vacuna_instance: VacunaORM
    ):
        vacuna_instance.activo = False
        db_session.commit()
        response = _registrar(
            client, auth_headers_veterinario, paciente_instance, vacuna_instance, get_local_today()
        )
        assert_error_body(response, 422)


class TestVacunacionConsultas:
    """Próximas, vencidas y carné del paciente."""

    def test_proximas_y_vencidas(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str],
        veterinario_usuario: UsuarioORM,
        paciente_instance: PacienteORM,
        vacuna_instance: VacunaORM
    ):
        hoy = get_local_today()
        proxima = VacunacionORM(
            id_paciente=paciente_instance.id,
            id_vacuna=vacuna_instance.id,
            id_profesional=veterinario_usuario.id,
            fecha_aplicacion=hoy - timedelta(days=14),
            numero_dosis=1,
            proxima_dosis=hoy + timedelta(days=7),
        )
        vencida = VacunacionORM(
            id_paciente=paciente_instance.id,
            id_vacuna=vacuna_instance.id,
            id_profesional=veterinario_usuario.id,
            fecha_aplicacion=hoy - timedelta(days=60),
            numero_dosis=1,
            proxima_dosis=hoy - timedelta(days=39),
        )
        db_session.add_all([proxima, vencida])
        db_session.commit()

        proximas = client.get("/vacunaciones/proximas", headers=auth_headers_recepcion).json()
        assert [v["id_vacunacion"] for v in proximas] == [proxima.id]

        vencidas = client.get("/vacunaciones/vencidas", headers=auth_headers_recepcion).json()
        assert [v["id_vacunacion"] for v in vencidas] == [vencida.id]

        pocas = client.get("/vacunaciones/proximas", params={"dias": 3}, headers=auth_headers_recepcion).json()
        assert pocas == []

    def test_cliente_consulta_el_carne_de_su_paciente(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        auth_headers_cliente: Dict[str, str],
        paciente_instance: PacienteORM,
        otro_paciente: PacienteORM,
        vacuna_instance: VacunaORM
    ):
        _registrar(client, auth_headers_veterinario, paciente_instance, vacuna_instance, get_local_today())

        response = client.get(f"/vacunaciones/paciente/{paciente_instance.id}", headers=auth_headers_cliente)
        assert response.status_code == 200
        assert len(response.json()) == 1

        ajeno = client.get(f"/vacunaciones/paciente/{otro_paciente.id}", headers=auth_headers_cliente)
        assert_error_body(ajeno, 403)
