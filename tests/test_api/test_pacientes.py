"""
Pruebas para endpoints de Pacientes e historial clínico.

Las pruebas cubren:
- Alta de pacientes (propietario activo, microchip único)
- Validación de campos
- Acceso del cliente solo a sus pacientes
- Historial clínico completo
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict

from database.models import (
    CitaORM,
    ConsultaORM,
    PacienteORM,
    PropietarioORM,
    PrescripcionORM,
    ItemPrescripcionORM,
)
from tests.conftest import assert_error_body


class TestPacienteCreation:
    """Pruebas para POST /pacientes/."""

    def test_crear_paciente_exitoso(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        propietario_instance: PropietarioORM
    ):
        response = client.post(
            "/pacientes/",
            json={
                "nombre": "Luna",
                "especie": "Gato",
                "sexo": "HEMBRA",
                "edad_meses": 8,
                "peso_kg": 3.2,
                "microchip": "985112003456789",
                "id_propietario": propietario_instance.id,
            },
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201
        data = response.json()
        assert data["nombre"] == "Luna"
        assert data["sexo"] == "HEMBRA"
        assert data["propietario_nombre"] == propietario_instance.nombre

    def test_microchip_duplicado(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM
    ):
        paciente_instance.microchip = "985112000000001"
        db_session.commit()

        response = client.post(
            "/pacientes/",
            json={
                "nombre": "Clon",
                "especie": "Perro",
                "microchip": "985112000000001",
                "id_propietario": paciente_instance.id_propietario,
            },
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 409)

    def test_propietario_inactivo(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str],
        propietario_instance: PropietarioORM
    ):
        propietario_instance.activo = False
        db_session.commit()

        response = client.post(
            "/pacientes/",
            json={"nombre": "Rocky", "especie": "Perro", "id_propietario": propietario_instance.id},
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 422)

    def test_peso_negativo(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        propietario_instance: PropietarioORM
    ):
        response = client.post(
            "/pacientes/",
            json={"nombre": "Rocky", "especie": "Perro", "peso_kg": -2, "id_propietario": propietario_instance.id},
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 400)
        assert "peso_kg" in body["errors"]


class TestPacienteAcceso:
    """Un cliente solo ve sus propios pacientes."""

    def test_cliente_ve_su_paciente(
        self,
        client: TestClient,
        auth_headers_cliente: Dict[str, str],
        paciente_instance: PacienteORM
    ):
        response = client.get(f"/pacientes/{paciente_instance.id}", headers=auth_headers_cliente)
        assert response.status_code == 200
        assert response.json()["nombre"] == "Firulais"

    def test_cliente_no_ve_paciente_ajeno(
        self,
        client: TestClient,
        auth_headers_cliente: Dict[str, str],
        otro_paciente: PacienteORM
    ):
        response = client.get(f"/pacientes/{otro_paciente.id}", headers=auth_headers_cliente)
        assert_error_body(response, 403)

    def test_cliente_no_lista_todos_los_pacientes(
        self,
        client: TestClient,
        auth_headers_cliente: Dict[str, str],
        paciente_instance: PacienteORM
    ):
        response = client.get("/pacientes/", headers=auth_headers_cliente)
        assert_error_body(response, 403)

    def test_borrado_logico_oculta_del_listado(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM
    ):
        response = client.delete(f"/pacientes/{paciente_instance.id}", headers=auth_headers_recepcion)
        assert response.status_code == 200

        listado = client.get("/pacientes/", headers=auth_headers_recepcion).json()
        assert listado["pagination"]["total_items"] == 0

        inactivos = client.get("/pacientes/", params={"solo_activos": False}, headers=auth_headers_recepcion).json()
        assert inactivos["pagination"]["total_items"] == 1


class TestHistorialClinico:
    """Pruebas para GET /pacientes/{id}/historial."""

    def test_historial_completo(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_veterinario: Dict[str, str],
        cita_instance: CitaORM,
        consulta_instance: ConsultaORM,
        paciente_instance: PacienteORM
    ):
        prescripcion = PrescripcionORM(id_consulta=consulta_instance.id, indicaciones_generales="Reposo")
        prescripcion.items = [
            ItemPrescripcionORM(medicamento="Otomax", dosis="5 gotas", frecuencia="Cada 12 horas", duracion_dias=7)
        ]
        db_session.add(prescripcion)
        db_session.commit()

        response = client.get(f"/pacientes/{paciente_instance.id}/historial", headers=auth_headers_veterinario)
        assert response.status_code == 200
        data = response.json()
        assert data["paciente"]["id_paciente"] == paciente_instance.id
        assert [c["id_cita"] for c in data["citas"]] == [cita_instance.id]
        assert [c["id_consulta"] for c in data["consultas"]] == [consulta_instance.id]
        assert data["prescripciones"][0]["items"][0]["medicamento"] == "Otomax"
        assert data["vacunaciones"] == []

    def test_historial_de_paciente_ajeno(
        self,
        client: TestClient,
        auth_headers_cliente: Dict[str, str],
        otro_paciente: PacienteORM
    ):
        response = client.get(f"/pacientes/{otro_paciente.id}/historial", headers=auth_headers_cliente)
        assert_error_body(response, 403)
