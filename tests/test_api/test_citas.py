"""
Pruebas para endpoints de la API de Citas.

Las pruebas cubren:
- Reglas de agenda (pasado, día cerrado, fuera de horario, solapamiento)
- Creación exitosa y notificación al profesional
- Cambios de estado permitidos y prohibidos
- Reprogramación y cancelación
- Disponibilidad y control de acceso del cliente
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict
from datetime import datetime, time, timedelta

from database.models import CitaORM, NotificacionORM, PacienteORM, UsuarioORM
from utils.datetime_utils import get_local_today
from tests.conftest import (
    assert_valid_uuid,
    assert_error_body,
    proximo_dia_habil,
    proximo_dia_semana,
)


def _cita_payload(paciente: PacienteORM, profesional: UsuarioORM, fecha: datetime) -> dict:
    return {
        "id_paciente": paciente.id,
        "id_propietario": paciente.id_propietario,
        "id_profesional": profesional.id,
        "fecha": fecha.isoformat(),
        "motivo": "Revisión general",
    }


class TestReglasDeAgenda:
    """Las violaciones de agenda responden 422 con el cuerpo uniforme."""

    def test_cita_en_el_pasado(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        fecha = datetime.combine(get_local_today() - timedelta(days=1), time(10, 0))
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, fecha),
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 422)
        assert "pasada" in body["message"]
        assert "fecha" in body["errors"]

    def test_cita_en_domingo(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, proximo_dia_semana(6, 10)),
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 422)
        assert "domingo" in body["message"]

    def test_cita_en_hora_de_almuerzo(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, proximo_dia_habil(13, 0)),
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 422)

    def test_cita_que_termina_despues_del_cierre(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        """11:45 + 30 minutos sobrepasa el cierre de las 12:00."""
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, proximo_dia_habil(11, 45)),
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 422)

    def test_cita_sabado_por_la_tarde(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, proximo_dia_semana(5, 14)),
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 422)
        assert "sábado" in body["message"]

    def test_cita_sabado_por_la_manana(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, proximo_dia_semana(5, 9)),
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201

    def test_cita_solapada_con_el_mismo_profesional(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM,
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        """La cita existente ocupa 10:00-10:30; 10:15 se solapa."""
        fecha = cita_instance.fecha + timedelta(minutes=15)
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, fecha),
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 422)
        assert body["errors"]["fecha"] == "Horario ocupado"

    def test_cita_contigua_no_se_solapa(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM,
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        fecha = cita_instance.fecha + timedelta(minutes=30)
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, fecha),
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201

    def test_cita_cancelada_libera_el_horario(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM,
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        cita_instance.estado = "CANCELADA"
        db_session.commit()

        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, cita_instance.fecha),
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201


class TestCitaCreation:
    """Pruebas para POST /citas/."""

    def test_agendar_cita_exitoso(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        fecha = proximo_dia_habil(9, 0)
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, fecha),
            headers=auth_headers_recepcion
        )

        assert response.status_code == 201
        data = response.json()
        assert assert_valid_uuid(data["id_cita"])
        assert data["estado"] == "PENDIENTE"
        assert data["paciente_nombre"] == paciente_instance.nombre
        assert data["profesional_nombre"] == veterinario_usuario.nombre
        assert datetime.fromisoformat(data["fecha_fin"]) - datetime.fromisoformat(data["fecha"]) == timedelta(minutes=30)

        notificaciones = db_session.query(NotificacionORM).filter(
            NotificacionORM.id_usuario == veterinario_usuario.id
        ).all()
        assert len(notificaciones) == 1
        assert notificaciones[0].entidad_id == data["id_cita"]

    def test_flujo_completo_propietario_paciente_cita(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        veterinario_usuario: UsuarioORM
    ):
        propietario = client.post(
            "/propietarios/",
            json={
                "nombre": "Andrés Ruiz",
                "documento": "7080901020",
                "email": "andres@correo.test",
                "telefono": "3001112233",
            },
            headers=auth_headers_recepcion
        )
        assert propietario.status_code == 201
        id_propietario = propietario.json()["id_propietario"]

        paciente = client.post(
            "/pacientes/",
            json={"nombre": "Misha", "especie": "Gato", "sexo": "HEMBRA", "id_propietario": id_propietario},
            headers=auth_headers_recepcion
        )
        assert paciente.status_code == 201
        id_paciente = paciente.json()["id_paciente"]

        response = client.post(
            "/citas/",
            json={
                "id_paciente": id_paciente,
                "id_propietario": id_propietario,
                "id_profesional": veterinario_usuario.id,
                "fecha": proximo_dia_habil(10, 0).isoformat(),
                "motivo": "Primera consulta",
            },
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201
        data = response.json()
        assert data["estado"] == "PENDIENTE"
        assert data["id_paciente"] == id_paciente
        assert data["id_propietario"] == id_propietario

    def test_agendar_con_paciente_de_otro_propietario(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        otro_paciente: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        payload = _cita_payload(otro_paciente, veterinario_usuario, proximo_dia_habil(9, 0))
        payload["id_propietario"] = paciente_instance.id_propietario
        response = client.post("/citas/", json=payload, headers=auth_headers_recepcion)
        assert_error_body(response, 422)

    def test_agendar_con_profesional_que_no_es_veterinario(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        recepcion_usuario: UsuarioORM,
        paciente_instance: PacienteORM
    ):
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, recepcion_usuario, proximo_dia_habil(9, 0)),
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 422)
        assert "id_profesional" in body["errors"]

    def test_agendar_sin_motivo(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        payload = _cita_payload(paciente_instance, veterinario_usuario, proximo_dia_habil(9, 0))
        del payload["motivo"]
        response = client.post("/citas/", json=payload, headers=auth_headers_recepcion)
        body = assert_error_body(response, 400)
        assert "motivo" in body["errors"]

    def test_agendar_sin_autenticacion(
        self,
        client: TestClient,
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, proximo_dia_habil(9, 0))
        )
        assert_error_body(response, 401)

    def test_cliente_no_agenda_por_el_endpoint_del_staff(
        self,
        client: TestClient,
        auth_headers_cliente: Dict[str, str],
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        response = client.post(
            "/citas/",
            json=_cita_payload(paciente_instance, veterinario_usuario, proximo_dia_habil(9, 0)),
            headers=auth_headers_cliente
        )
        assert_error_body(response, 403)


class TestCitaEstado:
    """Pruebas para PATCH /citas/{id}/estado y DELETE /citas/{id}."""

    def test_confirmar_y_atender(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        cita_instance: CitaORM
    ):
        response = client.patch(
            f"/citas/{cita_instance.id}/estado",
            json={"estado": "CONFIRMADA"},
            headers=auth_headers_veterinario
        )
        assert response.status_code == 200
        assert response.json()["estado"] == "CONFIRMADA"

        response = client.patch(
            f"/citas/{cita_instance.id}/estado",
            json={"estado": "ATENDIDA"},
            headers=auth_headers_veterinario
        )
        assert response.status_code == 200
        assert response.json()["estado"] == "ATENDIDA"

    def test_pendiente_no_pasa_a_atendida(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        cita_instance: CitaORM
    ):
        response = client.patch(
            f"/citas/{cita_instance.id}/estado",
            json={"estado": "ATENDIDA"},
            headers=auth_headers_veterinario
        )
        assert_error_body(response, 422)

    def test_veterinario_no_puede_cancelar(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        cita_instance: CitaORM
    ):
        response = client.patch(
            f"/citas/{cita_instance.id}/estado",
            json={"estado": "CANCELADA"},
            headers=auth_headers_veterinario
        )
        assert_error_body(response, 403)

    def test_delete_cancela_la_cita(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM
    ):
        response = client.delete(f"/citas/{cita_instance.id}", headers=auth_headers_recepcion)
        assert response.status_code == 200
        assert response.json()["estado"] == "CANCELADA"

        db_session.expire_all()
        assert db_session.get(CitaORM, cita_instance.id) is not None

    def test_cancelada_es_final(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM
    ):
        client.delete(f"/citas/{cita_instance.id}", headers=auth_headers_recepcion)
        response = client.patch(
            f"/citas/{cita_instance.id}/estado",
            json={"estado": "CONFIRMADA"},
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 422)


class TestCitaReprogramacion:
    """Pruebas para PUT /citas/{id}."""

    def test_reprogramar_a_otro_horario(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM
    ):
        nueva = cita_instance.fecha.replace(hour=15, minute=0)
        response = client.put(
            f"/citas/{cita_instance.id}",
            json={"fecha": nueva.isoformat()},
            headers=auth_headers_recepcion
        )
        assert response.status_code == 200
        assert datetime.fromisoformat(response.json()["fecha"]) == nueva

    def test_reprogramar_al_mismo_horario_no_choca_consigo_misma(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM
    ):
        response = client.put(
            f"/citas/{cita_instance.id}",
            json={"fecha": (cita_instance.fecha + timedelta(minutes=10)).isoformat()},
            headers=auth_headers_recepcion
        )
        assert response.status_code == 200

    def test_reprogramar_fuera_de_horario(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM
    ):
        response = client.put(
            f"/citas/{cita_instance.id}",
            json={"fecha": cita_instance.fecha.replace(hour=19).isoformat()},
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 422)


class TestCitaConsultas:
    """Listado, agenda, disponibilidad y acceso del cliente."""

    def test_listar_citas_paginado(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM
    ):
        response = client.get("/citas/", headers=auth_headers_recepcion)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["pagination"]["total_items"] == 1
        assert data["data"][0]["id_cita"] == cita_instance.id

    def test_disponibilidad_excluye_horario_ocupado(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM,
        veterinario_usuario: UsuarioORM
    ):
        dia = cita_instance.fecha.date().isoformat()
        response = client.get(
            f"/citas/disponibilidad/{veterinario_usuario.id}",
            params={"dia": dia},
            headers=auth_headers_recepcion
        )
        assert response.status_code == 200
        inicios = [datetime.fromisoformat(h["inicio"]) for h in response.json()["horarios"]]
        assert cita_instance.fecha not in inicios
        assert cita_instance.fecha + timedelta(minutes=30) in inicios
        # 08-12 y 14-18 en pasos de 30 minutos, menos el ocupado
        assert len(inicios) == 15

    def test_agenda_del_profesional(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        cita_instance: CitaORM,
        veterinario_usuario: UsuarioORM
    ):
        response = client.get(
            f"/citas/agenda/{veterinario_usuario.id}",
            params={"dia": cita_instance.fecha.date().isoformat()},
            headers=auth_headers_veterinario
        )
        assert response.status_code == 200
        assert [c["id_cita"] for c in response.json()] == [cita_instance.id]

    def test_cliente_ve_su_cita(
        self,
        client: TestClient,
        auth_headers_cliente: Dict[str, str],
        cita_instance: CitaORM
    ):
        response = client.get(f"/citas/{cita_instance.id}", headers=auth_headers_cliente)
        assert response.status_code == 200

    def test_cliente_no_ve_cita_ajena(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_cliente: Dict[str, str],
        otro_paciente: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        cita = CitaORM(
            fecha=proximo_dia_habil(15, 0),
            motivo="Vacunación",
            estado="PENDIENTE",
            id_paciente=otro_paciente.id,
            id_propietario=otro_paciente.id_propietario,
            id_profesional=veterinario_usuario.id,
        )
        db_session.add(cita)
        db_session.commit()

        response = client.get(f"/citas/{cita.id}", headers=auth_headers_cliente)
        assert_error_body(response, 403)

    def test_obtener_cita_inexistente(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        response = client.get(
            "/citas/00000000-0000-0000-0000-000000000000",
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 404)

    def test_obtener_cita_con_id_invalido(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        response = client.get("/citas/no-es-uuid", headers=auth_headers_recepcion)
        assert_error_body(response, 400)
