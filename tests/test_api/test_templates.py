"""
Pruebas para las plantillas de consulta y de prescripción.

Las pruebas cubren:
- Alta, edición y baja lógica
- Filtro por categoría y listado de categorías
- Contador de usos
- Reemplazo de medicamentos de una plantilla de prescripción
- Permisos (solo ADMIN y VET)
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict

from database.models import TemplateConsultaORM
from tests.conftest import assert_error_body


CONTROL_ANUAL = {
    "nombre": "Control anual",
    "categoria": "Control",
    "examen_fisico": "Mucosas rosadas, TLLC < 2 s, sin adenomegalias",
    "diagnostico": "Paciente sano",
    "tratamiento": "Refuerzo de vacunas y desparasitación",
}

ANTIBIOTICO = {
    "nombre": "Amoxicilina 7 días",
    "categoria": "Antibióticos",
    "indicaciones_generales": "Administrar con comida",
    "items": [
        {
            "medicamento": "Amoxicilina 250 mg",
            "dosis": "1 tableta",
            "frecuencia": "Cada 12 horas",
            "duracion_dias": 7,
            "via_administracion": "ORAL",
        },
        {
            "medicamento": "Probiótico",
            "dosis": "1 sobre",
            "frecuencia": "Cada 24 horas",
            "duracion_dias": 7,
        },
    ],
}


class TestTemplatesConsulta:
    """Pruebas para /templates/consultas."""

    def test_crear_y_obtener(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        response = client.post("/templates/consultas/", json=CONTROL_ANUAL, headers=auth_headers_veterinario)
        assert response.status_code == 201
        data = response.json()
        assert data["veces_usado"] == 0
        assert data["id_usuario_creacion"] is not None

        detalle = client.get(f"/templates/consultas/{data['id_template']}", headers=auth_headers_veterinario)
        assert detalle.status_code == 200
        assert detalle.json()["diagnostico"] == "Paciente sano"

    def test_filtrar_por_categoria(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        client.post("/templates/consultas/", json=CONTROL_ANUAL, headers=auth_headers_veterinario)
        client.post(
            "/templates/consultas/",
            json={"nombre": "Postoperatorio esterilización", "categoria": "Cirugía"},
            headers=auth_headers_veterinario
        )

        response = client.get("/templates/consultas/?categoria=Cirugía", headers=auth_headers_veterinario)
        assert response.status_code == 200
        assert [t["nombre"] for t in response.json()] == ["Postoperatorio esterilización"]

        categorias = client.get("/templates/consultas/categorias", headers=auth_headers_veterinario)
        assert categorias.json() == ["Cirugía", "Control"]

    def test_usar_incrementa_contador(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        template = client.post(
            "/templates/consultas/", json=CONTROL_ANUAL, headers=auth_headers_veterinario
        ).json()

        client.post(f"/templates/consultas/{template['id_template']}/usar", headers=auth_headers_veterinario)
        response = client.post(
            f"/templates/consultas/{template['id_template']}/usar", headers=auth_headers_veterinario
        )
        assert response.status_code == 200
        assert response.json()["veces_usado"] == 2

    def test_actualizar(
        self,
        client: TestClient,
        auth_headers_admin: Dict[str, str]
    ):
        template = client.post("/templates/consultas/", json=CONTROL_ANUAL, headers=auth_headers_admin).json()
        response = client.put(
            f"/templates/consultas/{template['id_template']}",
            json={"observaciones": "Revisar peso"},
            headers=auth_headers_admin
        )
        assert response.status_code == 200
        data = response.json()
        assert data["observaciones"] == "Revisar peso"
        assert data["nombre"] == CONTROL_ANUAL["nombre"]

    def test_baja_logica(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_veterinario: Dict[str, str]
    ):
        template = client.post(
            "/templates/consultas/", json=CONTROL_ANUAL, headers=auth_headers_veterinario
        ).json()
        response = client.delete(
            f"/templates/consultas/{template['id_template']}", headers=auth_headers_veterinario
        )
        assert response.status_code == 200
        assert db_session.get(TemplateConsultaORM, template["id_template"]).activo is False

        assert client.get("/templates/consultas/", headers=auth_headers_veterinario).json() == []
        usar = client.post(
            f"/templates/consultas/{template['id_template']}/usar", headers=auth_headers_veterinario
        )
        assert_error_body(usar, 422)

    def test_recepcion_no_accede(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        response = client.get("/templates/consultas/", headers=auth_headers_recepcion)
        assert_error_body(response, 403)


class TestTemplatesPrescripcion:
    """Pruebas para /templates/prescripciones."""

    def test_crear_conserva_orden_de_items(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        response = client.post(
            "/templates/prescripciones/", json=ANTIBIOTICO, headers=auth_headers_veterinario
        )
        assert response.status_code == 201
        items = response.json()["items"]
        assert [i["medicamento"] for i in items] == ["Amoxicilina 250 mg", "Probiótico"]
        assert items[0]["via_administracion"] == "ORAL"

    def test_requiere_items(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        response = client.post(
            "/templates/prescripciones/",
            json={**ANTIBIOTICO, "items": []},
            headers=auth_headers_veterinario
        )
        assert_error_body(response, 400)

    def test_actualizar_reemplaza_items(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        template = client.post(
            "/templates/prescripciones/", json=ANTIBIOTICO, headers=auth_headers_veterinario
        ).json()
        response = client.put(
            f"/templates/prescripciones/{template['id_template']}",
            json={"items": [{"medicamento": "Cefalexina 500 mg", "dosis": "1 cápsula", "frecuencia": "Cada 12 horas"}]},
            headers=auth_headers_veterinario
        )
        assert response.status_code == 200
        data = response.json()
        assert [i["medicamento"] for i in data["items"]] == ["Cefalexina 500 mg"]
        assert data["indicaciones_generales"] == ANTIBIOTICO["indicaciones_generales"]

    def test_usar_y_categorias(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        template = client.post(
            "/templates/prescripciones/", json=ANTIBIOTICO, headers=auth_headers_veterinario
        ).json()
        response = client.post(
            f"/templates/prescripciones/{template['id_template']}/usar", headers=auth_headers_veterinario
        )
        assert response.json()["veces_usado"] == 1

        categorias = client.get("/templates/prescripciones/categorias", headers=auth_headers_veterinario)
        assert categorias.json() == ["Antibióticos"]

    def test_template_inexistente(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        response = client.get(
            "/templates/prescripciones/00000000-0000-0000-0000-000000000000",
            headers=auth_headers_veterinario
        )
        assert_error_body(response, 404)
