"""
Pruebas para el dashboard del staff y los reportes por periodo.
"""

from fastapi.testclient import TestClient
from typing import Dict

from database.models import CitaORM, ConsultaORM, ProductoORM
from tests.conftest import assert_error_body


class TestDashboard:

    def test_indicadores(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        cita_instance: CitaORM,
        otro_paciente
    ):
        response = client.get("/dashboard/", headers=auth_headers_recepcion)
        assert response.status_code == 200
        data = response.json()
        assert data["citas_pendientes"] == 1
        assert data["pacientes_activos"] == 2
        assert data["total_propietarios"] == 2
        assert [c["id_cita"] for c in data["proximas_citas"]] == [cita_instance.id]
        assert {"etiqueta": "PENDIENTE", "cantidad": 1} in data["citas_por_estado"]
        especies = {c["etiqueta"]: c["cantidad"] for c in data["distribucion_especies"]}
        assert especies == {"Perro": 1, "Gato": 1}

    def test_stock_bajo_en_dashboard(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        producto_instance: ProductoORM
    ):
        client.post(
            f"/productos/{producto_instance.id}/movimientos",
            json={"tipo": "AJUSTE", "cantidad": 1},
            headers=auth_headers_recepcion
        )
        data = client.get("/dashboard/", headers=auth_headers_recepcion).json()
        assert data["productos_stock_bajo"] == 1

    def test_requiere_staff(self, client: TestClient, auth_headers_cliente: Dict[str, str]):
        assert_error_body(client.get("/dashboard/", headers=auth_headers_cliente), 403)
        assert_error_body(client.get("/dashboard/"), 401)


class TestReportes:

    def test_reporte_del_dia(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        consulta_instance: ConsultaORM
    ):
        response = client.get("/reportes/", params={"periodo": "hoy"}, headers=auth_headers_veterinario)
        assert response.status_code == 200
        data = response.json()
        assert data["periodo"] == "hoy"
        assert data["desde"] == data["hasta"]
        assert data["totales"]["consultas"] == 1
        assert data["totales"]["veterinarios_activos"] == 1
        assert data["atenciones_por_veterinario"][0]["cantidad"] == 1
        assert len(data["tendencia_citas"]) == 6

    def test_periodo_invalido(self, client: TestClient, auth_headers_admin: Dict[str, str]):
        response = client.get("/reportes/", params={"periodo": "siglo"}, headers=auth_headers_admin)
        assert_error_body(response, 400)

    def test_recepcion_no_ve_reportes(self, client: TestClient, auth_headers_recepcion: Dict[str, str]):
        assert_error_body(client.get("/reportes/", headers=auth_headers_recepcion), 403)
