"""
Pruebas para endpoints de Proveedores.

Las pruebas cubren:
- Alta, búsqueda y baja lógica de proveedores
- Unicidad de RUC y email
- Productos asociados a un proveedor
- Permisos
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict

from database.models import ProveedorORM
from tests.conftest import assert_error_body


PROVEEDOR = {
    "nombre": "Distribuidora Veterinaria del Valle",
    "ruc": "900123456-7",
    "email": "Ventas@DistriVet.test",
    "telefono": "6025551234",
    "direccion": "Av. 6N # 23-45, Cali",
}


def _crear_proveedor(client: TestClient, headers: Dict[str, str], **extra) -> dict:
    response = client.post("/proveedores/", json={**PROVEEDOR, **extra}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestProveedores:
    """Pruebas para POST/GET/PUT/DELETE /proveedores."""

    def test_crear_proveedor(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        data = _crear_proveedor(client, auth_headers_recepcion)
        assert data["nombre"] == PROVEEDOR["nombre"]
        assert data["email"] == "ventas@distrivet.test"
        assert data["activo"] is True
        assert data["productos_activos"] == 0

    def test_ruc_duplicado(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        _crear_proveedor(client, auth_headers_recepcion)
        response = client.post(
            "/proveedores/",
            json={**PROVEEDOR, "email": "otro@distrivet.test"},
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 409)
        assert "ruc" in body["message"]

    def test_email_duplicado_sin_distinguir_mayusculas(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        _crear_proveedor(client, auth_headers_recepcion)
        response = client.post(
            "/proveedores/",
            json={**PROVEEDOR, "ruc": "800999888-1", "email": "VENTAS@distrivet.test"},
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 409)

    def test_veterinario_no_crea_proveedores(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        response = client.post("/proveedores/", json=PROVEEDOR, headers=auth_headers_veterinario)
        assert_error_body(response, 403)

    def test_veterinario_consulta_proveedores(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        auth_headers_veterinario: Dict[str, str]
    ):
        _crear_proveedor(client, auth_headers_recepcion)
        response = client.get("/proveedores/", headers=auth_headers_veterinario)
        assert response.status_code == 200
        assert response.json()["pagination"]["total_items"] == 1

    def test_buscar_por_texto(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        _crear_proveedor(client, auth_headers_recepcion)
        _crear_proveedor(
            client, auth_headers_recepcion,
            nombre="Laboratorios Andinos", ruc="811222333-4", email="pedidos@andinos.test"
        )

        response = client.get("/proveedores/?texto=andinos", headers=auth_headers_recepcion)
        assert response.status_code == 200
        data = response.json()
        assert data["pagination"]["total_items"] == 1
        assert data["data"][0]["nombre"] == "Laboratorios Andinos"

    def test_actualizar_proveedor(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        proveedor = _crear_proveedor(client, auth_headers_recepcion)
        response = client.put(
            f"/proveedores/{proveedor['id_proveedor']}",
            json={"telefono": "6025559999", "notas": "Entrega martes y jueves"},
            headers=auth_headers_recepcion
        )
        assert response.status_code == 200
        data = response.json()
        assert data["telefono"] == "6025559999"
        assert data["ruc"] == PROVEEDOR["ruc"]

    def test_baja_logica(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_admin: Dict[str, str]
    ):
        proveedor = _crear_proveedor(client, auth_headers_admin)
        response = client.delete(f"/proveedores/{proveedor['id_proveedor']}", headers=auth_headers_admin)
        assert response.status_code == 200

        orm = db_session.get(ProveedorORM, proveedor["id_proveedor"])
        assert orm is not None
        assert orm.activo is False

        listado = client.get("/proveedores/", headers=auth_headers_admin).json()
        assert listado["pagination"]["total_items"] == 0

    def test_proveedor_inexistente(
        self,
        client: TestClient,
        auth_headers_admin: Dict[str, str]
    ):
        response = client.get(
            "/proveedores/00000000-0000-0000-0000-000000000000", headers=auth_headers_admin
        )
        assert_error_body(response, 404)


class TestProductosDeProveedor:
    """Relación producto-proveedor."""

    def test_producto_con_proveedor(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str]
    ):
        proveedor = _crear_proveedor(client, auth_headers_recepcion)
        response = client.post(
            "/productos/",
            json={
                "codigo": "MELOX-15",
                "nombre": "Meloxicam 1.5 mg/ml",
                "id_proveedor": proveedor["id_proveedor"],
                "stock_inicial": 4,
                "costo": 12000,
                "precio_venta": 21000,
            },
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201
        data = response.json()
        assert data["id_proveedor"] == proveedor["id_proveedor"]
        assert data["proveedor_nombre"] == PROVEEDOR["nombre"]

        detalle = client.get(f"/proveedores/{proveedor['id_proveedor']}", headers=auth_headers_recepcion)
        assert detalle.json()["productos_activos"] == 1

        filtrado = client.get(
            f"/productos/?id_proveedor={proveedor['id_proveedor']}", headers=auth_headers_recepcion
        ).json()
        assert filtrado["pagination"]["total_items"] == 1

    def test_producto_con_proveedor_inactivo(
        self,
        client: TestClient,
        auth_headers_admin: Dict[str, str]
    ):
        proveedor = _crear_proveedor(client, auth_headers_admin)
        client.delete(f"/proveedores/{proveedor['id_proveedor']}", headers=auth_headers_admin)

        response = client.post(
            "/productos/",
            json={"codigo": "X-2", "nombre": "Jeringa 5 ml", "id_proveedor": proveedor["id_proveedor"]},
            headers=auth_headers_admin
        )
        assert_error_body(response, 422)
