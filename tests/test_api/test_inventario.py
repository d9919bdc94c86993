"""
Pruebas para endpoints de Inventario.

Las pruebas cubren:
- Alta de productos con stock inicial
- Movimientos de ENTRADA, SALIDA y AJUSTE
- Stock insuficiente y cantidades inválidas
- Aviso de stock bajo
- Valor del inventario y permisos
"""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict

from database.models import NotificacionORM, ProductoORM, UsuarioORM, MovimientoInventarioORM
from tests.conftest import assert_error_body


class TestProductos:
    """Pruebas para POST/GET /productos."""

    def test_crear_producto_con_stock_inicial(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str]
    ):
        categoria = client.post(
            "/categorias/",
            json={"nombre": "Antibióticos"},
            headers=auth_headers_recepcion
        ).json()

        response = client.post(
            "/productos/",
            json={
                "codigo": "CEF-250",
                "nombre": "Cefalexina 250 mg",
                "id_categoria": categoria["id_categoria"],
                "stock_inicial": 20,
                "stock_minimo": 5,
                "costo": 800,
                "precio_venta": 1500,
            },
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201
        data = response.json()
        assert data["stock_actual"] == 20
        assert data["stock_bajo"] is False
        assert data["categoria_nombre"] == "Antibióticos"

        movimientos = db_session.query(MovimientoInventarioORM).all()
        assert len(movimientos) == 1
        assert movimientos[0].tipo == "ENTRADA"
        assert movimientos[0].motivo == "Stock inicial"

    def test_codigo_duplicado(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        producto_instance: ProductoORM
    ):
        response = client.post(
            "/productos/",
            json={"codigo": producto_instance.codigo, "nombre": "Otro"},
            headers=auth_headers_recepcion
        )
        assert_error_body(response, 409)

    def test_veterinario_no_crea_productos(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str]
    ):
        response = client.post(
            "/productos/",
            json={"codigo": "X-1", "nombre": "X"},
            headers=auth_headers_veterinario
        )
        assert_error_body(response, 403)

    def test_valor_del_inventario(
        self,
        client: TestClient,
        auth_headers_veterinario: Dict[str, str],
        producto_instance: ProductoORM
    ):
        response = client.get("/productos/valor", headers=auth_headers_veterinario)
        assert response.status_code == 200
        data = response.json()
        assert data["valor_total"] == 10 * 1000
        assert data["productos_stock_bajo"] == 0


class TestMovimientos:
    """Pruebas para POST /productos/{id}/movimientos."""

    def test_entrada_suma_stock(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        producto_instance: ProductoORM
    ):
        response = client.post(
            f"/productos/{producto_instance.id}/movimientos",
            json={"tipo": "ENTRADA", "cantidad": 5, "precio_unitario": 950, "motivo": "Compra"},
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201
        data = response.json()
        assert data["stock_anterior"] == 10
        assert data["stock_resultante"] == 15

    def test_salida_mayor_al_stock(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str],
        producto_instance: ProductoORM
    ):
        response = client.post(
            f"/productos/{producto_instance.id}/movimientos",
            json={"tipo": "SALIDA", "cantidad": 11},
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 422)
        assert "Stock insuficiente" in body["message"]

        db_session.expire_all()
        assert db_session.get(ProductoORM, producto_instance.id).stock_actual == 10

    def test_entrada_con_cantidad_cero(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        producto_instance: ProductoORM
    ):
        response = client.post(
            f"/productos/{producto_instance.id}/movimientos",
            json={"tipo": "ENTRADA", "cantidad": 0},
            headers=auth_headers_recepcion
        )
        body = assert_error_body(response, 400)
        assert "cantidad" in body["errors"]

    def test_ajuste_fija_el_stock(
        self,
        client: TestClient,
        auth_headers_admin: Dict[str, str],
        producto_instance: ProductoORM
    ):
        response = client.post(
            f"/productos/{producto_instance.id}/movimientos",
            json={"tipo": "AJUSTE", "cantidad": 7, "motivo": "Conteo físico"},
            headers=auth_headers_admin
        )
        assert response.status_code == 201
        assert response.json()["stock_resultante"] == 7

    def test_salida_al_minimo_avisa_stock_bajo(
        self,
        client: TestClient,
        db_session: Session,
        auth_headers_recepcion: Dict[str, str],
        admin_usuario: UsuarioORM,
        recepcion_usuario: UsuarioORM,
        veterinario_usuario: UsuarioORM,
        producto_instance: ProductoORM
    ):
        response = client.post(
            f"/productos/{producto_instance.id}/movimientos",
            json={"tipo": "SALIDA", "cantidad": 7},
            headers=auth_headers_recepcion
        )
        assert response.status_code == 201

        destinatarios = {n.id_usuario for n in db_session.query(NotificacionORM).all()}
        assert destinatarios == {admin_usuario.id, recepcion_usuario.id}

        stock_bajo = client.get("/productos/stock-bajo", headers=auth_headers_recepcion).json()
        assert [p["id_producto"] for p in stock_bajo] == [producto_instance.id]

    def test_historial_de_movimientos(
        self,
        client: TestClient,
        auth_headers_recepcion: Dict[str, str],
        producto_instance: ProductoORM
    ):
        url = f"/productos/{producto_instance.id}/movimientos"
        client.post(url, json={"tipo": "ENTRADA", "cantidad": 2}, headers=auth_headers_recepcion)
        client.post(url, json={"tipo": "SALIDA", "cantidad": 1}, headers=auth_headers_recepcion)

        response = client.get(url, headers=auth_headers_recepcion)
        assert response.status_code == 200
        data = response.json()
        assert data["pagination"]["total_items"] == 2
