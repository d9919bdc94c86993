from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class TipoMovimiento(str, Enum):
    ENTRADA = "ENTRADA"
    SALIDA = "SALIDA"
    AJUSTE = "AJUSTE"


class CategoriaCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    descripcion: Optional[str] = Field(None, max_length=300)


class Categoria(CategoriaCreate):
    id_categoria: str
    activo: bool = True


class ProductoBase(BaseModel):
    codigo: str = Field(..., min_length=1, max_length=50)
    nombre: str = Field(..., min_length=1, max_length=200)
    descripcion: Optional[str] = None
    id_categoria: Optional[str] = None
    id_proveedor: Optional[str] = None
    unidad_medida: Optional[str] = Field(None, max_length=30)
    stock_minimo: int = Field(0, ge=0)
    stock_maximo: Optional[int] = Field(None, ge=0)
    costo: float = Field(0, ge=0)
    precio_venta: float = Field(0, ge=0)


class ProductoCreate(ProductoBase):
    stock_inicial: int = Field(0, ge=0, description="Se registra como movimiento de ENTRADA")


class ProductoUpdate(BaseModel):
    """El stock solo cambia mediante movimientos."""
    codigo: Optional[str] = Field(None, min_length=1, max_length=50)
    nombre: Optional[str] = Field(None, min_length=1, max_length=200)
    descripcion: Optional[str] = None
    id_categoria: Optional[str] = None
    id_proveedor: Optional[str] = None
    unidad_medida: Optional[str] = Field(None, max_length=30)
    stock_minimo: Optional[int] = Field(None, ge=0)
    stock_maximo: Optional[int] = Field(None, ge=0)
    costo: Optional[float] = Field(None, ge=0)
    precio_venta: Optional[float] = Field(None, ge=0)


class Producto(ProductoBase):
    id_producto: str
    stock_actual: int
    stock_bajo: bool
    categoria_nombre: Optional[str] = None
    proveedor_nombre: Optional[str] = None
    activo: bool = True


class MovimientoCreate(BaseModel):
    tipo: TipoMovimiento
    cantidad: int = Field(..., ge=0, description="En AJUSTE es el stock final")
    precio_unitario: Optional[float] = Field(None, ge=0)
    motivo: Optional[str] = Field(None, max_length=300)


class Movimiento(BaseModel):
    id_movimiento: str
    id_producto: str
    tipo: TipoMovimiento
    cantidad: int
    precio_unitario: Optional[float] = None
    motivo: Optional[str] = None
    stock_anterior: int
    stock_resultante: int
    fecha: datetime
    id_usuario: Optional[str] = None


class ValorInventario(BaseModel):
    valor_total: float
    productos_stock_bajo: int
