from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, date
from enum import Enum


class EstadoFactura(str, Enum):
    PENDIENTE = "PENDIENTE"
    PARCIAL = "PARCIAL"
    PAGADA = "PAGADA"
    CANCELADA = "CANCELADA"


class TipoItem(str, Enum):
    SERVICIO = "SERVICIO"
    MEDICAMENTO = "MEDICAMENTO"
    PROCEDIMIENTO = "PROCEDIMIENTO"
    OTRO = "OTRO"


class MetodoPago(str, Enum):
    EFECTIVO = "EFECTIVO"
    TARJETA = "TARJETA"
    TRANSFERENCIA = "TRANSFERENCIA"
    CHEQUE = "CHEQUE"


class ItemFacturaCreate(BaseModel):
    descripcion: str = Field(..., min_length=1, max_length=300)
    tipo_item: TipoItem = TipoItem.SERVICIO
    codigo_producto: Optional[str] = Field(None, max_length=50)
    cantidad: int = Field(1, ge=1)
    precio_unitario: float = Field(..., ge=0)
    descuento: float = Field(0, ge=0)


class ItemFactura(ItemFacturaCreate):
    id_item: str
    subtotal: float
    orden: int


class FacturaCreate(BaseModel):
    id_propietario: str
    id_consulta: Optional[str] = None
    fecha_vencimiento: Optional[date] = None
    descuento: float = Field(0, ge=0)
    impuesto: float = Field(0, ge=0)
    observaciones: Optional[str] = Field(None, max_length=2000)
    items: List[ItemFacturaCreate] = Field(..., min_length=1)


class FacturaDesdeConsulta(BaseModel):
    """Datos opcionales al facturar una consulta."""
    items_adicionales: List[ItemFacturaCreate] = Field(default_factory=list)
    descuento: float = Field(0, ge=0)
    impuesto: float = Field(0, ge=0)
    fecha_vencimiento: Optional[date] = None
    observaciones: Optional[str] = Field(None, max_length=2000)


class FacturaUpdate(BaseModel):
    """Solo se pueden modificar observaciones y vencimiento."""
    observaciones: Optional[str] = Field(None, max_length=2000)
    fecha_vencimiento: Optional[date] = None


class FacturaCancelacion(BaseModel):
    motivo: Optional[str] = Field(None, max_length=500)


class PagoCreate(BaseModel):
    monto: float = Field(..., gt=0)
    metodo_pago: MetodoPago
    referencia: Optional[str] = Field(None, max_length=100)
    observaciones: Optional[str] = Field(None, max_length=1000)


class Pago(PagoCreate):
    id_pago: str
    id_factura: str
    fecha_pago: datetime
    id_usuario: Optional[str] = None


class Factura(BaseModel):
    id_factura: str
    numero: str
    fecha: datetime
    fecha_vencimiento: Optional[date] = None
    id_propietario: str
    propietario_nombre: Optional[str] = None
    id_consulta: Optional[str] = None
    subtotal: float
    descuento: float
    impuesto: float
    total: float
    monto_pagado: float
    saldo_pendiente: float
    estado: EstadoFactura
    observaciones: Optional[str] = None
    items: List[ItemFactura] = []
    pagos: List[Pago] = []


class EstadisticasFinancieras(BaseModel):
    total_facturado: float
    total_pagado: float
    total_pendiente: float
    facturas_por_estado: dict[str, int]
