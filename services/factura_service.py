"""
Servicio de Facturación.

Máquina de estados de la factura:

    PENDIENTE --pago parcial--> PARCIAL --pago del saldo--> PAGADA
    PENDIENTE/PARCIAL --cancelar--> CANCELADA

El estado siempre se deriva de monto_pagado frente a total; PAGADA y
CANCELADA son finales. Los pagos solo se agregan, nunca se editan.
"""

from typing import List, Optional
from datetime import datetime
import logging

from services.base_service import BaseService
from repositories.factura_repository import FacturaRepository
from repositories.propietario_repository import PropietarioRepository
from repositories.consulta_repository import ConsultaRepository
from database.models import FacturaORM, ItemFacturaORM, PagoORM
from models.facturas import (
    Factura,
    FacturaCreate,
    FacturaDesdeConsulta,
    FacturaUpdate,
    ItemFactura,
    ItemFacturaCreate,
    Pago,
    PagoCreate,
    EstadoFactura,
    TipoItem,
    EstadisticasFinancieras,
)
from config import settings
from core.context import RequestContext
from core.exceptions import BusinessException, ValidationException, DuplicateException, NotFoundException
from core.security import validate_uuid, check_propietario_access
from core.utils import enum_to_value, redondear_monto
from core.audit import log_accion
from utils.datetime_utils import get_local_naive_now, to_local_naive

logger = logging.getLogger(__name__)

#tolerancia para comparar montos redondeados a centavos
EPSILON = 0.005

ESTADOS_FINALES = (EstadoFactura.PAGADA.value, EstadoFactura.CANCELADA.value)


def calcular_estado(total: float, monto_pagado: float) -> str:
    """Estado de una factura no cancelada según lo pagado."""
    if monto_pagado <= EPSILON:
        return EstadoFactura.PENDIENTE.value
    if monto_pagado + EPSILON >= total:
        return EstadoFactura.PAGADA.value
    return EstadoFactura.PARCIAL.value


def subtotal_item(cantidad: int, precio_unitario: float, descuento: float) -> float:
    return redondear_monto(cantidad * precio_unitario - descuento)


def pago_to_response(pago: PagoORM) -> Pago:
    return Pago(
        id_pago=pago.id,
        id_factura=pago.id_factura,
        monto=pago.monto,
        fecha_pago=pago.fecha_pago,
        metodo_pago=pago.metodo_pago,
        referencia=pago.referencia,
        observaciones=pago.observaciones,
        id_usuario=pago.id_usuario,
    )


def to_response(factura: FacturaORM) -> Factura:
    saldo = 0.0
    if factura.estado != EstadoFactura.CANCELADA.value:
        saldo = max(redondear_monto(factura.total - factura.monto_pagado), 0.0)
    return Factura(
        id_factura=factura.id,
        numero=factura.numero,
        fecha=factura.fecha,
        fecha_vencimiento=factura.fecha_vencimiento,
        id_propietario=factura.id_propietario,
        propietario_nombre=factura.propietario.nombre if factura.propietario else None,
        id_consulta=factura.id_consulta,
        subtotal=factura.subtotal,
        descuento=factura.descuento,
        impuesto=factura.impuesto,
        total=factura.total,
        monto_pagado=factura.monto_pagado,
        saldo_pendiente=saldo,
        estado=factura.estado,
        observaciones=factura.observaciones,
        items=[
            ItemFactura(
                id_item=item.id,
                descripcion=item.descripcion,
                tipo_item=item.tipo_item,
                codigo_producto=item.codigo_producto,
                cantidad=item.cantidad,
                precio_unitario=item.precio_unitario,
                descuento=item.descuento,
                subtotal=item.subtotal,
                orden=item.orden,
            )
            for item in factura.items
        ],
        pagos=[pago_to_response(p) for p in factura.pagos],
    )


class FacturaService(BaseService[FacturaORM, FacturaRepository]):
    """Emisión de facturas, pagos y cancelación."""

    def __init__(
        self,
        repository: FacturaRepository,
        propietario_repository: PropietarioRepository,
        consulta_repository: ConsultaRepository,
    ):
        super().__init__(repository)
        self.propietario_repo = propietario_repository
        self.consulta_repo = consulta_repository

    def _siguiente_numero(self) -> str:
        """FAC-YYYYMM-NNNN, correlativo dentro del mes."""
        prefijo = f"FAC-{get_local_naive_now().strftime('%Y%m')}-"
        secuencia = self.repository.count_by_numero_prefix(prefijo) + 1
        numero = f"{prefijo}{secuencia:04d}"
        while self.repository.find_by_numero(numero):
            secuencia += 1
            numero = f"{prefijo}{secuencia:04d}"
        return numero

    def _crear(
        self,
        id_propietario: str,
        items: List[ItemFacturaCreate],
        descuento: float,
        impuesto: float,
        fecha_vencimiento,
        observaciones: Optional[str],
        id_consulta: Optional[str],
        ctx: RequestContext,
    ) -> FacturaORM:
        """
        Calcula los importes y guarda la factura en estado PENDIENTE.

        Raises:
            ValidationException: Si un ítem o el total quedan negativos
        """
        items_orm: List[ItemFacturaORM] = []
        for orden, item in enumerate(items, start=1):
            subtotal = subtotal_item(item.cantidad, item.precio_unitario, item.descuento)
            if subtotal < 0:
                raise ValidationException(
                    message=f"El descuento del ítem '{item.descripcion}' supera su importe",
                    field=f"items[{orden - 1}].descuento"
                )
            items_orm.append(ItemFacturaORM(
                descripcion=item.descripcion.strip(),
                tipo_item=enum_to_value(item.tipo_item),
                codigo_producto=item.codigo_producto,
                cantidad=item.cantidad,
                precio_unitario=redondear_monto(item.precio_unitario),
                descuento=redondear_monto(item.descuento),
                subtotal=subtotal,
                orden=orden,
            ))

        subtotal_factura = redondear_monto(sum(i.subtotal for i in items_orm))
        total = redondear_monto(subtotal_factura - descuento + impuesto)
        if total < 0:
            raise ValidationException(message="El descuento supera el subtotal de la factura", field="descuento")

        factura = FacturaORM(
            numero=self._siguiente_numero(),
            fecha=get_local_naive_now(),
            fecha_vencimiento=fecha_vencimiento,
            subtotal=subtotal_factura,
            descuento=redondear_monto(descuento),
            impuesto=redondear_monto(impuesto),
            total=total,
            monto_pagado=0.0,
            estado=EstadoFactura.PENDIENTE.value,
            observaciones=observaciones,
            id_propietario=id_propietario,
            id_consulta=id_consulta,
        )
        factura.items = items_orm
        created = self.repository.create(factura, user_id=ctx.user_id)
        self.repository.commit()

        log_accion("FACTURA_EMITIDA", "factura", created.id, ctx.user_id, numero=created.numero, total=total)
        return created

    def _validar_consulta_sin_factura(self, id_consulta: str) -> None:
        if self.repository.find_by_consulta(id_consulta):
            raise DuplicateException(resource="Factura", field="id_consulta", value=id_consulta)

    def create_factura(self, data: FacturaCreate, ctx: RequestContext) -> Factura:
        validate_uuid(data.id_propietario, "id_propietario")
        propietario = self.propietario_repo.get_by_id_or_fail(data.id_propietario)
        if not propietario.activo:
            raise BusinessException("No se puede facturar a un propietario inactivo")

        if data.id_consulta:
            validate_uuid(data.id_consulta, "id_consulta")
            consulta = self.consulta_repo.get_by_id_or_fail(data.id_consulta)
            if consulta.paciente and consulta.paciente.id_propietario != propietario.id:
                raise BusinessException("La consulta corresponde a un paciente de otro propietario")
            self._validar_consulta_sin_factura(consulta.id)

        created = self._crear(
            propietario.id, data.items, data.descuento, data.impuesto,
            data.fecha_vencimiento, data.observaciones, data.id_consulta, ctx,
        )
        return to_response(created)

    def create_desde_consulta(
        self,
        id_consulta: str,
        data: Optional[FacturaDesdeConsulta],
        ctx: RequestContext
    ) -> Factura:
        """
        Factura una consulta: un ítem por la consulta (tarifa configurada) más
        los ítems adicionales. El propietario se toma del paciente.

        Raises:
            DuplicateException: Si la consulta ya tiene factura
        """
        data = data or FacturaDesdeConsulta()
        validate_uuid(id_consulta, "id_consulta")
        consulta = self.consulta_repo.get_by_id_or_fail(id_consulta)
        self._validar_consulta_sin_factura(consulta.id)

        descripcion = "Consulta médica"
        if consulta.diagnostico:
            descripcion = f"{descripcion} - {consulta.diagnostico.strip()}"[:300]
        items = [
            ItemFacturaCreate(
                descripcion=descripcion,
                tipo_item=TipoItem.SERVICIO,
                cantidad=1,
                precio_unitario=settings.tarifa_consulta,
            ),
            *data.items_adicionales,
        ]
        created = self._crear(
            consulta.paciente.id_propietario, items, data.descuento, data.impuesto,
            data.fecha_vencimiento, data.observaciones, consulta.id, ctx,
        )
        return to_response(created)

    def get_factura(self, factura_id: str, ctx: RequestContext) -> Factura:
        validate_uuid(factura_id, "factura_id")
        factura = self.repository.get_by_id_or_fail(factura_id)
        check_propietario_access(ctx, factura.id_propietario, "factura")
        return to_response(factura)

    def get_by_numero(self, numero: str, ctx: RequestContext) -> Factura:
        factura = self.repository.find_by_numero(numero.strip())
        if not factura:
            raise NotFoundException(resource="Factura", identifier=numero)
        check_propietario_access(ctx, factura.id_propietario, "factura")
        return to_response(factura)

    def get_facturas(
        self,
        ctx: RequestContext,
        estado: Optional[str] = None,
        id_propietario: Optional[str] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        page: int = 0,
        page_size: int = 50
    ) -> tuple[List[Factura], int]:
        if ctx.es_propietario:
            id_propietario = ctx.id
        facturas, total = self.repository.search(
            estado=enum_to_value(estado),
            id_propietario=id_propietario,
            desde=to_local_naive(desde),
            hasta=to_local_naive(hasta),
            page=page,
            page_size=page_size
        )
        return [to_response(f) for f in facturas], total

    def update_factura(self, factura_id: str, data: FacturaUpdate, ctx: RequestContext) -> Factura:
        validate_uuid(factura_id, "factura_id")
        factura = self.repository.get_by_id_or_fail(factura_id)
        if factura.estado in ESTADOS_FINALES:
            raise BusinessException(f"No se puede modificar una factura {factura.estado}")

        for campo, valor in data.model_dump(exclude_unset=True).items():
            setattr(factura, campo, valor)
        updated = self.repository.update(factura, user_id=ctx.user_id)
        self.repository.commit()
        return to_response(updated)

    def registrar_pago(self, factura_id: str, data: PagoCreate, ctx: RequestContext) -> Factura:
        """
        Agrega un pago y recalcula el estado.

        Raises:
            BusinessException: Factura cancelada o pagada, o monto mayor al saldo pendiente
        """
        validate_uuid(factura_id, "factura_id")
        factura = self.repository.get_by_id_or_fail(factura_id)
        if factura.estado == EstadoFactura.CANCELADA.value:
            raise BusinessException("No se pueden registrar pagos en una factura cancelada")
        if factura.estado == EstadoFactura.PAGADA.value:
            raise BusinessException("La factura ya está pagada")

        monto = redondear_monto(data.monto)
        saldo = redondear_monto(factura.total - factura.monto_pagado)
        if monto > saldo + EPSILON:
            raise BusinessException(
                f"El monto ({monto:.2f}) supera el saldo pendiente ({saldo:.2f})",
                details={"errors": {"monto": "Supera el saldo pendiente"}, "saldo_pendiente": saldo}
            )

        factura.pagos.append(PagoORM(
            monto=monto,
            fecha_pago=get_local_naive_now(),
            metodo_pago=enum_to_value(data.metodo_pago),
            referencia=data.referencia,
            observaciones=data.observaciones,
            id_usuario=ctx.user_id,
        ))
        factura.monto_pagado = redondear_monto(factura.monto_pagado + monto)
        factura.estado = calcular_estado(factura.total, factura.monto_pagado)

        updated = self.repository.update(factura, user_id=ctx.user_id)
        self.repository.commit()

        log_accion(
            "PAGO_REGISTRADO", "factura", factura.id, ctx.user_id,
            monto=monto, metodo=enum_to_value(data.metodo_pago), estado=updated.estado,
        )
        return to_response(updated)

    def get_pagos(self, factura_id: str, ctx: RequestContext) -> List[Pago]:
        validate_uuid(factura_id, "factura_id")
        factura = self.repository.get_by_id_or_fail(factura_id)
        check_propietario_access(ctx, factura.id_propietario, "factura")
        return [pago_to_response(p) for p in self.repository.find_pagos(factura.id)]

    def cancelar_factura(self, factura_id: str, motivo: Optional[str], ctx: RequestContext) -> Factura:
        """
        Raises:
            BusinessException: Si la factura está pagada o ya cancelada
        """
        validate_uuid(factura_id, "factura_id")
        factura = self.repository.get_by_id_or_fail(factura_id)
        if factura.estado == EstadoFactura.PAGADA.value:
            raise BusinessException("No se puede cancelar una factura pagada")
        if factura.estado == EstadoFactura.CANCELADA.value:
            raise BusinessException("La factura ya está cancelada")

        factura.estado = EstadoFactura.CANCELADA.value
        if motivo:
            nota = f"Cancelada: {motivo.strip()}"
            factura.observaciones = f"{factura.observaciones}\n{nota}" if factura.observaciones else nota

        updated = self.repository.update(factura, user_id=ctx.user_id)
        self.repository.commit()
        log_accion("FACTURA_CANCELADA", "factura", factura.id, ctx.user_id, numero=factura.numero)
        return to_response(updated)

    def get_estadisticas(
        self,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None
    ) -> EstadisticasFinancieras:
        desde, hasta = to_local_naive(desde), to_local_naive(hasta)
        totales = self.repository.totales(desde, hasta)
        facturado = redondear_monto(totales["total_facturado"])
        pagado = redondear_monto(totales["total_pagado"])
        return EstadisticasFinancieras(
            total_facturado=facturado,
            total_pagado=pagado,
            total_pendiente=redondear_monto(facturado - pagado),
            facturas_por_estado={estado: cantidad for estado, cantidad in self.repository.count_por_estado(desde, hasta)},
        )
