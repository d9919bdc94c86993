"""
Pruebas de los recordatorios y alertas programadas.

Las pruebas cubren:
- Ventanas de 23-24 horas y 55-60 minutos para las citas
- Alertas de vacunaciones vencidas y próximas a los veterinarios
- Resumen de stock bajo para administración y recepción
- Un fallo en un destinatario no detiene el lote
- Registro de las tareas en el planificador
"""

import logging
from datetime import date, datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from core.exceptions import DatabaseException
from database.models import (
    CitaORM,
    NotificacionORM,
    PacienteORM,
    ProductoORM,
    UsuarioORM,
    VacunaORM,
    VacunacionORM,
)
from repositories.cita_repository import CitaRepository
from repositories.inventario_repository import ProductoRepository
from repositories.notificacion_repository import NotificacionRepository
from repositories.usuario_repository import UsuarioRepository
from repositories.vacuna_repository import VacunacionRepository
from services.email_service import EmailService
from services.notificacion_service import NotificacionService
from services.recordatorio_service import RecordatorioService, crear_planificador, resumen_stock_bajo
from services.websocket_manager import ConnectionManager

AHORA = datetime(2030, 3, 4, 10, 0)
HOY = AHORA.date()


@pytest.fixture
def recordatorios(db_session: Session) -> RecordatorioService:
    return RecordatorioService(
        CitaRepository(db_session),
        VacunacionRepository(db_session),
        ProductoRepository(db_session),
        UsuarioRepository(db_session),
        NotificacionService(NotificacionRepository(db_session), ConnectionManager()),
        EmailService(enabled=False),
    )


def _notificaciones(db_session: Session, id_usuario: str):
    return db_session.query(NotificacionORM).filter(NotificacionORM.id_usuario == id_usuario).all()


class TestRecordatoriosCitas:

    def _cita(self, db_session: Session, paciente: PacienteORM, vet: UsuarioORM, fecha: datetime, estado: str):
        cita = CitaORM(
            fecha=fecha,
            motivo="Control de rutina",
            estado=estado,
            id_paciente=paciente.id,
            id_propietario=paciente.id_propietario,
            id_profesional=vet.id,
        )
        db_session.add(cita)
        db_session.commit()
        return cita

    def test_ventanas_de_24_horas_y_1_hora(
        self,
        db_session: Session,
        recordatorios: RecordatorioService,
        paciente_instance: PacienteORM,
        veterinario_usuario: UsuarioORM
    ):
        manana = self._cita(
            db_session, paciente_instance, veterinario_usuario, AHORA + timedelta(hours=23, minutes=30), "PENDIENTE"
        )
        pronto = self._cita(
            db_session, paciente_instance, veterinario_usuario, AHORA + timedelta(minutes=58), "CONFIRMADA"
        )
        # fuera de las ventanas o en estado final
        self._cita(db_session, paciente_instance, veterinario_usuario, AHORA + timedelta(minutes=58), "CANCELADA")
        self._cita(db_session, paciente_instance, veterinario_usuario, AHORA + timedelta(hours=2), "PENDIENTE")

        resultado = recordatorios.recordatorios_citas(ahora=AHORA)

        assert resultado.en_24_horas == 1
        assert resultado.en_1_hora == 1
        assert resultado.notificaciones == 2
        assert resultado.correos == 2

        notificaciones = {n.entidad_id: n for n in _notificaciones(db_session, veterinario_usuario.id)}
        assert set(notificaciones) == {manana.id, pronto.id}
        assert notificaciones[manana.id].titulo == "Recordatorio: Cita en 24 horas"
        assert notificaciones[pronto.id].titulo == "Recordatorio: Cita en 1 hora"
        assert "Paciente: Firulais" in notificaciones[pronto.id].mensaje
        assert notificaciones[pronto.id].tipo == "CITA"

    def test_sin_citas(self, db_session: Session, recordatorios: RecordatorioService):
        resultado = recordatorios.recordatorios_citas(ahora=AHORA)
        assert resultado.notificaciones == 0
        assert db_session.query(NotificacionORM).count() == 0


class TestAlertasVacunaciones:

    def _vacunacion(
        self,
        db_session: Session,
        paciente: PacienteORM,
        vacuna: VacunaORM,
        vet: UsuarioORM,
        proxima: date
    ) -> VacunacionORM:
        vacunacion = VacunacionORM(
            id_paciente=paciente.id,
            id_vacuna=vacuna.id,
            id_profesional=vet.id,
            fecha_aplicacion=proxima - timedelta(days=21),
            numero_dosis=1,
            proxima_dosis=proxima,
        )
        db_session.add(vacunacion)
        db_session.commit()
        return vacunacion

    def test_vencidas_y_proximas_van_a_los_veterinarios(
        self,
        db_session: Session,
        recordatorios: RecordatorioService,
        paciente_instance: PacienteORM,
        vacuna_instance: VacunaORM,
        veterinario_usuario: UsuarioORM,
        admin_usuario: UsuarioORM
    ):
        vencida = self._vacunacion(
            db_session, paciente_instance, vacuna_instance, veterinario_usuario, HOY - timedelta(days=3)
        )
        proxima = self._vacunacion(
            db_session, paciente_instance, vacuna_instance, veterinario_usuario, HOY + timedelta(days=5)
        )
        self._vacunacion(db_session, paciente_instance, vacuna_instance, veterinario_usuario, HOY + timedelta(days=30))

        resultado = recordatorios.alertas_vacunaciones(hoy=HOY)

        assert resultado.vencidas == 1
        assert resultado.proximas == 1
        assert resultado.notificaciones == 2

        por_entidad = {n.entidad_id: n for n in _notificaciones(db_session, veterinario_usuario.id)}
        assert por_entidad[vencida.id].titulo == "Alerta: Vacunación vencida"
        assert por_entidad[proxima.id].titulo == "Recordatorio: Vacunación próxima"
        assert "Vacuna: Polivalente canina" in por_entidad[proxima.id].mensaje
        assert por_entidad[proxima.id].tipo == "VACUNA"
        assert _notificaciones(db_session, admin_usuario.id) == []


class TestAlertaStockBajo:

    def _productos_agotados(self, db_session: Session, cantidad: int) -> None:
        for i in range(cantidad):
            db_session.add(ProductoORM(
                codigo=f"AGO-{i:02d}",
                nombre=f"Producto agotado {i:02d}",
                stock_actual=0,
                stock_minimo=2,
            ))
        db_session.commit()

    def test_resumen_limita_a_diez_productos(self, db_session: Session):
        self._productos_agotados(db_session, 12)
        productos = ProductoRepository(db_session).find_stock_bajo()

        resumen = resumen_stock_bajo(productos)

        assert resumen.startswith("Se encontraron 12 productos con stock bajo:")
        assert resumen.count("•") == 10
        assert resumen.endswith("... y 2 productos más")

    def test_resumen_sin_excedente(self, db_session: Session):
        self._productos_agotados(db_session, 3)
        resumen = resumen_stock_bajo(ProductoRepository(db_session).find_stock_bajo())
        assert resumen.count("•") == 3
        assert "más" not in resumen

    def test_alerta_a_administracion_y_recepcion(
        self,
        db_session: Session,
        recordatorios: RecordatorioService,
        admin_usuario: UsuarioORM,
        recepcion_usuario: UsuarioORM,
        veterinario_usuario: UsuarioORM
    ):
        self._productos_agotados(db_session, 12)

        assert recordatorios.alerta_stock_bajo() == 2

        for usuario in (admin_usuario, recepcion_usuario):
            [notificacion] = _notificaciones(db_session, usuario.id)
            assert notificacion.titulo == "Alerta: Productos con stock bajo"
            assert notificacion.tipo == "INVENTARIO"
            assert "... y 2 productos más" in notificacion.mensaje
        assert _notificaciones(db_session, veterinario_usuario.id) == []

    def test_sin_stock_bajo_no_notifica(
        self,
        db_session: Session,
        recordatorios: RecordatorioService,
        admin_usuario: UsuarioORM,
        producto_instance: ProductoORM
    ):
        assert recordatorios.alerta_stock_bajo() == 0
        assert db_session.query(NotificacionORM).count() == 0

    def test_fallo_en_un_destinatario_no_detiene_el_lote(
        self,
        db_session: Session,
        recordatorios: RecordatorioService,
        admin_usuario: UsuarioORM,
        recepcion_usuario: UsuarioORM,
        monkeypatch,
        caplog
    ):
        self._productos_agotados(db_session, 1)
        crear_original = recordatorios.notificaciones.crear

        def crear(id_usuario, *args, **kwargs):
            if id_usuario == admin_usuario.id:
                raise DatabaseException("Error al crear Notificación")
            return crear_original(id_usuario, *args, **kwargs)

        monkeypatch.setattr(recordatorios.notificaciones, "crear", crear)

        with caplog.at_level(logging.ERROR, logger="services.recordatorio_service"):
            assert recordatorios.alerta_stock_bajo() == 1

        assert "Error enviando alerta de stock bajo" in caplog.text
        assert len(_notificaciones(db_session, recepcion_usuario.id)) == 1


class TestPlanificador:

    def test_registra_las_tres_tareas(self):
        scheduler = crear_planificador()
        jobs = {job.id: job for job in scheduler.get_jobs()}

        assert set(jobs) == {"recordatorios_citas", "alertas_vacunaciones", "alerta_stock_bajo"}
        assert "minute='0'" in str(jobs["recordatorios_citas"].trigger)
        assert "hour='8'" in str(jobs["alertas_vacunaciones"].trigger)
        assert "hour='9'" in str(jobs["alerta_stock_bajo"].trigger)
        assert scheduler.running is False
