"""
Pruebas de los repositorios contra la base de datos de prueba.

Las pruebas cubren:
- Operaciones CRUD del repositorio base (borrado lógico y restauración)
- Búsqueda de citas por profesional y rango
- Totales de facturación
- Consultas de usuarios y vacunaciones
- Tokens de recuperación de contraseña
"""

import pytest
from datetime import timedelta
from sqlalchemy.orm import Session

from database.models import (
    CitaORM,
    FacturaORM,
    PacienteORM,
    PasswordResetTokenORM,
    PropietarioORM,
    UsuarioORM,
    VacunaORM,
    VacunacionORM,
)
from repositories.cita_repository import CitaRepository
from repositories.factura_repository import FacturaRepository
from repositories.propietario_repository import PropietarioRepository
from repositories.usuario_repository import UsuarioRepository
from repositories.vacuna_repository import VacunacionRepository
from repositories.password_reset_repository import PasswordResetTokenRepository
from core.exceptions import NotFoundException
from utils.datetime_utils import get_local_today, get_local_naive_now


class TestBaseRepository:

    def test_get_by_id_or_fail(self, db_session: Session, propietario_instance: PropietarioORM):
        repo = PropietarioRepository(db_session)
        assert repo.get_by_id_or_fail(propietario_instance.id).nombre == propietario_instance.nombre

        with pytest.raises(NotFoundException) as exc:
            repo.get_by_id_or_fail("00000000-0000-0000-0000-000000000000")
        assert "Propietario" in exc.value.message

    def test_borrado_logico_y_restauracion(
        self,
        db_session: Session,
        admin_usuario: UsuarioORM,
        propietario_instance: PropietarioORM
    ):
        repo = PropietarioRepository(db_session)
        repo.delete(propietario_instance, user_id=admin_usuario.id)
        repo.commit()

        assert propietario_instance.activo is False
        assert propietario_instance.deleted_at is not None
        assert repo.count() == 0
        assert repo.count(solo_activos=False) == 1

        repo.restore(propietario_instance, user_id=admin_usuario.id)
        repo.commit()
        assert propietario_instance.activo is True
        assert propietario_instance.deleted_at is None

    def test_create_registra_auditoria(self, db_session: Session, admin_usuario: UsuarioORM):
        repo = PropietarioRepository(db_session)
        creado = repo.create(PropietarioORM(nombre="Nuevo"), user_id=admin_usuario.id)
        repo.commit()

        assert creado.id_usuario_creacion == admin_usuario.id
        assert creado.fecha_creacion is not None


class TestPropietarioRepository:

    def test_find_by_email_ignora_mayusculas(self, db_session: Session, propietario_instance: PropietarioORM):
        repo = PropietarioRepository(db_session)
        assert repo.find_by_email("LAURA@correo.test").id == propietario_instance.id

    def test_search_por_documento(
        self,
        db_session: Session,
        propietario_instance: PropietarioORM,
        otro_paciente: PacienteORM
    ):
        propietarios, total = PropietarioRepository(db_session).search(texto="99887")
        assert total == 1
        assert propietarios[0].id == otro_paciente.id_propietario


class TestCitaRepository:

    def test_rango_excluye_canceladas_y_la_cita_editada(
        self,
        db_session: Session,
        cita_instance: CitaORM,
        veterinario_usuario: UsuarioORM
    ):
        repo = CitaRepository(db_session)
        inicio = cita_instance.fecha - timedelta(hours=1)
        fin = cita_instance.fecha + timedelta(hours=1)

        assert repo.find_by_profesional_en_rango(veterinario_usuario.id, inicio, fin) == [cita_instance]
        assert repo.find_by_profesional_en_rango(
            veterinario_usuario.id, inicio, fin, excluir_id=cita_instance.id
        ) == []

        cita_instance.estado = "CANCELADA"
        db_session.commit()
        assert repo.find_by_profesional_en_rango(veterinario_usuario.id, inicio, fin) == []

    def test_rango_semiabierto(self, db_session: Session, cita_instance: CitaORM, veterinario_usuario: UsuarioORM):
        repo = CitaRepository(db_session)
        assert repo.find_by_profesional_en_rango(
            veterinario_usuario.id, cita_instance.fecha - timedelta(hours=1), cita_instance.fecha
        ) == []

    def test_count_por_estado(self, db_session: Session, cita_instance: CitaORM):
        assert CitaRepository(db_session).count_por_estado() == [("PENDIENTE", 1)]


class TestFacturaRepository:

    def _factura(self, numero: str, total: float, pagado: float, estado: str, propietario: PropietarioORM):
        return FacturaORM(
            numero=numero,
            subtotal=total,
            total=total,
            monto_pagado=pagado,
            estado=estado,
            id_propietario=propietario.id,
        )

    def test_totales_excluyen_canceladas(self, db_session: Session, propietario_instance: PropietarioORM):
        db_session.add_all([
            self._factura("FAC-202601-0001", 1000, 1000, "PAGADA", propietario_instance),
            self._factura("FAC-202601-0002", 500, 200, "PARCIAL", propietario_instance),
            self._factura("FAC-202601-0003", 9000, 0, "CANCELADA", propietario_instance),
        ])
        db_session.commit()

        repo = FacturaRepository(db_session)
        assert repo.totales() == {"total_facturado": 1500.0, "total_pagado": 1200.0}
        assert dict(repo.count_por_estado()) == {"PAGADA": 1, "PARCIAL": 1, "CANCELADA": 1}
        assert repo.count_by_numero_prefix("FAC-202601-") == 3
        assert repo.find_by_numero("FAC-202601-0002").total == 500


class TestUsuarioRepository:

    def test_activos_por_roles(
        self,
        db_session: Session,
        admin_usuario: UsuarioORM,
        veterinario_usuario: UsuarioORM,
        recepcion_usuario: UsuarioORM
    ):
        recepcion_usuario.activo = False
        db_session.commit()

        usuarios = UsuarioRepository(db_session).find_activos_por_roles(["ADMIN", "RECEPCION"])
        assert [u.id for u in usuarios] == [admin_usuario.id]

    def test_veterinarios_activos(
        self,
        db_session: Session,
        admin_usuario: UsuarioORM,
        veterinario_usuario: UsuarioORM
    ):
        assert UsuarioRepository(db_session).find_veterinarios_activos() == [veterinario_usuario]


class TestVacunacionRepository:

    def test_proximas_y_vencidas(
        self,
        db_session: Session,
        paciente_instance: PacienteORM,
        vacuna_instance: VacunaORM,
        veterinario_usuario: UsuarioORM
    ):
        hoy = get_local_today()

        def vacunacion(proxima):
            return VacunacionORM(
                id_paciente=paciente_instance.id,
                id_vacuna=vacuna_instance.id,
                id_profesional=veterinario_usuario.id,
                fecha_aplicacion=hoy - timedelta(days=30),
                numero_dosis=1,
                proxima_dosis=proxima,
            )

        hoy_mismo = vacunacion(hoy)
        en_una_semana = vacunacion(hoy + timedelta(days=7))
        ayer = vacunacion(hoy - timedelta(days=1))
        sin_proxima = vacunacion(None)
        db_session.add_all([hoy_mismo, en_una_semana, ayer, sin_proxima])
        db_session.commit()

        repo = VacunacionRepository(db_session)
        assert repo.find_proximas(hoy, hoy + timedelta(days=7)) == [hoy_mismo, en_una_semana]
        assert repo.find_vencidas(hoy) == [ayer]
        assert repo.count_vencidas(hoy) == 1


class TestPasswordResetTokenRepository:

    def _token(self, email: str, expira_en: timedelta, usado: bool = False) -> PasswordResetTokenORM:
        return PasswordResetTokenORM(
            token=f"tok-{email}-{expira_en.total_seconds()}",
            email=email,
            tipo_usuario="USUARIO",
            expires_at=get_local_naive_now() + expira_en,
            usado=usado,
        )

    def test_invalidar_por_email(self, db_session: Session):
        repo = PasswordResetTokenRepository(db_session)
        vigente = repo.create(self._token("a@clinica.com", timedelta(hours=1)))
        otro = repo.create(self._token("b@clinica.com", timedelta(hours=1)))
        repo.commit()

        assert repo.invalidar_por_email("a@clinica.com", "USUARIO") == 1
        repo.commit()
        db_session.refresh(vigente)
        db_session.refresh(otro)
        assert vigente.usado is True
        assert otro.usado is False
        assert repo.find_by_token(otro.token).email == "b@clinica.com"

    def test_eliminar_expirados(self, db_session: Session):
        repo = PasswordResetTokenRepository(db_session)
        repo.create(self._token("a@clinica.com", timedelta(hours=-2)))
        vigente = repo.create(self._token("a@clinica.com", timedelta(hours=2)))
        repo.commit()

        assert repo.eliminar_expirados(get_local_naive_now()) == 1
        repo.commit()
        assert repo.count(solo_activos=False) == 1
        assert repo.find_by_token(vigente.token) is not None
