from .db import (
    SessionLocal,
    create_tables,
    engine,
    get_db,
    get_database_url,
    hash_password,
    verify_password,
)
from .models import (
    Base,
    UsuarioORM,
    PropietarioORM,
    PacienteORM,
    CitaORM,
    ConsultaORM,
    PrescripcionORM,
    ItemPrescripcionORM,
    FacturaORM,
    ItemFacturaORM,
    PagoORM,
    CategoriaProductoORM,
    ProductoORM,
    MovimientoInventarioORM,
    VacunaORM,
    VacunacionORM,
    NotificacionORM,
    PasswordResetTokenORM,
)

__all__ = [
    "SessionLocal",
    "create_tables",
    "engine",
    "get_db",
    "get_database_url",
    "hash_password",
    "verify_password",
    "Base",
    "UsuarioORM",
    "PropietarioORM",
    "PacienteORM",
    "CitaORM",
    "ConsultaORM",
    "PrescripcionORM",
    "ItemPrescripcionORM",
    "FacturaORM",
    "ItemFacturaORM",
    "PagoORM",
    "CategoriaProductoORM",
    "ProductoORM",
    "MovimientoInventarioORM",
    "VacunaORM",
    "VacunacionORM",
    "NotificacionORM",
    "PasswordResetTokenORM",
]
