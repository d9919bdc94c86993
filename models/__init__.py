from .usuarios import (
    Usuario,
    UsuarioCreate,
    UsuarioUpdate,
    PasswordUpdate,
    VeterinarioResumen,
    Role,
    ROLES_STAFF,
)
from .propietarios import Propietario, PropietarioCreate, PropietarioUpdate
from .pacientes import Paciente, PacienteCreate, PacienteUpdate, SexoPaciente
from .citas import (
    Cita,
    CitaCreate,
    CitaUpdate,
    CitaEstadoUpdate,
    CitaPublicaCreate,
    CitaClienteCreate,
    EstadoCita,
    Disponibilidad,
    HorarioDisponible,
)
from .consultas import (
    Consulta,
    ConsultaCreate,
    ConsultaUpdate,
    Prescripcion,
    PrescripcionCreate,
    PrescripcionUpdate,
    ViaAdministracion,
)
from .facturas import (
    Factura,
    FacturaCreate,
    FacturaDesdeConsulta,
    FacturaUpdate,
    FacturaCancelacion,
    Pago,
    PagoCreate,
    EstadoFactura,
    MetodoPago,
    TipoItem,
    EstadisticasFinancieras,
)
from .inventario import (
    Categoria,
    CategoriaCreate,
    Producto,
    ProductoCreate,
    ProductoUpdate,
    Movimiento,
    MovimientoCreate,
    TipoMovimiento,
    ValorInventario,
)
from .vacunas import Vacuna, VacunaCreate, VacunaUpdate, Vacunacion, VacunacionCreate
from .notificaciones import Notificacion, TipoNotificacion, ConteoNoLeidas
from .auth import (
    LoginRequest,
    ClienteRegistro,
    TokenResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    TokenValidation,
)
from .dashboard import Dashboard, Reporte, Periodo, Conteo
from .historial import HistorialClinico
from .common import (
    SuccessResponse,
    ErrorResponse,
    DeleteResponse,
    HealthCheckResponse,
    create_success_response,
    create_delete_response,
)

__all__ = [
    # Usuarios
    "Usuario", "UsuarioCreate", "UsuarioUpdate", "PasswordUpdate", "VeterinarioResumen",
    "Role", "ROLES_STAFF",
    # Propietarios y pacientes
    "Propietario", "PropietarioCreate", "PropietarioUpdate",
    "Paciente", "PacienteCreate", "PacienteUpdate", "SexoPaciente", "HistorialClinico",
    # Citas
    "Cita", "CitaCreate", "CitaUpdate", "CitaEstadoUpdate", "CitaPublicaCreate",
    "CitaClienteCreate", "EstadoCita", "Disponibilidad", "HorarioDisponible",
    # Consultas
    "Consulta", "ConsultaCreate", "ConsultaUpdate",
    "Prescripcion", "PrescripcionCreate", "PrescripcionUpdate", "ViaAdministracion",
    # Facturas
    "Factura", "FacturaCreate", "FacturaDesdeConsulta", "FacturaUpdate", "FacturaCancelacion",
    "Pago", "PagoCreate", "EstadoFactura", "MetodoPago", "TipoItem", "EstadisticasFinancieras",
    # Inventario
    "Categoria", "CategoriaCreate", "Producto", "ProductoCreate", "ProductoUpdate",
    "Movimiento", "MovimientoCreate", "TipoMovimiento", "ValorInventario",
    # Vacunas
    "Vacuna", "VacunaCreate", "VacunaUpdate", "Vacunacion", "VacunacionCreate",
    # Notificaciones
    "Notificacion", "TipoNotificacion", "ConteoNoLeidas",
    # Auth
    "LoginRequest", "ClienteRegistro", "TokenResponse", "ForgotPasswordRequest",
    "ResetPasswordRequest", "TokenValidation",
    # Dashboard
    "Dashboard", "Reporte", "Periodo", "Conteo",
    # Common responses
    "SuccessResponse", "ErrorResponse", "DeleteResponse", "HealthCheckResponse",
    "create_success_response", "create_delete_response",
]
