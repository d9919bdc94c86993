from .auth import router as auth_router
from .usuarios import router as usuarios_router
from .propietarios import router as propietarios_router
from .pacientes import router as pacientes_router
from .citas import router as citas_router
from .consultas import router as consultas_router, prescripciones_router
from .facturas import router as facturas_router
from .inventario import router as productos_router, categorias_router
from .proveedores import router as proveedores_router
from .templates import router as templates_consulta_router, prescripciones_router as templates_prescripcion_router
from .vacunas import router as vacunas_router, vacunaciones_router
from .notificaciones import router as notificaciones_router
from .dashboard import router as dashboard_router, reportes_router
from .public import router as public_router
from .portal import router as portal_router
from .ws import router as ws_router

__all__ = [
    "auth_router",
    "usuarios_router",
    "propietarios_router",
    "pacientes_router",
    "citas_router",
    "consultas_router",
    "prescripciones_router",
    "facturas_router",
    "productos_router",
    "categorias_router",
    "proveedores_router",
    "templates_consulta_router",
    "templates_prescripcion_router",
    "vacunas_router",
    "vacunaciones_router",
    "notificaciones_router",
    "dashboard_router",
    "reportes_router",
    "public_router",
    "portal_router",
    "ws_router",
]
