from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from database.db import get_db
from models.auth import (
    LoginRequest,
    ClienteRegistro,
    TokenResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    TokenValidation,
)
from models.common import create_success_response
from repositories.usuario_repository import UsuarioRepository
from repositories.propietario_repository import PropietarioRepository
from repositories.password_reset_repository import PasswordResetTokenRepository
from services.auth_service import AuthService
from services.password_reset_service import PasswordResetService, TIPO_USUARIO, TIPO_PROPIETARIO
from services.email_service import get_email_service

router = APIRouter(prefix="/auth", tags=["auth"])

MENSAJE_RECUPERACION = "Si el email está registrado, recibirás un enlace para restablecer la contraseña"


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(UsuarioRepository(db), PropietarioRepository(db))


def get_password_reset_service(db: Session = Depends(get_db)) -> PasswordResetService:
    return PasswordResetService(
        PasswordResetTokenRepository(db),
        UsuarioRepository(db),
        PropietarioRepository(db),
        get_email_service(),
    )


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/login", response_model=TokenResponse)
def login(
    login_data: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """
    Login del staff con JSON (email y contraseña).
    """
    return service.login_usuario(login_data.email, login_data.password, _client_ip(request))


@router.post("/token")
def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service),
):
    """
    OAuth2 compatible token endpoint (form-data).
    Used by Swagger UI and OAuth2 clients; `username` is the email.
    """
    token = service.login_usuario(form_data.username, form_data.password, _client_ip(request))
    return {"access_token": token.access_token, "token_type": token.token_type}


@router.post("/cliente/login", response_model=TokenResponse)
def login_cliente(
    login_data: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Login de propietarios en el portal de clientes."""
    return service.login_cliente(login_data.email, login_data.password, _client_ip(request))


@router.post("/cliente/registro", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def registrar_cliente(
    data: ClienteRegistro,
    service: AuthService = Depends(get_auth_service),
):
    """
    Un propietario registrado en la clínica crea su contraseña.
    El email y el documento deben coincidir con su ficha.
    """
    return service.registrar_cliente(data)


@router.post("/forgot-password")
def forgot_password(
    data: ForgotPasswordRequest,
    tipo: str = Query(TIPO_USUARIO, pattern=f"^({TIPO_USUARIO}|{TIPO_PROPIETARIO})$"),
    service: PasswordResetService = Depends(get_password_reset_service),
):
    """
    Solicita el enlace de recuperación. Responde igual exista o no la cuenta.
    """
    service.solicitar(data.email, tipo)
    return create_success_response(MENSAJE_RECUPERACION)


@router.get("/reset-password/validar", response_model=TokenValidation)
def validar_token(
    token: str,
    service: PasswordResetService = Depends(get_password_reset_service),
):
    return TokenValidation(valido=service.validar_token(token))


@router.post("/reset-password")
def reset_password(
    data: ResetPasswordRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
):
    service.restablecer(data.token, data.password)
    return create_success_response("Contraseña actualizada correctamente")
