from pydantic import BaseModel, Field
from typing import Optional

from models.common import EMAIL_PATTERN
from models.usuarios import Role


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=150)
    password: str = Field(..., min_length=1, max_length=100)


class ClienteRegistro(BaseModel):
    """Un propietario ya registrado en la clínica crea su contraseña del portal."""
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=150)
    documento: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=6, max_length=100)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Vigencia en segundos")
    id: str
    nombre: str
    email: Optional[str] = None
    rol: Role
    tipo: str


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=150)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=6, max_length=100)


class TokenValidation(BaseModel):
    valido: bool
