"""
Repositorio de tokens de recuperación de contraseña.
"""

from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import PasswordResetTokenORM


class PasswordResetTokenRepository(BaseRepository[PasswordResetTokenORM]):
    resource_name = "Token de recuperación"

    def __init__(self, db: Session):
        super().__init__(db, PasswordResetTokenORM)

    def find_by_token(self, token: str) -> Optional[PasswordResetTokenORM]:
        return self.db.query(PasswordResetTokenORM).filter(
            PasswordResetTokenORM.token == token
        ).one_or_none()

    def invalidar_por_email(self, email: str, tipo_usuario: str) -> int:
        """Marca como usados los tokens pendientes del email."""
        invalidados = (
            self.db.query(PasswordResetTokenORM)
            .filter(
                PasswordResetTokenORM.email == email,
                PasswordResetTokenORM.tipo_usuario == tipo_usuario,
                PasswordResetTokenORM.usado == False,
            )
            .update({PasswordResetTokenORM.usado: True}, synchronize_session=False)
        )
        self.db.flush()
        return invalidados

    def eliminar_expirados(self, ahora: datetime) -> int:
        eliminados = (
            self.db.query(PasswordResetTokenORM)
            .filter(PasswordResetTokenORM.expires_at < ahora)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return eliminados
