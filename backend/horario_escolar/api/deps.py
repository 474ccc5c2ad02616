from collections.abc import Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from horario_escolar.core.security import decode_token
from horario_escolar.db.session import SessionLocal
from horario_escolar.models.user import EDITOR_ROLES, User, UserRole
from horario_escolar.schemas.timetable import SchoolLayout
from horario_escolar.services.layout import load_school_layout

bearer_scheme = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token inválido ou expirado",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    try:
        subject = decode_token(credentials.credentials).get("sub")
    except JWTError as exc:
        raise _unauthorized() from exc

    user = db.get(User, subject) if subject else None
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usuário inativo")
    return user


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    allowed = frozenset(roles)

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Sem permissão para esta ação")
        return current_user

    return role_checker


# Timetable, snapshot, import and layout writes.
require_editor = require_roles(*EDITOR_ROLES)


def get_layout(db: Session = Depends(get_db)) -> SchoolLayout:
    return load_school_layout(db)
