from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from horario_escolar.models.audit_entry import ChangeType
from horario_escolar.models.user import UserRole
from horario_escolar.schemas.user import UserRef


class AuditEntryOut(BaseModel):
    id: int
    tipo_alteracao: ChangeType = Field(alias="tipoAlteracao")
    tabela: str
    registro_id: int | None = Field(default=None, alias="registroId")
    grupo_id: str | None = Field(default=None, alias="grupoId")
    dia: str | None = None
    slot_id: int | None = Field(default=None, alias="slotId")
    campo_alterado: str | None = Field(default=None, alias="campoAlterado")
    valor_anterior: Any = Field(default=None, alias="valorAnterior")
    valor_novo: Any = Field(default=None, alias="valorNovo")
    usuario: UserRef
    timestamp: str
    detalhes: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class ChangeTypeCount(BaseModel):
    tipo: ChangeType
    quantidade: int


class UserChangeCount(BaseModel):
    nome: str
    perfil: UserRole
    quantidade: int


class AuditStatistics(BaseModel):
    total_alteracoes: int = Field(alias="totalAlteracoes")
    total_usuarios: int = Field(alias="totalUsuarios")
    total_grupos: int = Field(alias="totalGrupos")
    primeira_alteracao: str | None = Field(default=None, alias="primeiraAlteracao")
    ultima_alteracao: str | None = Field(default=None, alias="ultimaAlteracao")
    por_tipo: list[ChangeTypeCount] = Field(default_factory=list, alias="porTipo")
    por_usuario: list[UserChangeCount] = Field(default_factory=list, alias="porUsuario")

    model_config = ConfigDict(populate_by_name=True)
