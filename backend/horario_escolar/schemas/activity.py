from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ActivityLogOut(BaseModel):
    id: str
    user_id: str | None = Field(alias="usuarioId")
    user_label: str | None = Field(alias="usuario")
    action: str = Field(alias="acao")
    message: str = Field(alias="detalhes")
    group_id: str | None = Field(alias="grupoId")
    entity_type: str | None = Field(alias="entidade")
    entity_id: str | None = Field(alias="entidadeId")
    created_at: datetime = Field(alias="timestamp")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
