# backend/ldgrowth/models/template_model.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Template(BaseModel):
    """Evaluation form attached to a store."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    store_id: int
    name: str
    is_active: bool = True
    created_at: Optional[datetime] = None
