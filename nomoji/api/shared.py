"""Shared configuration routes: publish a config under a random ID, read it back."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from nomoji.api.deps import valid_config_id
from nomoji.api.errors import success_envelope
from nomoji.config import get_settings
from nomoji.db.session import get_db
from nomoji.schemas.config import NomojiConfigUpdate, ShareConfigResult
from nomoji.services.config_store import get_shared_config, save_shared_config
from nomoji.services.rate_limit import write_limit

router = APIRouter()


@router.post("", dependencies=[Depends(write_limit)])
def api_share_config(
    data: NomojiConfigUpdate,
    db: Session = Depends(get_db),
) -> dict:
    """Store the posted configuration for 30 days and return its share URL."""
    config_id = str(uuid.uuid4())
    save_shared_config(db, config_id, {"version": "1.0.0", **data.to_partial()})
    result = ShareConfigResult(
        config_id=config_id,
        url=f"{get_settings().public_base_url}/shared/{config_id}",
    )
    return success_envelope(result.model_dump(by_alias=True), message="Config shared successfully")


@router.get("/{config_id}")
def api_get_shared_config(
    config_id: str = Depends(valid_config_id),
    db: Session = Depends(get_db),
) -> dict:
    document = get_shared_config(db, config_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Config not found")
    return success_envelope(document)
