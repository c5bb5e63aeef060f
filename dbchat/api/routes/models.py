"""
Model Routes

Lists the models clients may pick for a chat turn.
"""

import logging

from fastapi import APIRouter

from dbchat.models.api import ModelsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/models", response_model=ModelsResponse)
async def list_models() -> ModelsResponse:
    """
    List models of every configured provider.

    default_model is the server default when its provider is configured,
    otherwise the first available model (None when nothing is configured).
    """
    from dbchat.api.main import get_manager

    manager = get_manager()
    available = manager.get_available_models()
    slugs = [model.slug for model in available]

    default_model = manager.default_model
    if default_model not in slugs:
        default_model = slugs[0] if slugs else None

    return ModelsResponse(models=available, default_model=default_model)
