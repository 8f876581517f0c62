from fastapi import APIRouter, Depends, status

from app.dependencies.storage import get_storage
from app.schemas.common import APIResponse
from app.storage.facade import StorageService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=APIResponse[dict], status_code=status.HTTP_200_OK)
def health(storage: StorageService = Depends(get_storage)):
    """Report which storage backend is active."""
    return APIResponse(success=True, data=storage.describe())
