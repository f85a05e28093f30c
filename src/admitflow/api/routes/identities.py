"""Identity cleanup endpoints for administrators."""

from fastapi import APIRouter

from admitflow.api.dependencies import RegistryStoreDep
from admitflow.api.models import APIResponse, OrphanedIdentityResponse

router = APIRouter(prefix="/identities", tags=["identities"])


@router.get("/orphaned", response_model=APIResponse[list[OrphanedIdentityResponse]])
def list_orphaned_identities(
    store: RegistryStoreDep,
) -> APIResponse[list[OrphanedIdentityResponse]]:
    """List identities whose rollback failed, oldest first, for manual cleanup."""
    orphans = store.list_orphaned_identities()
    return APIResponse(data=[OrphanedIdentityResponse.model_validate(o) for o in orphans])
