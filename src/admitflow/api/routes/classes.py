"""Class endpoints."""

from fastapi import APIRouter, status

from admitflow.api.dependencies import RegistryStoreDep
from admitflow.api.models import APIResponse, ClassCreate, ClassResponse, class_to_response

router = APIRouter(prefix="/classes", tags=["classes"])


@router.get("", response_model=APIResponse[list[ClassResponse]])
def list_classes(store: RegistryStoreDep) -> APIResponse[list[ClassResponse]]:
    """List all classes."""
    return APIResponse(data=[class_to_response(c) for c in store.list_classes()])


@router.post(
    "",
    response_model=APIResponse[ClassResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_class(school_class: ClassCreate, store: RegistryStoreDep) -> APIResponse[ClassResponse]:
    """Create a new class."""
    created = store.create_class(name=school_class.name, class_code=school_class.class_code)
    return APIResponse(data=class_to_response(created))
