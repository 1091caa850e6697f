"""Documents API endpoints.

Provides endpoints for document listing, search, CRUD, sharing and version
history. Reads are open to anonymous callers for public documents; every
mutation requires authentication.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.common import APIResponse, PaginatedResponse, Pagination
from ..schemas.document import (
    DocumentCreate,
    DocumentDetail,
    DocumentListItem,
    DocumentUpdate,
    ShareItem,
    ShareRequest,
    UnshareRequest,
    VersionItem,
)
from ..services import document_service, listing_service, share_service
from ..services.access_service import AccessBasis, AccessDecision, get_access_service
from ..services.auth_service import get_current_user, get_optional_user

router = APIRouter(prefix="/api/documents", tags=["Documents"])


def _caller_id(user: Optional[User]) -> Optional[UUID]:
    return user.id if user is not None else None


# ============================================================================
# Listing and Search
# ============================================================================


@router.get(
    "",
    response_model=PaginatedResponse[List[DocumentListItem]],
    summary="List documents",
    description="Documents visible to the caller, newest update first, optionally filtered.",
)
async def list_documents(
    page: int = Query(1, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Page size (1-50, default 10)"),
    search: Optional[str] = Query(None, description="Title/content search term"),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[List[DocumentListItem]]:
    """
    List documents visible to the caller.

    Anonymous callers see public documents; authenticated callers also see
    their own documents and those shared with them.
    """
    page, limit = listing_service.clamp_pagination(page, limit)
    items, total = await listing_service.list_documents(
        db, _caller_id(current_user), page, limit, search=search
    )
    return PaginatedResponse(
        data=items,
        pagination=Pagination.build(page, limit, total),
    )


@router.get(
    "/search",
    response_model=PaginatedResponse[List[DocumentListItem]],
    summary="Search documents",
    responses={400: {"description": "Search query is required"}},
)
async def search_documents(
    query: Optional[str] = Query(None, description="Search term"),
    page: int = Query(1, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Page size (1-50, default 10)"),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[List[DocumentListItem]]:
    """
    Search visible documents by title and content.

    Results are ordered by relevance (title matches before content
    matches), then by most recent update.
    """
    if not query or not query.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query is required",
        )

    page, limit = listing_service.clamp_pagination(page, limit)
    items, total = await listing_service.list_documents(
        db, _caller_id(current_user), page, limit, search=query
    )
    return PaginatedResponse(
        data=items,
        pagination=Pagination.build(page, limit, total),
    )


# ============================================================================
# CRUD
# ============================================================================


@router.post(
    "",
    response_model=APIResponse[DocumentDetail],
    status_code=status.HTTP_201_CREATED,
    summary="Create a document",
    responses={
        201: {"description": "Document created"},
        400: {"description": "Validation error"},
        401: {"description": "Not authenticated"},
    },
)
async def create_document(
    document_data: DocumentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[DocumentDetail]:
    """Create a document; its first version is recorded with it."""
    document = await document_service.create_document(db, document_data, current_user)
    detail = await document_service.build_document_detail(
        db,
        document,
        AccessDecision(True, AccessBasis.AUTHOR, authenticated=True),
    )
    return APIResponse(data=detail, message="Document created successfully")


@router.get(
    "/{document_id}",
    response_model=APIResponse[DocumentDetail],
    summary="Get a document",
    responses={
        401: {"description": "Private document, not authenticated"},
        403: {"description": "No access to this document"},
        404: {"description": "Document not found"},
    },
)
async def get_document(
    document_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[DocumentDetail]:
    """Return a document with its author, shares and mentions."""
    detail = await document_service.get_document_detail(
        db, document_id, _caller_id(current_user)
    )
    return APIResponse(data=detail)


@router.put(
    "/{document_id}",
    response_model=APIResponse[DocumentDetail],
    summary="Update a document",
    responses={
        400: {"description": "No fields to update or validation error"},
        401: {"description": "Not authenticated"},
        403: {"description": "No edit permission"},
        404: {"description": "Document not found"},
    },
)
async def update_document(
    document_id: UUID,
    update_data: DocumentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[DocumentDetail]:
    """
    Update title, content and/or visibility.

    Changing the content appends a new version.
    """
    document = await document_service.update_document(
        db, document_id, update_data, current_user
    )
    decision = await get_access_service(db).resolve_access(
        document, current_user.id
    )
    detail = await document_service.build_document_detail(db, document, decision)
    return APIResponse(data=detail, message="Document updated successfully")


@router.delete(
    "/{document_id}",
    response_model=APIResponse[None],
    summary="Delete a document",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Only the author can delete"},
        404: {"description": "Document not found"},
    },
)
async def delete_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[None]:
    """Delete a document with its shares, versions and mentions."""
    await document_service.delete_document(db, document_id, current_user)
    return APIResponse(message="Document deleted successfully")


# ============================================================================
# Sharing
# ============================================================================


@router.post(
    "/{document_id}/share",
    response_model=APIResponse[ShareItem],
    summary="Share a document",
    responses={
        400: {"description": "Cannot share with yourself"},
        403: {"description": "Only the author can share"},
        404: {"description": "Document or user not found"},
    },
)
async def share_document(
    document_id: UUID,
    share_data: ShareRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[ShareItem]:
    """Grant a user VIEW or EDIT access; an existing grant is replaced."""
    share = await share_service.share_document(db, document_id, share_data, current_user)
    return APIResponse(data=share, message="Document shared successfully")


@router.delete(
    "/{document_id}/share",
    response_model=APIResponse[None],
    summary="Remove a share",
    responses={
        403: {"description": "Only the author can manage sharing"},
        404: {"description": "Document not found"},
    },
)
async def unshare_document(
    document_id: UUID,
    unshare_data: UnshareRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[None]:
    """Revoke a user's access. Succeeds even when no share exists."""
    await share_service.unshare_document(
        db, document_id, unshare_data.user_id, current_user
    )
    return APIResponse(message="Document unshared successfully")


# ============================================================================
# Versions
# ============================================================================


@router.get(
    "/{document_id}/versions",
    response_model=APIResponse[List[VersionItem]],
    summary="List document versions",
)
async def list_versions(
    document_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[List[VersionItem]]:
    """Versions of a readable document, newest first."""
    versions = await document_service.list_versions(
        db, document_id, _caller_id(current_user)
    )
    return APIResponse(data=versions)


@router.get(
    "/{document_id}/versions/{version_id}",
    response_model=APIResponse[VersionItem],
    summary="Get a document version",
    responses={404: {"description": "Document or version not found"}},
)
async def get_version(
    document_id: UUID,
    version_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[VersionItem]:
    """A single version; it must belong to the given document."""
    version = await document_service.get_version(
        db, document_id, version_id, _caller_id(current_user)
    )
    return APIResponse(data=version)
