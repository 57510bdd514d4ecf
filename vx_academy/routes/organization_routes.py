from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from vx_academy.core.database import get_db
from vx_academy.core.dependencies import get_current_user, get_current_admin_user
from vx_academy.models.user_model import User
from vx_academy.schemas import organization_schema as schemas
from vx_academy.schemas.common_schema import ApiResponse, DeleteResult
from vx_academy.crud import organization_crud as crud

logger = logging.getLogger(__name__)

asset_router = APIRouter(prefix="/assets", tags=["Assets"])
sub_asset_router = APIRouter(prefix="/sub-assets", tags=["Assets"])
organization_router = APIRouter(prefix="/organizations", tags=["Organizations"])
sub_organization_router = APIRouter(prefix="/sub-organizations", tags=["Organizations"])

# --- Asset Endpoints ---
@asset_router.post("/", response_model=ApiResponse[schemas.AssetDisplay], status_code=status.HTTP_201_CREATED)
def create_asset(asset_in: schemas.AssetCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    asset = crud.create_asset(db, asset_in)
    return ApiResponse(data=schemas.AssetDisplay.model_validate(asset), message="Asset created.")

@asset_router.get("/", response_model=ApiResponse[List[schemas.AssetDisplay]])
def list_assets(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=[schemas.AssetDisplay.model_validate(a) for a in crud.get_assets(db)])

@asset_router.get("/{asset_id}", response_model=ApiResponse[schemas.AssetDisplay])
def read_asset(asset_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.AssetDisplay.model_validate(crud.get_asset_or_raise(db, asset_id)))

@asset_router.put("/{asset_id}", response_model=ApiResponse[schemas.AssetDisplay])
def update_asset(
    asset_id: int,
    asset_in: schemas.AssetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    asset = crud.update_asset(db, asset_id, asset_in)
    return ApiResponse(data=schemas.AssetDisplay.model_validate(asset), message="Asset updated.")

@asset_router.delete("/{asset_id}", response_model=ApiResponse[DeleteResult])
def delete_asset(asset_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_asset(db, asset_id)
    return ApiResponse(data=DeleteResult(id=asset_id), message="Asset deleted.")

# --- Sub-asset Endpoints ---
@sub_asset_router.post("/", response_model=ApiResponse[schemas.SubAssetDisplay], status_code=status.HTTP_201_CREATED)
def create_sub_asset(sub_asset_in: schemas.SubAssetCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    sub_asset = crud.create_sub_asset(db, sub_asset_in)
    return ApiResponse(data=schemas.SubAssetDisplay.model_validate(sub_asset), message="Sub-asset created.")

@sub_asset_router.get("/", response_model=ApiResponse[List[schemas.SubAssetDisplay]])
def list_sub_assets(
    asset_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return ApiResponse(data=[schemas.SubAssetDisplay.model_validate(s) for s in crud.get_sub_assets(db, asset_id)])

@sub_asset_router.put("/{sub_asset_id}", response_model=ApiResponse[schemas.SubAssetDisplay])
def update_sub_asset(
    sub_asset_id: int,
    sub_asset_in: schemas.SubAssetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    sub_asset = crud.update_sub_asset(db, sub_asset_id, sub_asset_in)
    return ApiResponse(data=schemas.SubAssetDisplay.model_validate(sub_asset), message="Sub-asset updated.")

@sub_asset_router.delete("/{sub_asset_id}", response_model=ApiResponse[DeleteResult])
def delete_sub_asset(sub_asset_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_sub_asset(db, sub_asset_id)
    return ApiResponse(data=DeleteResult(id=sub_asset_id), message="Sub-asset deleted.")

# --- Organization Endpoints ---
@organization_router.post("/", response_model=ApiResponse[schemas.OrganizationDisplay], status_code=status.HTTP_201_CREATED)
def create_organization(
    organization_in: schemas.OrganizationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    organization = crud.create_organization(db, organization_in)
    return ApiResponse(data=schemas.OrganizationDisplay.model_validate(organization), message="Organization created.")

@organization_router.get("/", response_model=ApiResponse[List[schemas.OrganizationDisplay]])
def list_organizations(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=[schemas.OrganizationDisplay.model_validate(o) for o in crud.get_organizations(db)])

@organization_router.get("/{organization_id}", response_model=ApiResponse[schemas.OrganizationDisplay])
def read_organization(organization_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ApiResponse(data=schemas.OrganizationDisplay.model_validate(crud.get_organization_or_raise(db, organization_id)))

@organization_router.put("/{organization_id}", response_model=ApiResponse[schemas.OrganizationDisplay])
def update_organization(
    organization_id: int,
    organization_in: schemas.OrganizationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    organization = crud.update_organization(db, organization_id, organization_in)
    return ApiResponse(data=schemas.OrganizationDisplay.model_validate(organization), message="Organization updated.")

@organization_router.delete("/{organization_id}", response_model=ApiResponse[DeleteResult])
def delete_organization(organization_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_organization(db, organization_id)
    return ApiResponse(data=DeleteResult(id=organization_id), message="Organization deleted.")

# --- Sub-organization Endpoints ---
@sub_organization_router.post("/", response_model=ApiResponse[schemas.SubOrganizationDisplay], status_code=status.HTTP_201_CREATED)
def create_sub_organization(
    sub_organization_in: schemas.SubOrganizationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    sub_organization = crud.create_sub_organization(db, sub_organization_in)
    return ApiResponse(data=schemas.SubOrganizationDisplay.model_validate(sub_organization), message="Sub-organization created.")

@sub_organization_router.get("/", response_model=ApiResponse[List[schemas.SubOrganizationDisplay]])
def list_sub_organizations(
    organization_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    sub_organizations = crud.get_sub_organizations(db, organization_id)
    return ApiResponse(data=[schemas.SubOrganizationDisplay.model_validate(s) for s in sub_organizations])

@sub_organization_router.put("/{sub_organization_id}", response_model=ApiResponse[schemas.SubOrganizationDisplay])
def update_sub_organization(
    sub_organization_id: int,
    sub_organization_in: schemas.SubOrganizationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    sub_organization = crud.update_sub_organization(db, sub_organization_id, sub_organization_in)
    return ApiResponse(data=schemas.SubOrganizationDisplay.model_validate(sub_organization), message="Sub-organization updated.")

@sub_organization_router.delete("/{sub_organization_id}", response_model=ApiResponse[DeleteResult])
def delete_sub_organization(sub_organization_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_admin_user)):
    crud.delete_sub_organization(db, sub_organization_id)
    return ApiResponse(data=DeleteResult(id=sub_organization_id), message="Sub-organization deleted.")
