from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional
import logging

from vx_academy.core.exceptions import ConflictError, NotFoundError, ValidationError
from vx_academy.models.organization_model import Asset, SubAsset, Organization, SubOrganization
from vx_academy.schemas import organization_schema as schemas
from vx_academy.crud.crud_utils import update_db_object, commit_or_rollback

logger = logging.getLogger(__name__)

def require_name(name: Optional[str], field: str = "name") -> str:
    if name is None or not name.strip():
        raise ValidationError.for_field(field, "Name is required.")
    return name.strip()

def _ensure_unique(db: Session, model, label: str, name: str, exclude_id: Optional[int] = None, **scope) -> None:
    query = db.query(model).filter(func.lower(model.name) == name.lower()).filter_by(**scope)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first():
        logger.warning(f"{label} named '{name}' already exists.")
        raise ConflictError(f"{label} '{name}' already exists.")

# --- Asset CRUD ---
def create_asset(db: Session, asset_in: schemas.AssetCreate) -> Asset:
    name = require_name(asset_in.name)
    _ensure_unique(db, Asset, "Asset", name)
    db_asset = Asset(name=name)
    db.add(db_asset)
    commit_or_rollback(db, f"create asset '{name}'")
    db.refresh(db_asset)
    logger.info(f"Asset '{db_asset.name}' (ID: {db_asset.id}) created.")
    return db_asset

def get_asset(db: Session, asset_id: int) -> Optional[Asset]:
    logger.debug(f"Fetching asset with ID: {asset_id}")
    return db.query(Asset).filter(Asset.id == asset_id).first()

def get_asset_or_raise(db: Session, asset_id: int) -> Asset:
    db_asset = get_asset(db, asset_id)
    if not db_asset:
        logger.warning(f"Asset with ID {asset_id} not found.")
        raise NotFoundError("Asset", asset_id)
    return db_asset

def get_assets(db: Session) -> List[Asset]:
    return db.query(Asset).order_by(Asset.name).all()

def update_asset(db: Session, asset_id: int, asset_in: schemas.AssetUpdate) -> Asset:
    db_asset = get_asset_or_raise(db, asset_id)
    if asset_in.name is not None:
        name = require_name(asset_in.name)
        _ensure_unique(db, Asset, "Asset", name, exclude_id=asset_id)
        db_asset.name = name
    commit_or_rollback(db, f"update asset {asset_id}")
    db.refresh(db_asset)
    logger.info(f"Asset {asset_id} updated.")
    return db_asset

def delete_asset(db: Session, asset_id: int) -> None:
    db_asset = get_asset_or_raise(db, asset_id)
    db.delete(db_asset)
    commit_or_rollback(db, f"delete asset {asset_id}")
    logger.info(f"Asset {asset_id} deleted with its sub-assets.")

# --- SubAsset CRUD ---
def create_sub_asset(db: Session, sub_asset_in: schemas.SubAssetCreate) -> SubAsset:
    if sub_asset_in.asset_id is None:
        raise ValidationError.for_field("asset_id", "Parent asset is required.")
    name = require_name(sub_asset_in.name)
    get_asset_or_raise(db, sub_asset_in.asset_id)
    _ensure_unique(db, SubAsset, "Sub-asset", name, asset_id=sub_asset_in.asset_id)
    db_sub_asset = SubAsset(asset_id=sub_asset_in.asset_id, name=name)
    db.add(db_sub_asset)
    commit_or_rollback(db, f"create sub-asset '{name}'")
    db.refresh(db_sub_asset)
    logger.info(f"Sub-asset '{db_sub_asset.name}' (ID: {db_sub_asset.id}) created under asset {db_sub_asset.asset_id}.")
    return db_sub_asset

def get_sub_asset(db: Session, sub_asset_id: int) -> Optional[SubAsset]:
    return db.query(SubAsset).filter(SubAsset.id == sub_asset_id).first()

def get_sub_asset_or_raise(db: Session, sub_asset_id: int) -> SubAsset:
    db_sub_asset = get_sub_asset(db, sub_asset_id)
    if not db_sub_asset:
        logger.warning(f"Sub-asset with ID {sub_asset_id} not found.")
        raise NotFoundError("Sub-asset", sub_asset_id)
    return db_sub_asset

def get_sub_assets(db: Session, asset_id: Optional[int] = None) -> List[SubAsset]:
    query = db.query(SubAsset)
    if asset_id is not None:
        query = query.filter(SubAsset.asset_id == asset_id)
    return query.order_by(SubAsset.name).all()

def update_sub_asset(db: Session, sub_asset_id: int, sub_asset_in: schemas.SubAssetUpdate) -> SubAsset:
    db_sub_asset = get_sub_asset_or_raise(db, sub_asset_id)
    asset_id = sub_asset_in.asset_id if sub_asset_in.asset_id is not None else db_sub_asset.asset_id
    if asset_id != db_sub_asset.asset_id:
        get_asset_or_raise(db, asset_id)
    name = require_name(sub_asset_in.name) if sub_asset_in.name is not None else db_sub_asset.name
    _ensure_unique(db, SubAsset, "Sub-asset", name, exclude_id=sub_asset_id, asset_id=asset_id)
    db_sub_asset.asset_id = asset_id
    db_sub_asset.name = name
    commit_or_rollback(db, f"update sub-asset {sub_asset_id}")
    db.refresh(db_sub_asset)
    return db_sub_asset

def delete_sub_asset(db: Session, sub_asset_id: int) -> None:
    db_sub_asset = get_sub_asset_or_raise(db, sub_asset_id)
    db.delete(db_sub_asset)
    commit_or_rollback(db, f"delete sub-asset {sub_asset_id}")
    logger.info(f"Sub-asset {sub_asset_id} deleted.")

# --- Organization CRUD ---
def create_organization(db: Session, organization_in: schemas.OrganizationCreate) -> Organization:
    name = require_name(organization_in.name)
    _ensure_unique(db, Organization, "Organization", name)
    db_organization = Organization(name=name)
    db.add(db_organization)
    commit_or_rollback(db, f"create organization '{name}'")
    db.refresh(db_organization)
    logger.info(f"Organization '{db_organization.name}' (ID: {db_organization.id}) created.")
    return db_organization

def get_organization(db: Session, organization_id: int) -> Optional[Organization]:
    logger.debug(f"Fetching organization with ID: {organization_id}")
    return db.query(Organization).filter(Organization.id == organization_id).first()

def get_organization_or_raise(db: Session, organization_id: int) -> Organization:
    db_organization = get_organization(db, organization_id)
    if not db_organization:
        logger.warning(f"Organization with ID {organization_id} not found.")
        raise NotFoundError("Organization", organization_id)
    return db_organization

def get_organizations(db: Session) -> List[Organization]:
    return db.query(Organization).order_by(Organization.name).all()

def update_organization(db: Session, organization_id: int, organization_in: schemas.OrganizationUpdate) -> Organization:
    db_organization = get_organization_or_raise(db, organization_id)
    if organization_in.name is not None:
        name = require_name(organization_in.name)
        _ensure_unique(db, Organization, "Organization", name, exclude_id=organization_id)
        db_organization.name = name
    commit_or_rollback(db, f"update organization {organization_id}")
    db.refresh(db_organization)
    return db_organization

def delete_organization(db: Session, organization_id: int) -> None:
    db_organization = get_organization_or_raise(db, organization_id)
    db.delete(db_organization)
    commit_or_rollback(db, f"delete organization {organization_id}")
    logger.info(f"Organization {organization_id} deleted with its sub-organizations.")

# --- SubOrganization CRUD ---
def _check_sub_organization_refs(db: Session, asset_id: Optional[int], sub_asset_id: Optional[int]) -> None:
    if asset_id is not None:
        get_asset_or_raise(db, asset_id)
    if sub_asset_id is not None:
        db_sub_asset = get_sub_asset_or_raise(db, sub_asset_id)
        if asset_id is not None and db_sub_asset.asset_id != asset_id:
            raise ValidationError.for_field("sub_asset_id", f"Sub-asset {sub_asset_id} does not belong to asset {asset_id}.")

def create_sub_organization(db: Session, sub_organization_in: schemas.SubOrganizationCreate) -> SubOrganization:
    name = require_name(sub_organization_in.name)
    get_organization_or_raise(db, sub_organization_in.organization_id)
    _check_sub_organization_refs(db, sub_organization_in.asset_id, sub_organization_in.sub_asset_id)
    _ensure_unique(db, SubOrganization, "Sub-organization", name, organization_id=sub_organization_in.organization_id)
    db_sub_organization = SubOrganization(**sub_organization_in.model_dump(exclude={"name"}), name=name)
    db.add(db_sub_organization)
    commit_or_rollback(db, f"create sub-organization '{name}'")
    db.refresh(db_sub_organization)
    logger.info(f"Sub-organization '{db_sub_organization.name}' (ID: {db_sub_organization.id}) created.")
    return db_sub_organization

def get_sub_organization(db: Session, sub_organization_id: int) -> Optional[SubOrganization]:
    return db.query(SubOrganization).filter(SubOrganization.id == sub_organization_id).first()

def get_sub_organization_or_raise(db: Session, sub_organization_id: int) -> SubOrganization:
    db_sub_organization = get_sub_organization(db, sub_organization_id)
    if not db_sub_organization:
        logger.warning(f"Sub-organization with ID {sub_organization_id} not found.")
        raise NotFoundError("Sub-organization", sub_organization_id)
    return db_sub_organization

def get_sub_organizations(db: Session, organization_id: Optional[int] = None) -> List[SubOrganization]:
    query = db.query(SubOrganization)
    if organization_id is not None:
        query = query.filter(SubOrganization.organization_id == organization_id)
    return query.order_by(SubOrganization.name).all()

def update_sub_organization(db: Session, sub_organization_id: int, sub_organization_in: schemas.SubOrganizationUpdate) -> SubOrganization:
    db_sub_organization = get_sub_organization_or_raise(db, sub_organization_id)
    data = sub_organization_in.model_dump(exclude_unset=True)
    organization_id = data.get("organization_id") or db_sub_organization.organization_id
    if organization_id != db_sub_organization.organization_id:
        get_organization_or_raise(db, organization_id)
    _check_sub_organization_refs(
        db,
        data.get("asset_id", db_sub_organization.asset_id),
        data.get("sub_asset_id", db_sub_organization.sub_asset_id),
    )
    if "name" in data:
        data["name"] = require_name(data["name"])
    _ensure_unique(
        db, SubOrganization, "Sub-organization", data.get("name", db_sub_organization.name),
        exclude_id=sub_organization_id, organization_id=organization_id
    )
    update_db_object(db_sub_organization, sub_organization_in)
    if "name" in data:
        db_sub_organization.name = data["name"]
    commit_or_rollback(db, f"update sub-organization {sub_organization_id}")
    db.refresh(db_sub_organization)
    return db_sub_organization

def delete_sub_organization(db: Session, sub_organization_id: int) -> None:
    db_sub_organization = get_sub_organization_or_raise(db, sub_organization_id)
    db.delete(db_sub_organization)
    commit_or_rollback(db, f"delete sub-organization {sub_organization_id}")
    logger.info(f"Sub-organization {sub_organization_id} deleted.")
