from pydantic import BaseModel, Field
from typing import List, Optional

# --- Asset Schemas ---
class AssetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

class AssetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)

class SubAssetDisplay(BaseModel):
    id: int
    asset_id: int
    name: str

    class Config:
        from_attributes = True

class AssetDisplay(BaseModel):
    id: int
    name: str
    sub_assets: List[SubAssetDisplay] = []

    class Config:
        from_attributes = True

class SubAssetCreate(BaseModel):
    # Optional here so a missing parent surfaces as a field error rather than a generic 422
    asset_id: Optional[int] = Field(None, description="Parent asset")
    name: str = Field(..., min_length=1, max_length=255)

class SubAssetUpdate(BaseModel):
    asset_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)

# --- Organization Schemas ---
class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)

class SubOrganizationDisplay(BaseModel):
    id: int
    organization_id: int
    asset_id: Optional[int] = None
    sub_asset_id: Optional[int] = None
    name: str

    class Config:
        from_attributes = True

class OrganizationDisplay(BaseModel):
    id: int
    name: str
    sub_organizations: List[SubOrganizationDisplay] = []

    class Config:
        from_attributes = True

class SubOrganizationCreate(BaseModel):
    organization_id: int
    asset_id: Optional[int] = None
    sub_asset_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=255)

class SubOrganizationUpdate(BaseModel):
    organization_id: Optional[int] = None
    asset_id: Optional[int] = None
    sub_asset_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
