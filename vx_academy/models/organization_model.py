from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from vx_academy.core.database import Base

# Reporting classification only; nothing here affects content delivery.

class Asset(Base):
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    sub_assets = relationship("SubAsset", back_populates="asset", cascade="all", order_by="SubAsset.name")

    __table_args__ = (UniqueConstraint('name', name='uq_asset_name'),)

    def __repr__(self):
        return f"<Asset(id={self.id}, name='{self.name}')>"


class SubAsset(Base):
    __tablename__ = "sub_assets"

    id = Column(Integer, primary_key=True, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    asset = relationship("Asset", back_populates="sub_assets")

    __table_args__ = (UniqueConstraint('asset_id', 'name', name='uq_sub_asset_name'),)

    def __repr__(self):
        return f"<SubAsset(id={self.id}, name='{self.name}', asset_id={self.asset_id})>"


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    sub_organizations = relationship("SubOrganization", back_populates="organization", cascade="all", order_by="SubOrganization.name")

    __table_args__ = (UniqueConstraint('name', name='uq_organization_name'),)

    def __repr__(self):
        return f"<Organization(id={self.id}, name='{self.name}')>"


class SubOrganization(Base):
    __tablename__ = "sub_organizations"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id", ondelete="SET NULL"), nullable=True)
    sub_asset_id = Column(Integer, ForeignKey("sub_assets.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)

    organization = relationship("Organization", back_populates="sub_organizations")
    asset = relationship("Asset")
    sub_asset = relationship("SubAsset")

    __table_args__ = (UniqueConstraint('organization_id', 'name', name='uq_sub_organization_name'),)

    def __repr__(self):
        return f"<SubOrganization(id={self.id}, name='{self.name}', organization_id={self.organization_id})>"
