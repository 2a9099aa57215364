# linkup/services/seller_service.py
"""
Identity store: seller lookups and writes.
"""
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from linkup.db.types import utcnow
from linkup.models.seller import Seller
from linkup.schemas.seller import SellerOut
from linkup.schemas.wallet import WalletRecord
from linkup.security import hashing


async def find_seller_by_email(db: AsyncSession, email: str) -> Optional[Seller]:
    result = await db.execute(select(Seller).where(Seller.email == email.lower()))
    return result.scalars().first()


async def find_seller_by_business_hash(db: AsyncSession, business_name_hash: str) -> Optional[Seller]:
    result = await db.execute(select(Seller).where(Seller.business_name_hash == business_name_hash))
    return result.scalars().first()


async def get_seller(db: AsyncSession, seller_id: str) -> Optional[Seller]:
    return await db.get(Seller, seller_id)


async def create_seller(
    db: AsyncSession,
    business_name: str,
    email: str,
    password: str,
    country: str,
    wallet: Optional[WalletRecord] = None,
) -> Seller:
    seller = Seller(
        business_name=business_name.strip(),
        business_name_hash=hashing.hash_business_name(business_name),
        email=email.lower(),
        password_hash=hashing.get_password_hash(password),
        country=country.strip(),
        wallet=wallet.model_dump(by_alias=True, mode="json") if wallet else None,
    )
    db.add(seller)
    await db.commit()
    await db.refresh(seller)
    return seller


async def mark_seller_verified(db: AsyncSession, seller: Seller) -> Seller:
    """Set verified_at once; later calls leave the original timestamp alone."""
    if seller.verified_at is None:
        await db.execute(
            update(Seller)
            .where(Seller.id == seller.id, Seller.verified_at.is_(None))
            .values(verified_at=utcnow(), updated_at=utcnow())
        )
        await db.commit()
        await db.refresh(seller)
    return seller


async def update_password(db: AsyncSession, seller: Seller, new_password: str) -> Seller:
    seller.password_hash = hashing.get_password_hash(new_password)
    db.add(seller)
    await db.commit()
    await db.refresh(seller)
    return seller


async def save_wallet(db: AsyncSession, seller: Seller, wallet: WalletRecord) -> Seller:
    # Assign a fresh dict so the JSON column is flagged dirty
    seller.wallet = wallet.model_dump(by_alias=True, mode="json")
    db.add(seller)
    await db.commit()
    await db.refresh(seller)
    return seller


def load_wallet(seller: Seller) -> Optional[WalletRecord]:
    if not seller.wallet:
        return None
    return WalletRecord.model_validate(seller.wallet)


def verify_password(seller: Seller, password: str) -> bool:
    return hashing.verify_password(password, seller.password_hash)


def serialize_seller(seller: Seller) -> SellerOut:
    wallet = seller.wallet or {}
    return SellerOut(
        id=seller.id,
        business_name=seller.business_name,
        email=seller.email,
        country=seller.country,
        wallet_account_id=wallet.get("accountId"),
        wallet_network=wallet.get("network"),
        verified_at=seller.verified_at,
        created_at=seller.created_at,
        updated_at=seller.updated_at,
    )
