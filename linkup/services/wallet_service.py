# linkup/services/wallet_service.py
"""
Wallet custody.

- provision: new custodial account, key material encrypted before storage
- import_from_seed: self-custodied account, accepted only after the ledger
  confirms the mnemonic's public key controls the claimed account
- credentials / reveal_seed: controlled decryption of stored secrets
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from linkup.core.config import settings
from linkup.core.errors import UpstreamError, ValidationError, WalletOwnershipError
from linkup.ledger.base import LedgerClient, is_account_id
from linkup.models.seller import Seller
from linkup.schemas.wallet import WalletRecord
from linkup.security import keys
from linkup.security.vault import decrypt_secret, encrypt_secret
from linkup.services import seller_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionedWallet:
    record: WalletRecord
    # Plaintext, handed to the caller once so the owner can write it down
    seed_phrase: str


def _placeholder_account_id() -> str:
    return f"0.0.{secrets.randbelow(1_000_000)}"


async def provision_wallet(ledger: LedgerClient) -> ProvisionedWallet:
    mnemonic = keys.generate_mnemonic()
    derived = keys.private_key_from_mnemonic(mnemonic, settings.HEDERA_KEY_TYPE)

    if ledger.has_operator:
        receipt = await ledger.create_account(
            derived.public_key,
            derived.key_type,
            settings.HEDERA_INITIAL_BALANCE_HBAR,
        )
        if not receipt.account_id:
            raise UpstreamError("Ledger did not return an account id")
        account_id = receipt.account_id
        logger.info("Created custodial account %s on %s", account_id, ledger.network)
    else:
        account_id = _placeholder_account_id()
        logger.warning("Hedera operator not configured; running in stub mode (account %s)", account_id)

    record = WalletRecord(
        account_id=account_id,
        public_key=derived.public_key,
        network=ledger.network,
        key_type=derived.key_type,
        private_key=encrypt_secret(derived.private_key),
        mnemonic=encrypt_secret(mnemonic),
        seed_retrieved=False,
    )
    return ProvisionedWallet(record=record, seed_phrase=mnemonic)


async def verify_account_ownership(ledger: LedgerClient, account_id: str, derived: keys.DerivedKey) -> None:
    """
    Raises WalletOwnershipError unless the ledger reports derived.public_key
    as the key of account_id. Lookup failures count as a mismatch.
    """
    try:
        info = await ledger.get_account_info(account_id)
    except UpstreamError as exc:
        logger.error("Failed to verify wallet ownership for %s: %s", account_id, exc)
        raise WalletOwnershipError() from exc

    if info.account_id != account_id:
        # The ledger answered for a different account than the one claimed
        logger.warning("Ledger returned account %s for lookup of %s", info.account_id, account_id)
        raise WalletOwnershipError()

    on_chain = (info.public_key or "").lower()
    if not on_chain or on_chain != derived.public_key.lower():
        logger.info("Ownership check failed for account %s", account_id)
        raise WalletOwnershipError()
    if info.key_type and info.key_type != derived.key_type:
        raise WalletOwnershipError()


async def import_from_seed(
    db: AsyncSession,
    ledger: LedgerClient,
    seller: Seller,
    mnemonic: str,
    account_id: str,
) -> WalletRecord:
    account_id = account_id.strip()
    if not is_account_id(account_id):
        raise ValidationError("Invalid account id")
    if not keys.is_valid_mnemonic(mnemonic):
        raise ValidationError("Invalid mnemonic")

    phrase = keys.normalize_mnemonic(mnemonic)
    derived = keys.private_key_from_mnemonic(phrase, settings.HEDERA_KEY_TYPE)
    await verify_account_ownership(ledger, account_id, derived)

    record = WalletRecord(
        account_id=account_id,
        public_key=derived.public_key,
        network=ledger.network,
        key_type=derived.key_type,
        private_key=encrypt_secret(derived.private_key),
        mnemonic=encrypt_secret(phrase),
        # The owner already holds the phrase
        seed_retrieved=True,
    )
    await seller_service.save_wallet(db, seller, record)
    logger.info("Seller %s imported wallet %s", seller.id, account_id)
    return record


def get_wallet_credentials(seller: Seller) -> Tuple[str, str]:
    """(account_id, private_key_hex) for signing ledger calls on the seller's behalf."""
    wallet = seller_service.load_wallet(seller)
    if wallet is None:
        raise ValidationError("Seller wallet is not provisioned")
    return wallet.account_id, decrypt_secret(wallet.private_key)


def read_seed(seller: Seller) -> Optional[str]:
    """Decrypt the custodial mnemonic if it has never been shown. No state change."""
    wallet = seller_service.load_wallet(seller)
    if wallet is None or wallet.mnemonic is None or wallet.seed_retrieved:
        return None
    return decrypt_secret(wallet.mnemonic)


async def mark_seed_retrieved(db: AsyncSession, seller: Seller) -> None:
    wallet = seller_service.load_wallet(seller)
    if wallet is not None and not wallet.seed_retrieved:
        await seller_service.save_wallet(db, seller, wallet.model_copy(update={"seed_retrieved": True}))


async def reveal_seed(db: AsyncSession, seller: Seller) -> Optional[str]:
    """
    Decrypt the custodial mnemonic if it has never been shown, and mark it
    as shown. Returns None on every later call.
    """
    phrase = read_seed(seller)
    if phrase is not None:
        await mark_seed_retrieved(db, seller)
    return phrase


async def execute_contract(
    ledger: LedgerClient,
    seller: Seller,
    contract_id: str,
    function_name: str,
    gas: int,
    parameters=None,
):
    account_id, private_key = get_wallet_credentials(seller)
    return await ledger.execute_contract(
        contract_id,
        function_name,
        signer_account_id=account_id,
        signer_private_key=private_key,
        gas=gas,
        parameters=parameters,
    )
