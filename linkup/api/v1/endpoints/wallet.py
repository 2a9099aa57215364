# linkup/api/v1/endpoints/wallet.py
from fastapi import APIRouter, Depends

from linkup.api import deps
from linkup.models.seller import Seller
from linkup.schemas.wallet import WalletImportRequest, WalletImportResponse
from linkup.services.identity_flow import IdentityFlow

router = APIRouter()


@router.post("/import", response_model=WalletImportResponse)
async def import_wallet(
        body: WalletImportRequest,
        current_seller: Seller = Depends(deps.get_current_seller),
        flow: IdentityFlow = Depends(deps.get_identity_flow),
):
    """
    Replace the seller's wallet with a self-custodied account.

    The account must currently be keyed by the public key derived from the
    supplied mnemonic; otherwise 400 and the stored wallet is untouched.
    """
    wallet = await flow.import_wallet(current_seller, body.mnemonic, body.account_id)
    return WalletImportResponse(
        message="Wallet imported",
        wallet_account_id=wallet.account_id,
        wallet_network=wallet.network,
    )
