from linkup.models.seller import Seller
from linkup.models.otp_code import OtpCode
from linkup.models.session import SellerSession

__all__ = ["Seller", "OtpCode", "SellerSession"]
