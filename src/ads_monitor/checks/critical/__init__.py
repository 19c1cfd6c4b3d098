"""Checks for problems that stop an account from serving."""

from .disapproved_ads import DisapprovedAdsCheck
from .landing_page_errors import LandingPageErrorsCheck
from .payment_issues import PaymentIssuesCheck

__all__ = ["DisapprovedAdsCheck", "LandingPageErrorsCheck", "PaymentIssuesCheck"]
