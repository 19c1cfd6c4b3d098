"""Check for payment and billing problems that stop delivery."""

import logging
from datetime import datetime
from typing import Dict, List

from ...client.google_ads import GoogleAdsClient
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase

ACCOUNT_QUERY = """
    SELECT
      customer.id,
      customer.descriptive_name,
      customer.status
    FROM customer
"""

BILLING_QUERY = """
    SELECT
      billing_setup.id,
      billing_setup.status,
      billing_setup.payments_account
    FROM billing_setup
    WHERE billing_setup.status != 'CANCELLED'
"""

ACCOUNT_STATUS_ISSUES = {
    "SUSPENDED": ("account_suspended", "Account is suspended, possibly because of billing problems"),
    "CLOSED": ("account_closed", "Account is closed"),
    "CANCELLED": ("account_cancelled", "Account is cancelled"),
}

BILLING_STATUS_ISSUES = {
    "PENDING": ("billing_pending", "Billing setup is waiting for approval"),
    "APPROVED_HELD": ("billing_held", "Billing setup is approved but on hold"),
}


class PaymentIssuesCheck(CheckBase):
    """Detect account or billing states that stop all ads."""

    CHECK_ID = "payment_issues"
    CHECK_NAME = "Payment Issues"
    DESCRIPTION = "Detects payment and billing problems that stop ads from serving"
    CATEGORY = CheckCategory.CRITICAL

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        issues: List[Dict[str, str]] = []

        try:
            account_response = await client.query(ACCOUNT_QUERY)
            if account_response.results:
                status = account_response.results[0].get("customer", {}).get("status")
                if status in ACCOUNT_STATUS_ISSUES:
                    issue_type, description = ACCOUNT_STATUS_ISSUES[status]
                    issues.append({
                        "type": issue_type,
                        "description": description,
                        "severity": Severity.CRITICAL.value,
                    })

            issues.extend(await self._billing_issues(client, logger))

            if not issues:
                return self.ok_result({"message": "No payment issues detected"})

            count = len(issues)
            has_critical = any(i["severity"] == Severity.CRITICAL.value for i in issues)

            logger.warning(
                f"Found {count} payment/billing issues for {tenant.tenant_name}: "
                f"{', '.join(i['type'] for i in issues)}"
            )

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: payment problems detected",
                    short_description=(
                        "Critical payment problems, ads have stopped"
                        if has_critical
                        else f"{count} payment issue{'s' if count > 1 else ''} found"
                    ),
                    impact=(
                        "All ads are stopped until the payment problems are resolved"
                        if has_critical
                        else "Ads may be interrupted if this is not resolved"
                    ),
                    suggested_actions=[
                        "Check the payment method in Google Ads",
                        "Verify that there is sufficient balance",
                        "Check whether the credit card has expired",
                        "Contact Google Ads support if needed",
                        "Review the billing history for declined payments",
                    ],
                    severity=Severity.CRITICAL if has_critical else Severity.HIGH,
                    details={
                        "issue_count": count,
                        "issue_types": [i["type"] for i in issues],
                        "has_critical_issue": has_critical,
                    },
                ),
                {"issues": issues, "check_time": datetime.utcnow().isoformat()},
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    async def _billing_issues(self, client: GoogleAdsClient, logger: logging.Logger) -> List[Dict[str, str]]:
        """Billing setup problems; the query needs elevated access and may fail."""
        try:
            response = await client.query(BILLING_QUERY)
        except Exception as e:
            logger.debug(f"Could not query billing setup: {e}")
            return []

        if not response.results:
            return [{
                "type": "no_billing_setup",
                "description": "No billing setup found",
                "severity": Severity.HIGH.value,
            }]

        issues = []
        for row in response.results:
            status = row.get("billingSetup", {}).get("status")
            if status in BILLING_STATUS_ISSUES:
                issue_type, description = BILLING_STATUS_ISSUES[status]
                issues.append({
                    "type": issue_type,
                    "description": description,
                    "severity": Severity.HIGH.value,
                })
        return issues
