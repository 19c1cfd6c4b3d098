"""Tenant configuration models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GoogleAdsCredentials(BaseModel):
    """Credentials used to access one Google Ads account."""

    model_config = ConfigDict(frozen=True)

    developer_token: str = Field(..., description="Google Ads API developer token")
    client_id: str = Field(..., description="OAuth client ID")
    client_secret: str = Field(..., description="OAuth client secret")
    refresh_token: str = Field(..., description="Long-lived OAuth refresh token")
    login_customer_id: Optional[str] = Field(None, description="Manager account ID for MCC access")


class MonitoringThresholds(BaseModel):
    """Per-tenant overrides of check thresholds.

    A value of ``None`` keeps the check's built-in default.
    """

    model_config = ConfigDict(extra="ignore")

    no_delivery_hours: Optional[int] = Field(None, description="Minimum campaign age before zero delivery is flagged")
    budget_depletion_ratio: Optional[float] = Field(None, description="Share of daily budget spent that counts as depleted")
    budget_cutoff_hour: Optional[int] = Field(None, description="Local hour before which depletion is critical")
    lost_impression_share: Optional[float] = Field(None, description="Budget-lost impression share that gets flagged")
    performance_drop_warning: Optional[float] = Field(None, description="Conversion decline that raises a warning")
    performance_drop_critical: Optional[float] = Field(None, description="Conversion decline that is critical")
    cpc_spike_increase: Optional[float] = Field(None, description="CPC increase that gets flagged")
    cpc_spike_critical: Optional[float] = Field(None, description="CPC increase that is critical")
    cpa_increase_warning: Optional[float] = Field(None, description="CPA increase that raises a warning")
    cpa_increase_critical: Optional[float] = Field(None, description="CPA increase that is critical")
    roas_decrease_warning: Optional[float] = Field(None, description="ROAS decline that raises a warning")
    roas_decrease_critical: Optional[float] = Field(None, description="ROAS decline that is critical")
    spend_growth_warning: Optional[float] = Field(None, description="Spend growth that is considered significant")
    spend_growth_critical: Optional[float] = Field(None, description="Spend growth that can be critical")
    min_period_spend: Optional[float] = Field(None, description="Minimum spend per period for trend checks")
    quality_score_floor: Optional[int] = Field(None, description="Quality scores below this value are flagged")
    min_impressions: Optional[int] = Field(None, description="Minimum impressions for hygiene checks")
    search_term_min_spend: Optional[float] = Field(None, description="Minimum spend of a wasted search term")
    search_term_min_clicks: Optional[int] = Field(None, description="Minimum clicks of a wasted search term")


class TenantConfig(BaseModel):
    """Configuration of a single monitored ads account."""

    tenant_id: str = Field(..., description="Directory identifier of the client")
    tenant_name: str = Field(..., description="Human readable client name")
    account_id: str = Field(..., description="Google Ads customer ID")
    credentials: GoogleAdsCredentials = Field(..., description="Credentials for the account")
    thresholds: MonitoringThresholds = Field(default_factory=MonitoringThresholds, description="Threshold overrides")
    time_zone: Optional[str] = Field(None, description="IANA time zone of the ads account")
    last_checked_at: Optional[datetime] = Field(None, description="When the account was last monitored")


class AppCredentials(BaseModel):
    """Process-wide API credentials shared by every tenant."""

    model_config = ConfigDict(frozen=True)

    developer_token: str = Field(..., description="Google Ads API developer token")
    client_id: str = Field(..., description="OAuth client ID")
    client_secret: str = Field(..., description="OAuth client secret")
    login_customer_id: Optional[str] = Field(None, description="Manager account ID for MCC access")

    def for_refresh_token(self, refresh_token: str) -> GoogleAdsCredentials:
        """Combine with a tenant's refresh token."""
        return GoogleAdsCredentials(
            developer_token=self.developer_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            refresh_token=refresh_token,
            login_customer_id=self.login_customer_id or None,
        )
