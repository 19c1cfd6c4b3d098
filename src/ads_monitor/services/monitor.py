"""Monitoring service that runs checks for every active tenant."""

import asyncio
from datetime import datetime
from typing import Callable, Iterable, List, Optional
import logging

from ..alerts.base import AlertEngine
from ..checks.base import CheckBase
from ..checks.register_checks import create_default_registry
from ..checks.registry import CheckRegistry
from ..client.google_ads import GoogleAdsClient
from ..directory.base import ClientDirectory
from ..exceptions import GoogleAdsClientError
from ..models.base import Platform
from ..models.checks import CheckResult
from ..models.runs import RunResult, TenantRunSummary
from ..models.tenants import TenantConfig

logger = logging.getLogger(__name__)


class GoogleAdsMonitor:
    """Runs the registered checks against each tenant and forwards results.

    Tenants are isolated from each other: a tenant whose connection cannot
    be verified is recorded as an error and the run continues. Within a
    tenant, a failing check is logged and the remaining checks still run.
    """

    def __init__(
        self,
        directory: ClientDirectory,
        alert_engine: AlertEngine,
        registry: Optional[CheckRegistry] = None,
        client_factory: Callable[[TenantConfig], GoogleAdsClient] = GoogleAdsClient.for_tenant,
        max_concurrency: int = 1,
        platform: Platform = Platform.GOOGLE_ADS,
    ):
        """Initialize the monitor.

        Args:
            directory: Source of tenants and sink for last-checked timestamps
            alert_engine: Receives non-ok results and resolves fixed alerts
            registry: Checks to run; all checks when omitted
            client_factory: Builds a query client for one tenant
            max_concurrency: Tenants processed at the same time
            platform: Platform recorded on alerts
        """
        self.directory = directory
        self.alert_engine = alert_engine
        self.registry = registry or create_default_registry()
        self.client_factory = client_factory
        self.max_concurrency = max(1, max_concurrency)
        self.platform = platform
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def run(self, dry_run: bool = False, check_ids: Optional[Iterable[str]] = None) -> RunResult:
        """Run one monitoring pass.

        Raises:
            UnknownCheckError: If ``check_ids`` names an unregistered check
        """
        checks = self.registry.select(check_ids)
        result = RunResult(dry_run=dry_run)

        if dry_run:
            self.logger.info("DRY RUN MODE - no alerts will be created")

        self.logger.info("Starting Google Ads monitoring run")

        try:
            tenants = self.directory.list_active_tenants()
        except Exception as e:
            self.logger.error(f"Failed to load clients: {e}")
            result.errors.append(f"Failed to load clients: {e}")
            result.mark_finished()
            self._log_summary(result)
            return result

        if not tenants:
            self.logger.info("No clients with connected Google Ads found")
        else:
            self.logger.info(
                f"Monitoring {len(tenants)} clients with {len(checks)} checks "
                f"(concurrency {self.max_concurrency})"
            )

        summaries = await self._process_all(tenants, checks, dry_run)

        for summary in summaries:
            result.tenants.append(summary)
            if summary.error:
                result.errors.append(f"Client {summary.tenant_name}: {summary.error}")
            if summary.processed:
                result.tenants_processed += 1
            result.checks_run += summary.checks_run
            result.alerts_created += summary.alerts_created
            result.alerts_skipped += summary.alerts_skipped

        if not dry_run:
            self._update_timestamps([s for s in summaries if s.processed])

        result.mark_finished()
        self._log_summary(result)
        return result

    async def _process_all(
        self,
        tenants: List[TenantConfig],
        checks: List[CheckBase],
        dry_run: bool,
    ) -> List[TenantRunSummary]:
        if self.max_concurrency == 1:
            return [await self._process_tenant(tenant, checks, dry_run) for tenant in tenants]

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(tenant: TenantConfig) -> TenantRunSummary:
            async with semaphore:
                return await self._process_tenant(tenant, checks, dry_run)

        return list(await asyncio.gather(*(bounded(tenant) for tenant in tenants)))

    async def _process_tenant(
        self,
        tenant: TenantConfig,
        checks: List[CheckBase],
        dry_run: bool,
    ) -> TenantRunSummary:
        summary = TenantRunSummary(tenant_id=tenant.tenant_id, tenant_name=tenant.tenant_name)
        tenant_logger = logging.getLogger(f"{__name__}.tenant.{tenant.tenant_id}")
        tenant_logger.info(f"Processing client {tenant.tenant_name} (customer {tenant.account_id})")

        client = None
        try:
            client = self.client_factory(tenant)

            if not await client.verify_connection():
                raise GoogleAdsClientError("Failed to verify Google Ads connection")

            for check in checks:
                check_result = await self._run_check(check, client, tenant, tenant_logger)
                if check_result is None:
                    continue
                summary.checks_run += 1
                await self._forward_result(tenant, check_result, dry_run, summary, tenant_logger)

        except Exception as e:
            summary.error = str(e)
            self.logger.error(f"Failed to process client {tenant.tenant_name}: {e}")

        finally:
            if client is not None:
                try:
                    await client.close()
                except Exception as e:
                    tenant_logger.warning(f"Failed to close client for {tenant.tenant_name}: {e}")

        return summary

    async def _run_check(
        self,
        check: CheckBase,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        tenant_logger: logging.Logger,
    ) -> Optional[CheckResult]:
        try:
            check_result = await check.run(client, tenant, tenant_logger)
        except Exception as e:
            tenant_logger.error(f"Check {check.id} failed for {tenant.tenant_name}: {e}")
            return None

        tenant_logger.debug(
            f"Check {check.id} completed with status {check_result.status.value} (count {check_result.count})"
        )
        return check_result

    async def _forward_result(
        self,
        tenant: TenantConfig,
        check_result: CheckResult,
        dry_run: bool,
        summary: TenantRunSummary,
        tenant_logger: logging.Logger,
    ) -> None:
        if check_result.is_ok:
            if dry_run:
                return
            try:
                await self.alert_engine.auto_resolve_if_fixed(
                    tenant.tenant_id, self.platform, check_result.check_id
                )
            except Exception as e:
                tenant_logger.error(f"Failed to auto-resolve {check_result.check_id}: {e}")
            return

        alert_data = check_result.alert_data
        if alert_data is None:
            return

        if dry_run:
            tenant_logger.info(
                f"[DRY RUN] Would create alert: {alert_data.title} ({alert_data.severity.value})"
            )
            summary.alerts_skipped += 1
            return

        try:
            outcome = await self.alert_engine.create_alert_from_check_result(
                tenant.tenant_id, tenant.tenant_name, self.platform, check_result
            )
        except Exception as e:
            tenant_logger.error(f"Failed to create alert for {check_result.check_id}: {e}")
            return

        if outcome.skipped:
            tenant_logger.debug(f"Alert for {check_result.check_id} skipped ({outcome.reason})")
            summary.alerts_skipped += 1
        elif outcome.success:
            tenant_logger.info(f"Created alert {outcome.alert_id}: {alert_data.title}")
            summary.alerts_created += 1
        else:
            tenant_logger.error(f"Failed to create alert for {check_result.check_id}: {outcome.error}")

    def _update_timestamps(self, summaries: List[TenantRunSummary]) -> None:
        now = datetime.utcnow()
        for summary in summaries:
            try:
                self.directory.update_last_checked(summary.tenant_id, now)
            except Exception as e:
                self.logger.warning(f"Failed to update last checked time for {summary.tenant_name}: {e}")

    def _log_summary(self, result: RunResult) -> None:
        self.logger.info(
            f"Google Ads monitoring complete: {result.tenants_processed} clients processed, "
            f"{result.checks_run} checks run, {result.alerts_created} alerts created, "
            f"{result.alerts_skipped} skipped, {len(result.errors)} errors"
        )
        for error in result.errors:
            self.logger.warning(f"  - {error}")
