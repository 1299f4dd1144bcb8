from __future__ import annotations

from ..domain.models import AuditReport, ManifestKind, UpdateOutcome
from ..ports import ConfirmPort, LoggerPort


class UpdatePackagesUseCase:
    """Offers to update the outdated packages of a finished audit.

    The update is simulated: consent is requested through the injected
    confirmation capability, but no manifest is rewritten and no pull request
    is opened. The audit report is never modified.
    """

    def __init__(self, *, confirm: ConfirmPort, logger: LoggerPort) -> None:
        self._confirm = confirm
        self._logger = logger

    def execute(self, report: AuditReport) -> UpdateOutcome:
        if report.manifest_kind is not ManifestKind.PACKAGE_MANIFEST:
            self._logger.info(
                "update_skipped",
                type="update_skipped",
                reason=f"auto-update supports {ManifestKind.PACKAGE_MANIFEST.value} only",
            )
            return UpdateOutcome(confirmed=False)

        outdated = [dep for dep in report.resolved if dep.is_outdated]
        if not outdated:
            return UpdateOutcome(confirmed=False)

        if not self._confirm(f"Update {len(outdated)} outdated package(s) in {report.subject.slug}?"):
            self._logger.info("update_cancelled", type="update_cancelled", packages=len(outdated))
            return UpdateOutcome(confirmed=False)

        self._logger.info(
            "update_simulated",
            type="update_simulated",
            manifest=report.manifest_path,
            packages={dep.name: dep.latest_version for dep in outdated},
        )
        return UpdateOutcome(confirmed=True, simulated=True, updates=outdated)
