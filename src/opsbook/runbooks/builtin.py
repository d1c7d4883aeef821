"""Runbooks registered at startup."""

from opsbook.runbooks.schema import (
    Runbook,
    RunbookCategory,
    RunbookSeverity,
    RunbookStep,
)


def emergency_db_restore() -> Runbook:
    return Runbook(
        id="emergency-db-restore",
        title="Emergency Database Restore",
        category=RunbookCategory.RESTORE,
        severity=RunbookSeverity.CRITICAL,
        description="Complete database restoration from latest backup",
        steps=[
            RunbookStep(
                id="verify-backup",
                title="Verify Latest Backup",
                description="Verify the integrity of the most recent backup",
                command="npm run db:verify",
                estimated_minutes=2,
                validation="Backup checksum matches",
            ),
            RunbookStep(
                id="stop-services",
                title="Stop All Services",
                description="Stop application services to prevent data conflicts",
                estimated_minutes=1,
            ),
            RunbookStep(
                id="create-pre-restore-backup",
                title="Create Pre-Restore Backup",
                description="Create emergency backup of current state",
                command="npm run db:backup",
                estimated_minutes=5,
            ),
            RunbookStep(
                id="restore-database",
                title="Restore Database",
                description="Restore database from verified backup",
                command="npm run db:restore",
                estimated_minutes=10,
                prerequisite=["verify-backup", "create-pre-restore-backup"],
                rollback="Restore from pre-restore backup",
            ),
            RunbookStep(
                id="verify-restore",
                title="Verify Restoration",
                description="Verify database integrity after restore",
                estimated_minutes=3,
                validation="All tables accessible and counts match",
            ),
            RunbookStep(
                id="restart-services",
                title="Restart Services",
                description="Restart application services",
                estimated_minutes=2,
            ),
            RunbookStep(
                id="health-check",
                title="Run Health Checks",
                description="Verify all systems are operational",
                estimated_minutes=2,
                validation="All health checks pass",
            ),
        ],
        total_estimated_time=25,
    )


def security_breach_response() -> Runbook:
    return Runbook(
        id="security-breach-response",
        title="Security Breach Response",
        category=RunbookCategory.SECURITY,
        severity=RunbookSeverity.CRITICAL,
        description="Immediate response to security compromise",
        steps=[
            RunbookStep(
                id="isolate-system",
                title="Isolate Compromised System",
                description="Disconnect system from network",
                automated=False,
                estimated_minutes=5,
            ),
            RunbookStep(
                id="ban-suspicious-ips",
                title="Ban Suspicious IPs",
                description="Block all suspicious IP addresses",
                estimated_minutes=1,
            ),
            RunbookStep(
                id="rotate-keys",
                title="Rotate All Keys",
                description="Rotate encryption keys, API keys, and credentials",
                automated=False,
                estimated_minutes=30,
            ),
            RunbookStep(
                id="audit-access",
                title="Audit Access Logs",
                description="Review all access logs for unauthorized activity",
                estimated_minutes=15,
            ),
            RunbookStep(
                id="verify-backups",
                title="Verify Backup Integrity",
                description="Ensure backups are not compromised",
                command="npm run db:verify",
                estimated_minutes=5,
            ),
            RunbookStep(
                id="notify-users",
                title="Notify Users",
                description="Send security incident notification",
                automated=False,
                estimated_minutes=10,
            ),
        ],
        total_estimated_time=66,
    )


def performance_degradation() -> Runbook:
    return Runbook(
        id="performance-degradation",
        title="Performance Degradation Response",
        category=RunbookCategory.PERFORMANCE,
        severity=RunbookSeverity.HIGH,
        description="Diagnose and resolve performance issues",
        steps=[
            RunbookStep(
                id="check-resources",
                title="Check System Resources",
                description="Verify CPU, memory, and disk usage",
                critical=False,
                estimated_minutes=1,
            ),
            RunbookStep(
                id="check-database",
                title="Check Database Performance",
                description="Identify slow queries and bottlenecks",
                critical=False,
                estimated_minutes=5,
            ),
            RunbookStep(
                id="clear-caches",
                title="Clear Caches",
                description="Clear application and database caches",
                critical=False,
                estimated_minutes=1,
            ),
            RunbookStep(
                id="restart-services",
                title="Restart Services",
                description="Restart application services if needed",
                critical=False,
                estimated_minutes=2,
            ),
            RunbookStep(
                id="monitor-improvement",
                title="Monitor Improvement",
                description="Verify performance has improved",
                critical=False,
                estimated_minutes=5,
            ),
        ],
        total_estimated_time=14,
    )


def builtin_runbooks() -> list[Runbook]:
    """Fresh copies of the built-in runbooks, in registration order."""
    return [
        emergency_db_restore(),
        security_breach_response(),
        performance_degradation(),
    ]
