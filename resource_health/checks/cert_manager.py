# SPDX-License-Identifier: MIT

"""cert-manager Certificate and CertificateRequest.

Both return ``None`` when nothing specific applies so that the condition
table decides.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from resource_health.documents import creation_timestamp, find_condition, nested_maps, nested_time, parse_time
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext
from resource_health.utils import go_duration, human_duration, truncate_to

ISSUING = "Issuing"
RENEWING = "Renewing"

FIRST_ISSUANCE_GRACE = timedelta(minutes=30)
ISSUING_WARN_AFTER = timedelta(minutes=15)
ISSUING_FAIL_AFTER = timedelta(hours=1)
REQUEST_APPROVED_TIMEOUT = timedelta(hours=1)

FIRST_ISSUANCE_REASONS = {"ManuallyTriggered", "DoesNotExist"}

# Issuing reasons that mean the stored Secret violates the Certificate spec.
POLICY_VIOLATIONS = {
    "IncorrectIssuer": "Issuing certificate as Secret was previously issued by a different issuer",
    "SecretMismatch": "Issuing certificate as Secret's private key does not match the certificate",
    "InvalidKeyPair": "Issuing certificate as Secret contains an invalid key-pair",
    "InvalidCertificate": "Issuing certificate as Secret contains an invalid certificate",
    "MissingData": "Issuing certificate as Secret does not contain a certificate",
    "SecretTemplateMismatch": "Secret metadata does not match the Certificate's secret template",
    "AdditionalOutputFormatsMismatch": "Secret output formats do not match the Certificate",
    "ManagedFieldsParseError": "Secret managed fields could not be parsed",
    "Expired": "Issuing certificate as the stored certificate has expired",
}


def _cond_time(cond: dict[str, Any]) -> datetime | None:
    return parse_time(cond.get("lastTransitionTime"))


def _issuing_health(
    obj: dict[str, Any], cond: dict[str, Any], ctx: EvaluationContext,
) -> HealthStatus:
    reason = str(cond.get("reason") or "")
    message = str(cond.get("message") or "")
    transitioned = _cond_time(cond)

    if reason in POLICY_VIOLATIONS:
        return HealthStatus(
            ready=True, health=Health.UNHEALTHY, status=reason, message=POLICY_VIOLATIONS[reason],
        )

    if reason == RENEWING:
        scheduled = nested_time(obj, "status", "renewalTime") or transitioned
        elapsed = ctx.since(scheduled) if scheduled else timedelta()
        if elapsed <= ctx.settings.cert_renewal_warning_period:
            return HealthStatus(health=Health.HEALTHY, status=RENEWING, message=message)
        return HealthStatus(
            health=Health.WARNING, status=RENEWING,
            message=f"Certificate has been in renewal state for > {go_duration(truncate_to(elapsed, timedelta(minutes=1)))}",
        )

    if reason in FIRST_ISSUANCE_REASONS and transitioned is not None:
        if ctx.since(transitioned) < FIRST_ISSUANCE_GRACE:
            return HealthStatus(health=Health.UNKNOWN, status=ISSUING, message=message)

    reference = nested_time(obj, "status", "notBefore") or transitioned or creation_timestamp(obj)
    hs = HealthStatus(health=Health.UNKNOWN, status=ISSUING, message=message)
    if reference is not None:
        age = ctx.since(reference)
        if age > ISSUING_FAIL_AFTER:
            hs.health = Health.UNHEALTHY
        elif age > ISSUING_WARN_AFTER:
            hs.health = Health.WARNING
    return hs


def certificate_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus | None:
    not_after = nested_time(obj, "status", "notAfter")
    if not_after is not None and not_after < ctx.now:
        return HealthStatus(
            ready=True, health=Health.UNHEALTHY, status=StatusCode.EXPIRED, message="Certificate has expired",
        )

    verdicts: list[HealthStatus] = []
    conditions = nested_maps(obj, "status", "conditions")
    issuing = find_condition(conditions, ISSUING)
    in_progress = issuing is not None and issuing.get("status") == "True"
    if in_progress:
        verdicts.append(_issuing_health(obj, issuing, ctx))

    renewal = nested_time(obj, "status", "renewalTime")
    if not_after is not None and ctx.until(not_after) < ctx.settings.cert_expiry_warning_period:
        verdicts.append(HealthStatus(
            ready=True, health=Health.WARNING, status=StatusCode.WARNING,
            message=f"Certificate is expiring soon ({not_after.strftime('%Y-%m-%dT%H:%M:%SZ')})",
        ))
    # A renewal in progress already reports its own delay.
    elif not in_progress and renewal is not None and ctx.since(renewal) > ctx.settings.cert_renewal_warning_period:
        verdicts.append(HealthStatus(
            ready=True, health=Health.WARNING, status=StatusCode.WARNING,
            message=f"Certificate should have been renewed at {renewal.strftime('%Y-%m-%dT%H:%M:%SZ')}",
        ))

    if not verdicts:
        return None
    return verdicts[0].merge(*verdicts[1:])


def certificate_request_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus | None:
    conditions = nested_maps(obj, "status", "conditions")
    if not conditions:
        return HealthStatus(
            health=Health.UNKNOWN, status=StatusCode.PENDING,
            message="certificate request doesn't have any conditions in the status",
        )

    ready = find_condition(conditions, "Ready")
    if ready is not None:
        reason = str(ready.get("reason") or "")
        message = str(ready.get("message") or "")
        if ready.get("status") == "True":
            return HealthStatus(ready=True, health=Health.HEALTHY, status=reason or "Issued", message=message)
        if reason in ("Failed", "Denied"):
            return HealthStatus(ready=True, health=Health.UNHEALTHY, status=reason, message=message)
        if reason == "Pending":
            hs = HealthStatus(health=Health.UNKNOWN, status=StatusCode.PENDING, message=message)
            since = _cond_time(ready) or creation_timestamp(obj)
            if since is not None and ctx.since(since) > ctx.settings.cert_renewal_warning_period:
                hs.health = Health.UNHEALTHY
            return hs

    for cond_type in ("Denied", "InvalidRequest"):
        cond = find_condition(conditions, cond_type)
        if cond is not None and cond.get("status") == "True":
            return HealthStatus(
                ready=True, health=Health.UNHEALTHY, status=cond_type, message=str(cond.get("message") or ""),
            )

    approved = find_condition(conditions, "Approved")
    if approved is not None and approved.get("status") == "True":
        hs = HealthStatus(health=Health.HEALTHY, status="Approved", message=str(approved.get("message") or ""))
        since = _cond_time(approved)
        if since is not None and ctx.since(since) > REQUEST_APPROVED_TIMEOUT:
            hs.health = Health.UNHEALTHY
            hs.message = f"Certificate request has been approved for {human_duration(ctx.since(since))} but not issued"
        return hs

    return None
