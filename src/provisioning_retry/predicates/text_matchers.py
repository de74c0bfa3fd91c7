"""
Text-pattern matchers for transient failures described in message bodies.

Each matcher is scoped to one status code so that a phrase appearing in an
unrelated error cannot trigger a retry. Matching is case-sensitive except
for the quota window qualifier ("per minute" / "per day").

Matchers scan the top-level message and every sub-error message.
"""

import re
from datetime import timedelta
from typing import Optional

from provisioning_retry.errors.models import TransportError
from provisioning_retry.predicates.base import NO_MATCH, PredicateResult, is_rest_status

SERVICE_ACCOUNT_MARKER = re.compile(r"[\w.+-]+@[\w.-]+\.iam\.gserviceaccount\.com")
QUOTA_METRIC = re.compile(r"quota metric '(?P<metric>[^']*)'")
QUOTA_LIMIT = re.compile(r"limit '(?P<limit>[^']*)'")

QUOTA_EXCEEDED = "Quota exceeded"
PER_MINUTE = "per minute"
PER_DAY = "per day"

# Per-minute quotas refill on the next minute boundary at the latest
PER_MINUTE_QUOTA_DELAY = timedelta(minutes=1)


class OperationInProgressMatcher:
    """409 whose body says a conflicting operation is already running."""

    name = "operation_in_progress"
    status_code = 409
    phrase = "already in progress"

    def evaluate(self, error: TransportError) -> PredicateResult:
        if not is_rest_status(error, self.status_code):
            return NO_MATCH
        if any(self.phrase in text for text in error.texts()):
            return PredicateResult.retry("Another operation is already in progress")
        return NO_MATCH


class IdentityPropagationDelayMatcher:
    """
    404 caused by a freshly created service identity not being visible yet.
    
    Typical body: "Unable to retrieve P4SA: [service-123@gcp-sa-foo.iam.gserviceaccount.com]
    from GAIA. Could be GAIA propagation delay or request from deleted apps."
    """

    name = "identity_propagation_delay"
    status_code = 404
    phrase = "Unable to retrieve"

    def evaluate(self, error: TransportError) -> PredicateResult:
        if not is_rest_status(error, self.status_code):
            return NO_MATCH
        for text in error.texts():
            if self.phrase not in text:
                continue
            identity = SERVICE_ACCOUNT_MARKER.search(text)
            if identity:
                return PredicateResult.retry(
                    f"Waiting for service identity {identity.group(0)} to propagate"
                )
        return NO_MATCH


def quota_windows(error: TransportError) -> dict[str, str]:
    """
    Collect the quota windows named by "Quota exceeded" messages.
    
    The window qualifier is looked up in the quoted ``limit '...'`` phrase
    when the message has one, otherwise in the whole message.
    
    Returns:
        Mapping of window ("per minute"/"per day") to the quota metric (or
        limit phrase) that named it
    """
    windows: dict[str, str] = {}
    for text in error.texts():
        if QUOTA_EXCEEDED not in text:
            continue
        limit = QUOTA_LIMIT.search(text)
        phrase = (limit.group("limit") if limit else text).lower()
        metric = QUOTA_METRIC.search(text)
        label = metric.group("metric") if metric else (limit.group("limit") if limit else "unknown")
        for window in (PER_MINUTE, PER_DAY):
            if window in phrase:
                windows.setdefault(window, label)
    return windows


class PerMinuteQuotaExceededMatcher:
    """403 for a per-minute quota: it refills shortly, so retry."""

    name = "per_minute_quota_exceeded"
    status_code = 403

    def evaluate(self, error: TransportError) -> PredicateResult:
        if not is_rest_status(error, self.status_code):
            return NO_MATCH
        metric: Optional[str] = quota_windows(error).get(PER_MINUTE)
        if metric is None:
            return NO_MATCH
        return PredicateResult.retry(
            f"Waiting for quota limit {metric} to refresh",
            delay_hint=PER_MINUTE_QUOTA_DELAY,
        )


class PerDayQuotaExceededMatcher:
    """
    403 for a per-day quota: retrying within the operation's lifetime is
    pointless, so this is an explicit GIVE_UP.
    
    Defers (NO_MATCH) when the same error also names a per-minute window,
    which keeps the result independent of matcher order.
    """

    name = "per_day_quota_exceeded"
    status_code = 403

    def evaluate(self, error: TransportError) -> PredicateResult:
        if not is_rest_status(error, self.status_code):
            return NO_MATCH
        windows = quota_windows(error)
        if PER_DAY not in windows or PER_MINUTE in windows:
            return NO_MATCH
        return PredicateResult.give_up(f"Daily quota {windows[PER_DAY]} exhausted")
