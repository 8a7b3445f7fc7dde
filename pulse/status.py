# Pulse Campaign Status
# Delivery-status classification and ranking for the HOD dashboard

from datetime import datetime

from .config import CRITICAL_DAYS_REMAINING, CRITICAL_MIN_PROGRESS, RECENTLY_ENDED_DAYS
from .helpers import parse_date, round_half_up, mean, to_number

STATUS_CRITICAL = 'KRITIČNO'
STATUS_BEHIND = 'KASNI'
STATUS_WATCH = 'PRATI'
STATUS_OK = 'OK'
STATUS_DONE = 'DONE'

SECONDS_PER_DAY = 24 * 60 * 60


def _result(status, color, priority, gap=None, expected_progress=None, days_remaining=None):
    return {
        'status': status,
        'color': color,
        'priority': priority,
        'gap': gap,
        'expectedProgress': expected_progress,
        'daysRemaining': days_remaining
    }


def _days_between(earlier, later):
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def _as_midnight(day):
    return datetime(day.year, day.month, day.day)


def normalize_percent(raw):
    """Scale a raw delivery value to 0-100.

    Airtable sometimes stores delivery as a fraction (0.5 = 50%). Anything
    strictly between 0 and 5 is read as a fraction and multiplied by 100,
    so a genuine 3% can't be told apart from 0.03.
    """
    percent = to_number(raw)
    if 0 < percent < 5:
        percent = percent * 100
    return percent


def calculate_status(percent_delivered, start_date, end_date, now=None):
    """Classify a campaign-month by delivery progress against time elapsed.

    Args:
        percent_delivered: Delivery percentage (0-100+), None counts as 0
        start_date: Start of the campaign window (string, date or None)
        end_date: End of the campaign window (string, date or None)
        now: Reference time, defaults to datetime.now()

    Returns:
        Dict with status, color, priority, gap, expectedProgress and
        daysRemaining. The last three are None when either date is unknown.
    """
    actual = to_number(percent_delivered)
    start = parse_date(start_date)
    end = parse_date(end_date)

    if start is None or end is None:
        if actual >= 100:
            return _result(STATUS_DONE, 'green', 4)
        if actual >= 80:
            return _result(STATUS_OK, 'green', 3)
        if actual >= 50:
            return _result(STATUS_WATCH, 'yellow', 2)
        return _result(STATUS_BEHIND, 'red', 1)

    if now is None:
        now = datetime.now()
    start = _as_midnight(start)
    end = _as_midnight(end)

    total_days = max(_days_between(start, end), 1)
    days_passed = max(_days_between(start, now), 0)
    days_remaining = max(_days_between(now, end), 0)

    expected = min(days_passed / total_days * 100, 100)
    gap = actual - expected
    extra = (gap, expected, round_half_up(days_remaining))

    if actual >= 100:
        return _result(STATUS_DONE, 'green', 4, *extra)
    if days_remaining <= CRITICAL_DAYS_REMAINING and actual < CRITICAL_MIN_PROGRESS:
        return _result(STATUS_CRITICAL, 'red', 0, *extra)
    if gap < -20:
        return _result(STATUS_BEHIND, 'red', 1, *extra)
    if gap < -10:
        return _result(STATUS_WATCH, 'yellow', 2, *extra)
    return _result(STATUS_OK, 'green', 3, *extra)


def is_active_campaign(campaign, now=None):
    """Whether a campaign belongs on the HOD worklist.

    Campaigns without a resolved client are dropped. Otherwise a campaign is
    active when its contract status is 'Active', or when its end date is no
    more than RECENTLY_ENDED_DAYS in the past.
    """
    client = campaign.get('client') or {}
    if not campaign.get('clientId') or client.get('name', 'Unknown') == 'Unknown':
        return False

    if (campaign.get('contractStatus') or '').strip() == 'Active':
        return True

    end = parse_date(campaign.get('endDate'))
    if end is None:
        return False

    if now is None:
        now = datetime.now()
    return _days_between(_as_midnight(end), now) <= RECENTLY_ENDED_DAYS


def _gap_or_zero(campaign):
    gap = campaign.get('gap')
    return gap if gap is not None else 0


def rank_campaigns(campaigns):
    """Most urgent first, then most behind first"""
    return sorted(campaigns, key=lambda c: (c['priority'], _gap_or_zero(c)))


def _count_status(campaigns, status):
    return sum(1 for c in campaigns if c.get('status') == status)


def summarize_campaigns(campaigns):
    """Headline counts and totals for the HOD dashboard"""
    return {
        'total': len(campaigns),
        'critical': _count_status(campaigns, STATUS_CRITICAL),
        'behind': _count_status(campaigns, STATUS_BEHIND),
        'watch': _count_status(campaigns, STATUS_WATCH),
        'ok': _count_status(campaigns, STATUS_OK),
        'done': _count_status(campaigns, STATUS_DONE),
        'totalGoal': sum(to_number(c.get('goal')) for c in campaigns),
        'totalDelivered': sum(to_number(c.get('delivered')) for c in campaigns),
        'avgDelivery': mean(to_number(c.get('percentDelivered')) for c in campaigns)
    }


def group_by_client(campaigns):
    """Bucket campaigns per client, most troubled client first.

    Buckets are ordered by critical count (desc), behind count (desc),
    then worst gap (asc). A campaign without a gap counts as gap 0.
    """
    buckets = {}
    for campaign in campaigns:
        bucket = buckets.setdefault(campaign['clientId'], {
            'client': campaign.get('client'),
            'campaigns': [],
            'totalGoal': 0,
            'totalDelivered': 0,
            'criticalCount': 0,
            'behindCount': 0
        })
        bucket['campaigns'].append(campaign)
        bucket['totalGoal'] += to_number(campaign.get('goal'))
        bucket['totalDelivered'] += to_number(campaign.get('delivered'))
        if campaign.get('status') == STATUS_CRITICAL:
            bucket['criticalCount'] += 1
        if campaign.get('status') == STATUS_BEHIND:
            bucket['behindCount'] += 1

    client_stats = []
    for bucket in buckets.values():
        members = bucket['campaigns']
        bucket['avgDelivery'] = mean(to_number(c.get('percentDelivered')) for c in members)
        bucket['worstGap'] = min(_gap_or_zero(c) for c in members)
        client_stats.append(bucket)

    client_stats.sort(key=lambda b: (-b['criticalCount'], -b['behindCount'], b['worstGap']))
    return client_stats


def build_hod_report(campaigns, now=None):
    """Filter, rank and aggregate classified campaigns for the HOD view.

    Expects campaigns that already carry their calculate_status() fields.
    """
    if now is None:
        now = datetime.now()

    active = rank_campaigns([c for c in campaigns if is_active_campaign(c, now)])

    return {
        'campaigns': active,
        'stats': summarize_campaigns(active),
        'clientStats': group_by_client(active),
        'generatedAt': now.astimezone().isoformat()
    }
