# Pulse Influencer Records
# Influencer profile, clips, earnings, offers and applications

import logging
from datetime import date

from .airtable import AirtableError, RecordNotFound
from .config import (
    AIRTABLE_INFLUENCERS_TABLE,
    AIRTABLE_CLIPS_TABLE,
    AIRTABLE_OFFERS_TABLE,
    AIRTABLE_APPLICATIONS_TABLE
)
from .fields import (
    INFLUENCER_FIELDS,
    INFLUENCER_CLIP_FIELDS,
    OFFER_FIELDS,
    APPLICATION_FIELDS,
    EDITABLE_PROFILE_FIELDS
)
from .helpers import first_value, parse_date, to_number, round_half_up, today_iso, escape_formula_value

logger = logging.getLogger(__name__)

PENDING_PAYMENT_STATUSES = ('Pending', 'Čeka isplatu')
COMPLETED_CLIP_STATUSES = ('Published', 'Completed', 'Objavljeno')
CLOSED_OFFER_STATUSES = ('Closed', 'Zatvoreno')
WEEKLY_INCOME_ENTRIES = 7


class AlreadyAppliedError(Exception):
    """The influencer already has an application for this offer."""

    def __init__(self, application_id):
        self.application_id = application_id
        super().__init__(f"Application {application_id} already exists")


# ===================
# PROFILE
# ===================

def find_influencer(airtable, slug):
    """Find an influencer by record ID, TikTok handle, name or slug.

    Returns the raw Airtable record or None.
    """
    if slug.startswith('rec'):
        try:
            return airtable.get_record(AIRTABLE_INFLUENCERS_TABLE, slug)
        except RecordNotFound:
            logger.debug("No influencer with record ID %s, searching by handle", slug)

    value = escape_formula_value(slug)
    formula = (
        'OR('
        f'LOWER({{TikTok Handle}}) = LOWER("{value}"), '
        f'LOWER({{TikTok Handle}}) = LOWER("@{value}"), '
        f'LOWER(SUBSTITUTE({{TikTok Handle}}, "@", "")) = LOWER("{value}"), '
        f'LOWER({{Influencer Name}}) = LOWER("{value}"), '
        f'{{Slug}} = "{value}"'
        ')'
    )
    return airtable.first(AIRTABLE_INFLUENCERS_TABLE, formula=formula)


def format_influencer(record):
    """Public profile of an influencer record"""
    fields = record.get('fields', {})
    fmap = INFLUENCER_FIELDS.bind(fields)
    profile = fmap.read(fields)

    photo = first_value(profile.pop('photo'))
    profile['photo'] = photo.get('url') if isinstance(photo, dict) else None
    profile['id'] = record['id']
    return profile


def update_profile(airtable, influencer_id, updates):
    """Write editable profile fields back to Airtable.

    Column names are resolved against the columns the record already has,
    so bases using the Serbian column names keep using them.

    Returns:
        (updated profile, list of Airtable columns written), or
        (None, []) when none of the updates are editable fields.
    Raises RecordNotFound if the influencer doesn't exist.
    """
    record = airtable.get_record(AIRTABLE_INFLUENCERS_TABLE, influencer_id)
    fmap = INFLUENCER_FIELDS.bind(record.get('fields', {}))

    editable = {key: value for key, value in updates.items() if key in EDITABLE_PROFILE_FIELDS}
    columns = fmap.to_columns(editable)
    if not columns:
        return None, []

    updated = airtable.update_record(AIRTABLE_INFLUENCERS_TABLE, influencer_id, columns)
    profile = format_influencer(updated)
    profile.pop('status', None)
    profile.pop('email', None)
    profile.pop('photo', None)
    return profile, list(columns)


# ===================
# CLIPS & EARNINGS
# ===================

def get_influencer_clips(airtable, influencer_id, limit=50):
    """An influencer's clips, newest first"""
    records = airtable.list_records(
        AIRTABLE_CLIPS_TABLE,
        formula=f'FIND("{escape_formula_value(influencer_id)}", ARRAYJOIN({{Influencer}}))',
        sort=[('Publish Date', 'desc')],
        max_records=limit
    )
    fmap = INFLUENCER_CLIP_FIELDS.bind(records)

    clips = []
    for record in records:
        fields = record.get('fields', {})
        clip = fmap.read(fields)
        clip['id'] = record['id']
        clip['clientName'] = first_value(clip['clientName'])
        for metric in ('views', 'likes', 'comments', 'shares', 'saves', 'payment'):
            clip[metric] = to_number(clip[metric])
        clips.append(clip)
    return clips


def clip_stats(clips):
    """Headline numbers for the influencer dashboard"""
    total_views = sum(clip['views'] for clip in clips)
    completed = sum(1 for clip in clips if clip['status'] in COMPLETED_CLIP_STATUSES)
    return {
        'totalViews': total_views,
        'totalEarnings': sum(clip['payment'] for clip in clips),
        'totalClips': len(clips),
        'avgViewsPerClip': round_half_up(total_views / len(clips)) if clips else 0,
        'pendingPayment': sum(
            clip['payment'] for clip in clips
            if clip['paymentStatus'] in PENDING_PAYMENT_STATUSES
        ),
        'completionRate': round_half_up(completed / len(clips) * 100) if clips else 0
    }


def weekly_income(clips, entries=WEEKLY_INCOME_ENTRIES):
    """Payments of the most recent clips, oldest first, padded with zeros"""
    dated = sorted(
        clips,
        key=lambda clip: parse_date(clip.get('publishDate')) or date.min,
        reverse=True
    )
    amounts = [clip['payment'] for clip in dated[:entries]]
    amounts += [0] * (entries - len(amounts))
    return [{'amount': amount} for amount in reversed(amounts)]


# ===================
# OFFERS & APPLICATIONS
# ===================

def get_open_offers(airtable, limit=20):
    """Offers that aren't closed, soonest deadline first.

    Returns an empty list if the Offers table can't be read.
    """
    closed = ', '.join(f'{{Status}} != "{status}"' for status in CLOSED_OFFER_STATUSES)
    try:
        records = airtable.list_records(
            AIRTABLE_OFFERS_TABLE,
            formula=f'AND({closed})',
            sort=[('Deadline', 'asc')],
            max_records=limit
        )
    except AirtableError as e:
        logger.warning("Offers table unavailable: %s", e)
        return []

    fmap = OFFER_FIELDS.bind(records)
    offers = []
    for record in records:
        offer = fmap.read(record.get('fields', {}))
        offer['id'] = record['id']
        offer['clientName'] = first_value(offer['clientName'])
        offers.append(offer)
    return offers


def get_applications(airtable, influencer_id, clips, limit=20):
    """An influencer's applications, newest first.

    If the Applications table can't be read, the three most recent clips
    stand in as accepted/pending applications.
    """
    try:
        records = airtable.list_records(
            AIRTABLE_APPLICATIONS_TABLE,
            formula=f'FIND("{escape_formula_value(influencer_id)}", ARRAYJOIN({{Influencer}}))',
            sort=[('Date Applied', 'desc')],
            max_records=limit
        )
    except AirtableError as e:
        logger.warning("Applications table unavailable, using clips: %s", e)
        return [
            {
                'id': clip['id'],
                'clientName': clip['clientName'],
                'status': 'Accepted' if clip['status'] == 'Published' else 'Pending',
                'dateApplied': clip.get('publishDate')
            }
            for clip in clips[:3]
        ]

    fmap = APPLICATION_FIELDS.bind(records)
    applications = []
    for record in records:
        application = fmap.read(record.get('fields', {}))
        application['id'] = record['id']
        application['clientName'] = first_value(application['clientName'])
        applications.append(application)
    return applications


def submit_application(airtable, influencer_id, offer_id, note=''):
    """Create a pending application for an offer.

    Raises RecordNotFound if the influencer doesn't exist and
    AlreadyAppliedError if they've already applied.
    Returns the new application record ID.
    """
    airtable.get_record(AIRTABLE_INFLUENCERS_TABLE, influencer_id)

    existing = airtable.first(
        AIRTABLE_APPLICATIONS_TABLE,
        formula=(
            'AND('
            f'FIND("{escape_formula_value(influencer_id)}", ARRAYJOIN({{Influencer}})), '
            f'FIND("{escape_formula_value(offer_id)}", ARRAYJOIN({{Offer}}))'
            ')'
        )
    )
    if existing:
        raise AlreadyAppliedError(existing['id'])

    record = airtable.create_record(AIRTABLE_APPLICATIONS_TABLE, {
        'Influencer': [influencer_id],
        'Offer': [offer_id],
        'Note': note or '',
        'Status': 'Pending',
        'Date Applied': today_iso()
    })
    return record['id']


def get_influencer_dashboard(airtable, slug):
    """Everything the influencer dashboard shows. None if slug is unknown."""
    record = find_influencer(airtable, slug)
    if not record:
        logger.info("Influencer '%s' not found in Airtable", slug)
        return None

    clips = get_influencer_clips(airtable, record['id'])
    return {
        'influencer': format_influencer(record),
        'stats': clip_stats(clips),
        'weeklyIncome': weekly_income(clips),
        'opportunities': get_open_offers(airtable),
        'applications': get_applications(airtable, record['id'], clips),
        'clips': clips
    }
