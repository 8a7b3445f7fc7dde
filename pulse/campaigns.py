# Pulse Campaign Records
# Contract months, clients and clips as the dashboards see them

import logging

from .config import (
    AIRTABLE_CLIENTS_TABLE,
    AIRTABLE_CONTRACT_MONTHS_TABLE,
    AIRTABLE_CLIPS_TABLE
)
from .fields import CLIENT_FIELDS, CONTRACT_MONTH_FIELDS
from .helpers import first_value, to_number, to_int, round_half_up, escape_formula_value
from .status import calculate_status, normalize_percent

logger = logging.getLogger(__name__)

# Month values look like "Client Name – March 2025"
MONTH_SEPARATOR = '–'


def _attachment_url(value):
    attachment = first_value(value)
    if isinstance(attachment, dict):
        return attachment.get('url')
    return None


def extract_client_name_from_month(month):
    """Pull the client name out of a 'Client – Month Year' label"""
    if not month or MONTH_SEPARATOR not in month:
        return None
    name = month.split(MONTH_SEPARATOR)[0].strip()
    return name or None


# ===================
# HOD DASHBOARD
# ===================

def get_client_map(airtable, max_records=200):
    """Map client record ID to {'id', 'name', 'logo'}"""
    records = airtable.list_records(AIRTABLE_CLIENTS_TABLE, max_records=max_records)
    fmap = CLIENT_FIELDS.bind(records)

    clients = {}
    for record in records:
        fields = record.get('fields', {})
        clients[record['id']] = {
            'id': record['id'],
            'name': fmap.get(fields, 'name'),
            'logo': _attachment_url(fields.get(fmap.column('logo')))
        }
    return clients


def campaign_from_record(record, client_map, fmap, now=None):
    """Denormalize one Contract Months record and classify it.

    Args:
        record: Raw Airtable record
        client_map: Output of get_client_map()
        fmap: CONTRACT_MONTH_FIELDS bound to the batch
        now: Reference time for the status calculation

    Returns:
        Campaign dict with client info, metrics and status fields merged in
    """
    fields = record.get('fields', {})

    client_id = first_value(fmap.get(fields, 'client'))
    client = client_map.get(client_id) or {'id': client_id, 'name': 'Unknown', 'logo': None}

    month = fmap.get(fields, 'month')
    if client['name'] == 'Unknown':
        extracted = extract_client_name_from_month(month)
        if extracted:
            client = dict(client, name=extracted)

    percent_delivered = normalize_percent(fmap.get(fields, 'percentDelivered'))
    start_date = fmap.get(fields, 'startDate')
    end_date = fmap.get(fields, 'endDate')
    goal = to_number(fmap.get(fields, 'goal'))
    delivered = to_number(fmap.get(fields, 'delivered'))
    influencers = fmap.get(fields, 'influencers')

    campaign = {
        'id': record['id'],
        'month': month,
        'client': client,
        'clientId': client_id,
        'startDate': start_date,
        'endDate': end_date,
        'percentDelivered': percent_delivered,
        'goal': goal,
        'delivered': delivered,
        'remaining': max(goal - delivered, 0),
        'likes': to_number(fmap.get(fields, 'likes')),
        'comments': to_number(fmap.get(fields, 'comments')),
        'shares': to_number(fmap.get(fields, 'shares')),
        'publishedClips': to_number(fmap.get(fields, 'publishedClips')),
        'contractStatus': fmap.get(fields, 'contractStatus'),
        'airtableStatus': fmap.get(fields, 'progressStatus'),
        'influencerCount': len(influencers) if isinstance(influencers, list) else 0
    }
    campaign.update(calculate_status(percent_delivered, start_date, end_date, now))
    return campaign


def get_hod_campaigns(airtable, now=None, max_records=500):
    """Fetch and classify every contract month for the HOD dashboard"""
    records = airtable.list_records(AIRTABLE_CONTRACT_MONTHS_TABLE, max_records=max_records)
    client_map = get_client_map(airtable)
    fmap = CONTRACT_MONTH_FIELDS.bind(records)

    logger.info("Classifying %d contract months across %d clients", len(records), len(client_map))
    return [campaign_from_record(record, client_map, fmap, now) for record in records]


# ===================
# CLIENT DASHBOARD
# ===================

def get_active_clients(airtable):
    """Active clients sorted by name, for the client picker"""
    records = airtable.list_records(
        AIRTABLE_CLIENTS_TABLE,
        formula='{Active?} = TRUE()',
        fields=['Client name', 'Record ID', 'Active?'],
        sort=[('Client name', 'asc')]
    )
    return [
        {
            'id': record['fields'].get('Record ID') or record['id'],
            'name': record['fields'].get('Client name') or 'Unknown',
            'recordId': record['id']
        }
        for record in records
    ]


def fraction_delivered(fields):
    """Delivery as a decimal (0.82 = 82%) for the client dashboard.

    Prefers '%Delivered 2', which is stored as a decimal. Falls back to
    '%Delivered', which may be a percentage and is scaled down when > 1.
    """
    fraction = to_number(fields.get('%Delivered 2'))
    if fraction == 0:
        fraction = to_number(fields.get('%Delivered'))
        if fraction > 1:
            fraction = fraction / 100
    return fraction


def client_month_from_record(record):
    fields = record.get('fields', {})
    return {
        'id': record['id'],
        'month': fields.get('Month', ''),
        'startDate': fields.get('Start Date', ''),
        'endDate': fields.get('End Date', ''),
        'campaignGoal': to_int(fields.get('Campaign Goal (Views)')),
        'totalViews': to_int(fields.get('Total Views for a Contract Month')),
        'percentDelivered': fraction_delivered(fields),
        'progressStatus': fields.get('Progress Status', ''),
        'meaning': fields.get('Meaning', ''),
        'contractStatus': fields.get('Contract Status', ''),
        'totalLikes': to_int(fields.get('Number of Likes Achieved')),
        'totalComments': to_int(fields.get('Number of Comment Achieved')),
        'totalShares': to_int(fields.get('Number of Shares Achieved')),
        'totalSaves': to_int(fields.get('Number of Saves Achieved')),
        'publishedClips': to_int(fields.get('Number of Published Clips')),
        'daysTotal': to_int(fields.get('Total Days in Contract Month'), default=30) or 30,
        'daysPassed': to_int(fields.get('Days Passed Today')),
        'timePercent': to_number(fields.get('%Time Passed')),
        'relatedClips': fields.get('Related Clips', [])
    }


def cumulative_totals(months):
    """Totals across all of a client's contract months"""
    total_goal = sum(m['campaignGoal'] for m in months)
    total_views = sum(m['totalViews'] for m in months)
    return {
        'totalGoal': total_goal,
        'totalViews': total_views,
        'totalLikes': sum(m['totalLikes'] for m in months),
        'totalComments': sum(m['totalComments'] for m in months),
        'totalShares': sum(m['totalShares'] for m in months),
        'totalSaves': sum(m['totalSaves'] for m in months),
        'totalClips': sum(m['publishedClips'] for m in months),
        'monthsCount': len(months),
        'percentDelivered': round_half_up(total_views / total_goal, 4) if total_goal > 0 else 0
    }


def get_client_dashboard(airtable, client_id):
    """Client profile, cumulative totals and per-month breakdown.

    Returns None if the client doesn't exist.
    """
    client_record = airtable.first(
        AIRTABLE_CLIENTS_TABLE,
        formula=f'RECORD_ID() = "{escape_formula_value(client_id)}"'
    )
    if not client_record:
        logger.info("Client '%s' not found in Airtable", client_id)
        return None

    client_fields = client_record.get('fields', {})
    month_ids = client_fields.get('Contract months') or []

    months = []
    if month_ids:
        formula = 'OR({})'.format(','.join(
            f'RECORD_ID() = "{escape_formula_value(month_id)}"' for month_id in month_ids
        ))
        records = airtable.list_records(
            AIRTABLE_CONTRACT_MONTHS_TABLE,
            formula=formula,
            sort=[('Start Date', 'desc')]
        )
        months = [client_month_from_record(record) for record in records]

    return {
        'client': {
            'id': client_id,
            'name': client_fields.get('Client name') or 'Unknown Client',
            'logo': client_fields.get('Logo'),
            'instagramLink': client_fields.get('Instagram Link', ''),
            'tiktokLink': client_fields.get('Tiktok Link', ''),
            'websiteLink': client_fields.get('Website Link', '')
        },
        'cumulative': cumulative_totals(months),
        'months': months
    }


def get_contract_month_clips(airtable, contract_month_id):
    """Clips published against one contract month, newest first"""
    records = airtable.list_records(
        AIRTABLE_CLIPS_TABLE,
        formula=f'FIND("{escape_formula_value(contract_month_id)}", ARRAYJOIN({{Contract Months}}))',
        sort=[('Publish Date', 'desc')]
    )

    clips = []
    for record in records:
        fields = record.get('fields', {})
        clips.append({
            'id': record['id'],
            'clipId': fields.get('Clip ID', ''),
            'influencer': fields.get('Influencer Name in Text') or 'Unknown',
            'platform': fields.get('Social') or 'TikTok',
            'link': fields.get('Social Media link', ''),
            'publishDate': fields.get('Publish Date', ''),
            'views': to_number(fields.get('Total Views')),
            'viewsDay1to6': to_number(fields.get('Views (Day 1-6)')),
            'viewsDay7Plus': to_number(fields.get('Views (Day 7- Contract End)')),
            'likes': to_number(fields.get('Likes')),
            'comments': to_number(fields.get('Comments')),
            'shares': to_number(fields.get('Share')),
            'saves': to_number(fields.get('Saves')),
            'status': fields.get('Status') or 'Draft',
            'clipStatus': fields.get('Clip Status', '')
        })
    return clips
