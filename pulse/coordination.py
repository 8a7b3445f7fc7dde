# Pulse Coordination Records
# Coordinator views, offer decisions and influencer shipments

import logging

from .config import (
    AIRTABLE_USERS_TABLE,
    AIRTABLE_CONTRACT_MONTHS_TABLE,
    AIRTABLE_OFFERS_TABLE,
    AIRTABLE_SHIPMENTS_TABLE
)
from .fields import SHIPMENT_FIELDS
from .helpers import first_value, to_int, to_number, today_iso, escape_formula_value

logger = logging.getLogger(__name__)

MANAGER_ROLES = ('HOD', 'Admin')

SHIPMENT_WAITING = 'Čeka slanje'
SHIPMENT_IN_TRANSIT = 'U dostavi'
SHIPMENT_DELIVERED = 'Dostavljeno'

# action -> (new offer status, whether to stamp Response Date, reply message)
OFFER_ACTIONS = {
    'approve_application': ('Accepted', True, 'Prijava odobrena!'),
    'reject_application': ('Declined', True, 'Prijava odbijena.'),
    'mark_active': ('Active', False, 'Označeno kao aktivno.'),
    'mark_completed': ('Completed', False, 'Označeno kao završeno.')
}


class UnknownActionError(ValueError):
    """Raised for an offer action we don't know how to apply."""


# ===================
# COORDINATOR DASHBOARD
# ===================

def get_user_by_slug(airtable, slug):
    """Look up a dashboard user by their URL slug. Returns None if missing."""
    return airtable.first(AIRTABLE_USERS_TABLE, formula=f'{{Slag}} = "{escape_formula_value(slug)}"')


def coordinator_month_from_record(record):
    fields = record.get('fields', {})
    return {
        'id': record['id'],
        'month': fields.get('Month', ''),
        'clientName': fields.get('Client Name', ''),
        'campaignGoal': to_int(fields.get('Campaign Goal (Views)')),
        'totalViews': to_int(fields.get('Total Views for a Contract Month')),
        'percentDelivered': to_number(fields.get('%Delivered')),
        'progressStatus': fields.get('Progress Status', ''),
        'startDate': fields.get('Start Date', ''),
        'endDate': fields.get('End Date', ''),
        'daysLeft': to_int(fields.get('Days Left')),
        'contractStatus': fields.get('Contract Status') or 'unknown'
    }


def get_coordinator_dashboard(airtable, slug, limit=10):
    """Latest contract months for a coordinator.

    HOD and Admin users see the latest months across all coordinators.
    Returns None if the slug doesn't match a user.
    """
    user = get_user_by_slug(airtable, slug)
    if not user:
        logger.info("User '%s' not found in Airtable", slug)
        return None

    user_fields = user.get('fields', {})
    user_name = user_fields.get('Name', '')
    role = user_fields.get('Role', '')

    formula = None
    if role not in MANAGER_ROLES:
        formula = f'FIND("{escape_formula_value(user_name)}", {{Coordinator Name}})'

    records = airtable.list_records(
        AIRTABLE_CONTRACT_MONTHS_TABLE,
        formula=formula,
        sort=[('Start Date', 'desc')],
        max_records=limit
    )
    months = [coordinator_month_from_record(record) for record in records]
    active_months = [m for m in months if m['contractStatus'] == 'Active']

    return {
        'user': {
            'id': user['id'],
            'name': user_name,
            'role': role,
            'slug': user_fields.get('Slag', '')
        },
        'summary': {
            'totalMonths': len(months),
            'activeMonths': len(active_months),
            'statuses': [m['contractStatus'] for m in months]
        },
        'months': active_months
    }


def apply_offer_action(airtable, offer_id, action):
    """Move an offer along its lifecycle.

    Returns the reply message for the coordinator.
    Raises UnknownActionError for anything not in OFFER_ACTIONS.
    """
    if action not in OFFER_ACTIONS:
        raise UnknownActionError(f"Invalid action: {action}")

    status, stamp_response, message = OFFER_ACTIONS[action]
    fields = {'Status': status}
    if stamp_response:
        fields['Response Date'] = today_iso()

    airtable.update_record(AIRTABLE_OFFERS_TABLE, offer_id, fields)
    return message


# ===================
# SHIPMENTS
# ===================

def shipment_from_record(record, fmap):
    fields = record.get('fields', {})
    return {
        'id': record['id'],
        'name': fmap.get(fields, 'name'),
        'influencerId': first_value(fmap.get(fields, 'influencer')),
        'influencerName': first_value(fmap.get(fields, 'influencerName')),
        'contractMonthId': first_value(fmap.get(fields, 'contractMonth')),
        'contractMonthName': first_value(fmap.get(fields, 'contractMonthName')),
        'coordinatorId': first_value(fmap.get(fields, 'coordinator')),
        'coordinatorName': first_value(fmap.get(fields, 'coordinatorName')),
        'status': fmap.get(fields, 'status'),
        'items': fmap.get(fields, 'items'),
        'trackingNumber': fmap.get(fields, 'trackingNumber'),
        'courier': fmap.get(fields, 'courier'),
        'sentDate': fmap.get(fields, 'sentDate'),
        'deliveredDate': fmap.get(fields, 'deliveredDate'),
        'notes': fmap.get(fields, 'notes'),
        'createdAt': fmap.get(fields, 'createdAt')
    }


def shipment_filter_formula(coordinator_id=None, contract_month_id=None, status=None):
    """Build the filter for a shipment query. Only the first given filter applies."""
    if coordinator_id:
        return f'FIND("{escape_formula_value(coordinator_id)}", ARRAYJOIN({{Coordinator}}))'
    if contract_month_id:
        return f'FIND("{escape_formula_value(contract_month_id)}", ARRAYJOIN({{Contract Month}}))'
    if status:
        return f'{{Status}} = "{escape_formula_value(status)}"'
    return None


def summarize_shipments(shipments):
    return {
        'total': len(shipments),
        'waiting': sum(1 for s in shipments if s['status'] == SHIPMENT_WAITING),
        'inTransit': sum(1 for s in shipments if s['status'] == SHIPMENT_IN_TRANSIT),
        'delivered': sum(1 for s in shipments if s['status'] == SHIPMENT_DELIVERED)
    }


def list_shipments(airtable, coordinator_id=None, contract_month_id=None, status=None):
    """Shipments plus a per-status summary"""
    records = airtable.list_records(
        AIRTABLE_SHIPMENTS_TABLE,
        formula=shipment_filter_formula(coordinator_id, contract_month_id, status),
        max_records=500
    )
    fmap = SHIPMENT_FIELDS.bind(records)
    shipments = [shipment_from_record(record, fmap) for record in records]
    return shipments, summarize_shipments(shipments)


def create_shipment(airtable, influencer_id, contract_month_id, coordinator_id=None,
                    items='', courier='', notes=''):
    """Create a shipment waiting to be sent. Returns the new record ID."""
    fields = {
        'Influencer': [influencer_id],
        'Contract Month': [contract_month_id],
        'Coordinator': [coordinator_id] if coordinator_id else [],
        'Status': SHIPMENT_WAITING,
        'Items': items or '',
        'Courier': courier or '',
        'Notes': notes or ''
    }
    record = airtable.create_record(AIRTABLE_SHIPMENTS_TABLE, fields)
    return record['id']


def shipment_update_fields(status=None, tracking_number=None, courier=None, notes=None):
    """Fields to patch for a shipment update.

    Moving to 'U dostavi' stamps Sent Date, moving to 'Dostavljeno' stamps
    Delivered Date. Tracking number and notes may be cleared with ''.
    """
    fields = {}
    if status:
        fields['Status'] = status
        if status == SHIPMENT_IN_TRANSIT:
            fields['Sent Date'] = today_iso()
        elif status == SHIPMENT_DELIVERED:
            fields['Delivered Date'] = today_iso()

    if tracking_number is not None:
        fields['Tracking Number'] = tracking_number
    if courier:
        fields['Courier'] = courier
    if notes is not None:
        fields['Notes'] = notes
    return fields


def update_shipment(airtable, shipment_id, **changes):
    """Apply a shipment update and return the updated record"""
    return airtable.update_record(AIRTABLE_SHIPMENTS_TABLE, shipment_id, shipment_update_fields(**changes))
