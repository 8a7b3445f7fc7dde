# Pulse Coordinator
# Coordinator dashboard, offer decisions and shipment tracking

import sys
import os
import logging

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, request, jsonify

from pulse import AirtableError, init_app, get_airtable, error_response
from pulse.coordination import (
    UnknownActionError,
    get_coordinator_dashboard,
    apply_offer_action,
    list_shipments,
    create_shipment,
    update_shipment,
    SHIPMENT_WAITING
)

app = init_app(Flask(__name__))
logger = logging.getLogger(__name__)


@app.route('/coordinator/<slug>', methods=['GET'])
def coordinator_dashboard(slug):
    """Active contract months for a coordinator"""
    try:
        dashboard = get_coordinator_dashboard(get_airtable(), slug)

        if not dashboard:
            return error_response('User not found', 404)

        return jsonify(dashboard)

    except AirtableError as e:
        logger.error("Airtable error for coordinator %s: %s", slug, e)
        return error_response('Failed to fetch data', details=str(e))


@app.route('/coordinator/action', methods=['POST'])
def coordinator_action():
    """Approve, reject or progress an influencer offer.

    Accepts:
        - action: approve_application, reject_application, mark_active, mark_completed
        - offerId: The Offers record to update
    """
    data = request.get_json(silent=True) or {}
    action = data.get('action')
    offer_id = data.get('offerId')

    if not offer_id:
        return error_response('Offer ID is required', 400)

    try:
        message = apply_offer_action(get_airtable(), offer_id, action)
        return jsonify({'success': True, 'message': message})

    except UnknownActionError:
        return error_response('Invalid action', 400)
    except AirtableError as e:
        logger.error("Offer action %s failed for %s: %s", action, offer_id, e)
        return error_response('Action failed', details=str(e))


@app.route('/shipments', methods=['GET'])
def get_shipments():
    """Shipments filtered by coordinatorId, contractMonthId or status"""
    try:
        shipments, summary = list_shipments(
            get_airtable(),
            coordinator_id=request.args.get('coordinatorId'),
            contract_month_id=request.args.get('contractMonthId'),
            status=request.args.get('status')
        )
        return jsonify({'shipments': shipments, 'summary': summary})

    except AirtableError as e:
        logger.error("Shipments GET error: %s", e)
        return error_response('Failed to fetch shipments', details=str(e))


@app.route('/shipments', methods=['POST'])
def post_shipment():
    """Create a shipment for an influencer"""
    data = request.get_json(silent=True) or {}

    if not data.get('influencerId') or not data.get('contractMonthId'):
        return error_response('Missing required fields', 400, required=['influencerId', 'contractMonthId'])

    try:
        shipment_id = create_shipment(
            get_airtable(),
            influencer_id=data['influencerId'],
            contract_month_id=data['contractMonthId'],
            coordinator_id=data.get('coordinatorId'),
            items=data.get('items'),
            courier=data.get('courier'),
            notes=data.get('notes')
        )
        return jsonify({
            'success': True,
            'message': 'Paket je kreiran!',
            'shipment': {'id': shipment_id, 'status': SHIPMENT_WAITING}
        }), 201

    except AirtableError as e:
        logger.error("Shipments POST error: %s", e)
        return error_response('Failed to create shipment', details=str(e))


@app.route('/shipments', methods=['PATCH'])
def patch_shipment():
    """Update shipment status, tracking number, courier or notes"""
    data = request.get_json(silent=True) or {}
    shipment_id = data.get('shipmentId')
    status = data.get('status')

    if not shipment_id:
        return error_response('Shipment ID is required', 400)

    try:
        record = update_shipment(
            get_airtable(),
            shipment_id,
            status=status,
            tracking_number=data.get('trackingNumber'),
            courier=data.get('courier'),
            notes=data.get('notes')
        )
        return jsonify({
            'success': True,
            'message': f'Status promenjen u "{status}"' if status else 'Paket ažuriran',
            'shipment': {'id': record['id'], 'status': record.get('fields', {}).get('Status')}
        })

    except AirtableError as e:
        logger.error("Shipments PATCH error: %s", e)
        return error_response('Failed to update shipment', details=str(e))


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Pulse Coordinator',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
