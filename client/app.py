# Pulse Client
# Client dashboard: campaign months, cumulative reach and clips

import sys
import os
import logging

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, jsonify

from pulse import AirtableError, init_app, get_airtable, error_response
from pulse.campaigns import get_active_clients, get_client_dashboard, get_contract_month_clips

app = init_app(Flask(__name__))
logger = logging.getLogger(__name__)


@app.route('/clients', methods=['GET'])
def clients():
    """List active clients for the dashboard picker"""
    try:
        return jsonify({'clients': get_active_clients(get_airtable())})

    except AirtableError as e:
        logger.error("Airtable error listing clients: %s", e)
        return error_response('Failed to fetch clients')


@app.route('/client/<client_id>', methods=['GET'])
def client_dashboard(client_id):
    """Client dashboard data.

    Returns:
        - client: Name, logo and social links
        - cumulative: Totals across every contract month
        - months: Per-month breakdown, newest first
    """
    try:
        dashboard = get_client_dashboard(get_airtable(), client_id)

        if not dashboard:
            return error_response('Client not found', 404)

        return jsonify(dashboard)

    except AirtableError as e:
        logger.error("Airtable error for client %s: %s", client_id, e)
        return error_response('Failed to fetch data', details=str(e))


@app.route('/clips/<contract_month_id>', methods=['GET'])
def clips(contract_month_id):
    """Clips published for one contract month"""
    try:
        return jsonify({'clips': get_contract_month_clips(get_airtable(), contract_month_id)})

    except AirtableError as e:
        logger.error("Airtable error fetching clips for %s: %s", contract_month_id, e)
        return error_response('Failed to fetch clips')


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Pulse Client',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
