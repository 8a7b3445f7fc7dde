# Pulse HOD
# Head-of-delivery dashboard: every live campaign ranked by urgency

import sys
import os
import logging

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, jsonify

from pulse import AirtableError, build_hod_report, init_app, get_airtable, error_response
from pulse.campaigns import get_hod_campaigns

app = init_app(Flask(__name__))
logger = logging.getLogger(__name__)


@app.route('/hod/campaigns', methods=['GET'])
def hod_campaigns():
    """Ranked campaign worklist for the HOD dashboard.

    Returns:
        - campaigns: Active campaigns, most urgent first
        - stats: Counts per status plus goal/delivery totals
        - clientStats: Campaigns grouped per client, most troubled first
        - generatedAt: ISO timestamp
    """
    try:
        campaigns = get_hod_campaigns(get_airtable())
        return jsonify(build_hod_report(campaigns))

    except AirtableError as e:
        logger.error("HOD API error: %s", e)
        return error_response('Failed to fetch campaigns', details=str(e))


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Pulse HOD',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
