# Pulse Influencer
# Influencer dashboard, offer applications and profile edits

import sys
import os
import logging

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, request, jsonify

from pulse import AirtableError, RecordNotFound, init_app, get_airtable, error_response
from pulse.helpers import today_iso
from pulse.influencers import (
    AlreadyAppliedError,
    get_influencer_dashboard,
    submit_application,
    update_profile
)

app = init_app(Flask(__name__))
logger = logging.getLogger(__name__)


@app.route('/influencer/<slug>', methods=['GET'])
def influencer_dashboard(slug):
    """Influencer dashboard data.

    The slug can be a record ID, TikTok handle (with or without @),
    influencer name or the Slug field.

    Returns:
        - influencer: Profile
        - stats: Views, earnings, pending payment, completion rate
        - weeklyIncome: Payments for the 7 most recent clips
        - opportunities: Open offers
        - applications: The influencer's applications
        - clips: The influencer's clips, newest first
    """
    try:
        dashboard = get_influencer_dashboard(get_airtable(), slug)

        if not dashboard:
            return error_response('Influencer not found', 404, slug=slug)

        return jsonify(dashboard)

    except AirtableError as e:
        logger.error("Airtable error for influencer %s: %s", slug, e)
        return error_response('Failed to fetch influencer data', details=str(e), slug=slug)


@app.route('/influencer/apply', methods=['POST'])
def apply():
    """Apply to an opportunity.

    Accepts:
        - influencerId: Influencers record ID
        - opportunityId: Offers record ID
        - note: Optional message to the coordinator
    """
    data = request.get_json(silent=True) or {}
    influencer_id = data.get('influencerId')
    opportunity_id = data.get('opportunityId')
    note = data.get('note')

    if not influencer_id or not opportunity_id:
        return error_response('Missing required fields', 400, required=['influencerId', 'opportunityId'])

    try:
        application_id = submit_application(get_airtable(), influencer_id, opportunity_id, note)

        return jsonify({
            'success': True,
            'message': 'Prijava je uspešno poslata!',
            'application': {
                'id': application_id,
                'influencerId': influencer_id,
                'opportunityId': opportunity_id,
                'note': note,
                'status': 'Pending',
                'dateApplied': today_iso()
            }
        }), 201

    except RecordNotFound:
        return error_response('Influencer not found', 404, influencerId=influencer_id)
    except AlreadyAppliedError as e:
        return error_response(
            'Already applied',
            409,
            message='Već si se prijavio/la za ovu priliku!',
            applicationId=e.application_id
        )
    except AirtableError as e:
        logger.error("Application submission error: %s", e)
        return error_response('Failed to submit application', details=str(e))


@app.route('/influencer/update-profile', methods=['POST', 'PUT', 'PATCH'])
def update_profile_route():
    """Update an influencer's own profile fields"""
    data = dict(request.get_json(silent=True) or {})
    influencer_id = data.pop('influencerId', None)

    if not influencer_id:
        return error_response('Influencer ID is required', 400)

    try:
        profile, updated_fields = update_profile(get_airtable(), influencer_id, data)

        if not updated_fields:
            return error_response('No valid fields to update', 400, receivedFields=list(data))

        return jsonify({
            'success': True,
            'message': 'Profil je uspešno ažuriran!',
            'influencer': profile,
            'updatedFields': updated_fields
        })

    except RecordNotFound:
        return error_response('Influencer not found', 404, influencerId=influencer_id)
    except AirtableError as e:
        logger.error("Profile update error: %s", e)
        return error_response('Failed to update profile', details=str(e))


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Pulse Influencer',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
