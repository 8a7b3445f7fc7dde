# Pulse Web Helpers
# Flask glue shared by every Pulse service

import logging

from flask import current_app, g, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from . import config
from .airtable import AirtableClient

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

logger = logging.getLogger(__name__)


def init_app(app):
    """Configure a Pulse service: settings, logging, CORS, error replies and Airtable teardown"""
    app.config.setdefault('AIRTABLE_API_KEY', config.AIRTABLE_API_KEY)
    app.config.setdefault('AIRTABLE_BASE_ID', config.AIRTABLE_BASE_ID)
    app.config.setdefault('AIRTABLE_TIMEOUT', config.AIRTABLE_TIMEOUT)
    app.json.ensure_ascii = False

    logging.basicConfig(level=config.LOG_LEVEL, format=LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    # flask-cors echoes the request Origin unless told to send a literal '*'
    CORS(
        app,
        origins=config.CORS_ORIGINS,
        methods=['GET', 'POST', 'PUT', 'PATCH', 'OPTIONS'],
        send_wildcard=config.CORS_ORIGINS == ['*']
    )
    app.teardown_appcontext(close_airtable)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response('Method not allowed', 405)

    @app.errorhandler(Exception)
    def unhandled_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error on %s: %s", app.name, e)
        return error_response('Internal server error', details=str(e))

    return app


def get_airtable():
    """Airtable client for the current request, created on first use"""
    if 'airtable' not in g:
        g.airtable = AirtableClient(
            api_key=current_app.config['AIRTABLE_API_KEY'],
            base_id=current_app.config['AIRTABLE_BASE_ID'],
            timeout=current_app.config['AIRTABLE_TIMEOUT']
        )
    return g.airtable


def close_airtable(exc=None):
    airtable = g.pop('airtable', None)
    if airtable is not None:
        airtable.close()


def error_response(error, status=500, details=None, **extra):
    """Standard JSON error reply"""
    body = {'error': error}
    if details is not None:
        body['details'] = details
    body.update(extra)
    return jsonify(body), status
