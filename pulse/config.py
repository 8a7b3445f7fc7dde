# Pulse Shared Config
# Central configuration for all Pulse dashboard services

import os

# Airtable
AIRTABLE_API_KEY = os.environ.get('AIRTABLE_API_KEY')
AIRTABLE_BASE_ID = os.environ.get('AIRTABLE_BASE_ID')
AIRTABLE_API_URL = 'https://api.airtable.com/v0'
AIRTABLE_TIMEOUT = float(os.environ.get('AIRTABLE_TIMEOUT', 10.0))

# Table names
AIRTABLE_CLIENTS_TABLE = 'Clients'
AIRTABLE_CONTRACT_MONTHS_TABLE = 'Contract Months'
AIRTABLE_CLIPS_TABLE = 'Clips'
AIRTABLE_USERS_TABLE = 'Users'
AIRTABLE_OFFERS_TABLE = 'Offers'
AIRTABLE_APPLICATIONS_TABLE = 'Applications'
AIRTABLE_INFLUENCERS_TABLE = 'Influencers'
AIRTABLE_SHIPMENTS_TABLE = 'Shipments'

# Web
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

# HOD dashboard thresholds
RECENTLY_ENDED_DAYS = 30
CRITICAL_DAYS_REMAINING = 7
CRITICAL_MIN_PROGRESS = 85
