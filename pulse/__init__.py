# Pulse Shared Module
# Common functions used across all Pulse dashboard services

from .helpers import (
    parse_date,
    to_number,
    to_int
)

from .airtable import (
    AirtableClient,
    AirtableError,
    AirtableConnectionError,
    AirtableAPIError,
    RecordNotFound
)

from .status import (
    calculate_status,
    normalize_percent,
    is_active_campaign,
    rank_campaigns,
    summarize_campaigns,
    group_by_client,
    build_hod_report
)

from .web import (
    init_app,
    get_airtable,
    error_response
)
