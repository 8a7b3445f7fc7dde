# Pulse Shared Airtable Client
# Low-level Airtable REST access used by every Pulse service

import logging

import httpx

from .config import AIRTABLE_API_URL, AIRTABLE_TIMEOUT

logger = logging.getLogger(__name__)

# Airtable caps a single page at 100 records
PAGE_SIZE = 100


class AirtableError(Exception):
    """Base exception for all Airtable-related errors."""

    def __init__(self, message, details=None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class AirtableConnectionError(AirtableError):
    """Network-related errors (timeout, connection refused, etc.)."""


class AirtableAPIError(AirtableError):
    """Airtable returned a non-2xx response."""

    def __init__(self, message, details=None, status_code=None):
        super().__init__(message, details)
        self.status_code = status_code


class RecordNotFound(AirtableAPIError):
    """A single record lookup came back 404."""


class AirtableClient:
    """Airtable REST client scoped to one base.

    Create one per request (or per job) and close it when done; it owns an
    httpx.Client unless one is passed in.
    """

    def __init__(self, api_key, base_id, timeout=AIRTABLE_TIMEOUT, http_client=None):
        if not api_key:
            raise ValueError("AIRTABLE_API_KEY is required")
        if not base_id:
            raise ValueError("AIRTABLE_BASE_ID is required")

        self.api_key = api_key
        self.base_id = base_id
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        if self._owns_client:
            self._client.close()

    @property
    def headers(self):
        """Standard Airtable headers"""
        return {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json'
        }

    def _table_url(self, table, record_id=None):
        url = f"{AIRTABLE_API_URL}/{self.base_id}/{table}"
        if record_id:
            url = f"{url}/{record_id}"
        return url

    def _request(self, method, url, **kwargs):
        try:
            response = self._client.request(method, url, headers=self.headers, **kwargs)
        except httpx.TimeoutException as e:
            raise AirtableConnectionError("Airtable request timed out", str(e))
        except httpx.HTTPError as e:
            raise AirtableConnectionError("Could not reach Airtable", str(e))

        if response.status_code == 404:
            raise RecordNotFound("Airtable resource not found", response.text, status_code=404)
        if response.status_code >= 400:
            raise AirtableAPIError(
                f"Airtable returned {response.status_code}",
                response.text,
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise AirtableError("Airtable returned invalid JSON", str(e))

    # ===================
    # READ OPERATIONS
    # ===================

    def list_records(self, table, formula=None, sort=None, fields=None, max_records=None):
        """Fetch every record matching the query, following pagination.

        Args:
            table: Table name
            formula: Optional filterByFormula expression
            sort: Optional list of (field, direction) tuples
            fields: Optional list of field names to return
            max_records: Optional cap on the total number of records

        Returns:
            List of raw Airtable records ({'id', 'fields', 'createdTime'})
        """
        params = [('pageSize', PAGE_SIZE)]
        if formula:
            params.append(('filterByFormula', formula))
        if max_records:
            params.append(('maxRecords', max_records))
        for index, (field, direction) in enumerate(sort or []):
            params.append((f'sort[{index}][field]', field))
            params.append((f'sort[{index}][direction]', direction))
        for field in fields or []:
            params.append(('fields[]', field))

        records = []
        offset = None
        while True:
            page_params = params + [('offset', offset)] if offset else params
            payload = self._request('GET', self._table_url(table), params=page_params)
            records.extend(payload.get('records', []))
            offset = payload.get('offset')
            if not offset or (max_records and len(records) >= max_records):
                break

        logger.debug("Fetched %d records from %s", len(records), table)
        return records[:max_records] if max_records else records

    def first(self, table, formula=None, sort=None):
        """First record matching the formula, or None"""
        records = self.list_records(table, formula=formula, sort=sort, max_records=1)
        return records[0] if records else None

    def get_record(self, table, record_id):
        """Fetch one record by ID. Raises RecordNotFound if it doesn't exist."""
        return self._request('GET', self._table_url(table, record_id))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create_record(self, table, fields, typecast=False):
        """Create a record and return it"""
        payload = {'fields': fields}
        if typecast:
            payload['typecast'] = True
        record = self._request('POST', self._table_url(table), json=payload)
        logger.info("Created record %s in %s", record.get('id'), table)
        return record

    def update_record(self, table, record_id, fields):
        """Patch the given fields on a record and return the updated record"""
        record = self._request('PATCH', self._table_url(table, record_id), json={'fields': fields})
        logger.info("Updated %s in %s: %s", record_id, table, sorted(fields))
        return record
