"""
Tests for the HOD service routes.
"""
import pytest
from datetime import date, timedelta
from unittest.mock import patch

from hod.app import app
from pulse.airtable import AirtableConnectionError

from conftest import make_record


def _day(offset):
    return (date.today() + timedelta(days=offset)).isoformat()


@pytest.fixture
def client():
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client


class TestHodCampaigns:
    """Tests for GET /hod/campaigns."""

    def test_ranked_report(self, client, tables, fake_airtable):
        tables['Clients'] = [
            make_record('recA', Name='Acme'),
            make_record('recB', Name='Bravo'),
        ]
        tables['Contract Months'] = [
            make_record('recM1', Client=['recA'], Month='Acme – on track', **{
                '%Delivered': 0.6, 'Start Date': _day(-60), 'End Date': _day(30),
                'Contract Status': 'Active', 'Goal': 1000, 'Number of Views Achieved': 600
            }),
            make_record('recM2', Client=['recB'], Month='Bravo – late', **{
                '%Delivered': 30, 'Start Date': _day(-60), 'End Date': _day(30),
                'Contract Status': 'Active', 'Goal': 1000, 'Number of Views Achieved': 300
            }),
            make_record('recM3', Client=['recB'], Month='Bravo – deadline', **{
                '%Delivered': 50, 'Start Date': _day(-27), 'End Date': _day(3),
                'Contract Status': 'Active', 'Goal': 2000, 'Number of Views Achieved': 1000
            }),
            make_record('recM4', Client=['recGONE'], Month='no dash here', **{'Contract Status': 'Active'}),
            make_record('recM5', Client=['recA'], **{
                '%Delivered': 100, 'End Date': _day(-90), 'Contract Status': 'Finished'
            }),
        ]

        with patch('hod.app.get_airtable', return_value=fake_airtable):
            response = client.get('/hod/campaigns')

        assert response.status_code == 200
        data = response.get_json()

        assert [c['id'] for c in data['campaigns']] == ['recM3', 'recM2', 'recM1']
        assert [c['status'] for c in data['campaigns']] == ['KRITIČNO', 'KASNI', 'OK']
        assert data['stats']['total'] == 3
        assert data['stats']['critical'] == 1
        assert data['stats']['behind'] == 1
        assert data['stats']['ok'] == 1
        assert data['stats']['totalGoal'] == 4000
        assert data['stats']['totalDelivered'] == 1900
        assert data['stats']['avgDelivery'] == pytest.approx(140 / 3)
        assert [b['client']['name'] for b in data['clientStats']] == ['Bravo', 'Acme']
        assert data['clientStats'][0]['criticalCount'] == 1
        assert 'generatedAt' in data

    def test_airtable_failure(self, client, fake_airtable):
        fake_airtable.list_records.side_effect = AirtableConnectionError("Could not reach Airtable", "boom")

        with patch('hod.app.get_airtable', return_value=fake_airtable):
            response = client.get('/hod/campaigns')

        assert response.status_code == 500
        data = response.get_json()
        assert data['error'] == 'Failed to fetch campaigns'
        assert 'boom' in data['details']

    def test_missing_api_key_returns_json(self, client, monkeypatch):
        monkeypatch.setitem(app.config, 'AIRTABLE_API_KEY', None)

        response = client.get('/hod/campaigns')

        assert response.status_code == 500
        assert response.is_json
        data = response.get_json()
        assert data['error'] == 'Internal server error'
        assert data['details'] == 'AIRTABLE_API_KEY is required'

    def test_unexpected_error_returns_json(self, client, fake_airtable):
        fake_airtable.list_records.side_effect = TypeError("unsupported operand")

        with patch('hod.app.get_airtable', return_value=fake_airtable):
            response = client.get('/hod/campaigns')

        assert response.status_code == 500
        assert response.get_json() == {'error': 'Internal server error', 'details': 'unsupported operand'}

    def test_unknown_route_is_still_404(self, client):
        response = client.get('/hod/nowhere')
        assert response.status_code == 404

    def test_method_not_allowed(self, client):
        response = client.post('/hod/campaigns')
        assert response.status_code == 405
        assert response.get_json() == {'error': 'Method not allowed'}

    def test_health(self, client):
        response = client.get('/health')
        assert response.get_json()['service'] == 'Pulse HOD'
