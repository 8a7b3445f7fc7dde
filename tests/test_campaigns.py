"""
Tests for pulse.campaigns record adapters.
"""
import pytest

from pulse.campaigns import (
    extract_client_name_from_month,
    get_client_map,
    campaign_from_record,
    get_hod_campaigns,
    get_active_clients,
    fraction_delivered,
    cumulative_totals,
    get_client_dashboard,
    get_contract_month_clips,
)
from pulse.fields import CONTRACT_MONTH_FIELDS
from pulse.status import STATUS_OK, STATUS_BEHIND

from conftest import make_record


class TestClientNames:
    """Client name resolution for HOD campaigns."""

    def test_extract_from_month(self):
        assert extract_client_name_from_month('Acme – March 2026') == 'Acme'

    def test_extract_without_separator(self):
        assert extract_client_name_from_month('March 2026') is None
        assert extract_client_name_from_month(None) is None

    def test_client_map_uses_any_known_name_column(self, tables, fake_airtable):
        tables['Clients'] = [
            make_record('recA', **{'Client name': 'Acme', 'Logo': [{'url': 'https://cdn/acme.png'}]}),
        ]
        client_map = get_client_map(fake_airtable)

        assert client_map['recA'] == {'id': 'recA', 'name': 'Acme', 'logo': 'https://cdn/acme.png'}

    def test_client_map_prefers_name_over_client_name(self, tables, fake_airtable):
        tables['Clients'] = [
            make_record('recA', **{'Name': 'Acme d.o.o.', 'Client name': 'Acme'}),
            make_record('recB', Ime='Bravo'),
        ]
        client_map = get_client_map(fake_airtable)

        assert client_map['recA']['name'] == 'Acme d.o.o.'
        assert client_map['recB']['name'] == 'Unknown'


class TestCampaignFromRecord:
    """Denormalizing Contract Months records."""

    def _campaign(self, now, client_map=None, **fields):
        record = make_record('recM1', **fields)
        fmap = CONTRACT_MONTH_FIELDS.bind([record])
        return campaign_from_record(record, client_map or {}, fmap, now)

    def test_fractional_delivery_is_scaled(self, now, days_from):
        campaign = self._campaign(
            now,
            {'recC': {'id': 'recC', 'name': 'Acme', 'logo': None}},
            Client=['recC'],
            **{'%Delivered': 0.6, 'Start Date': days_from(-60), 'End Date': days_from(30)}
        )
        assert campaign['percentDelivered'] == pytest.approx(60)
        assert campaign['status'] == STATUS_OK
        assert campaign['daysRemaining'] == 30
        assert campaign['clientId'] == 'recC'
        assert campaign['client']['name'] == 'Acme'

    def test_unknown_client_name_from_month(self, now):
        campaign = self._campaign(now, Client=['recX'], Month='Bravo – April 2026')
        assert campaign['client'] == {'id': 'recX', 'name': 'Bravo', 'logo': None}

    def test_missing_fields_default(self, now):
        campaign = self._campaign(now)
        assert campaign['month'] == 'Unknown'
        assert campaign['clientId'] is None
        assert campaign['goal'] == 0
        assert campaign['delivered'] == 0
        assert campaign['remaining'] == 0
        assert campaign['influencerCount'] == 0
        assert campaign['status'] == STATUS_BEHIND
        assert campaign['gap'] is None

    def test_metrics(self, now):
        campaign = self._campaign(
            now,
            Goal=100000,
            Views=40000,
            Influencers=['recI1', 'recI2'],
            **{'Number of Likes Achieved': 1200, 'Contract Status': 'Active', 'Progress Status': 'On track'}
        )
        assert campaign['remaining'] == 60000
        assert campaign['likes'] == 1200
        assert campaign['influencerCount'] == 2
        assert campaign['contractStatus'] == 'Active'
        assert campaign['airtableStatus'] == 'On track'

    def test_non_list_influencers_count_as_zero(self, now):
        campaign = self._campaign(now, Influencers=3)
        assert campaign['influencerCount'] == 0

    def test_get_hod_campaigns(self, tables, fake_airtable, now):
        tables['Clients'] = [make_record('recC', Name='Acme')]
        tables['Contract Months'] = [
            make_record('recM1', Client=['recC'], **{'% Delivered': 85}),
            make_record('recM2', Client=['recC'], **{'% Delivered': 0.3}),
        ]
        campaigns = get_hod_campaigns(fake_airtable, now)

        assert [c['percentDelivered'] for c in campaigns] == [85, pytest.approx(30)]
        assert all(c['client']['name'] == 'Acme' for c in campaigns)


class TestClientDashboard:
    """Client dashboard adapters."""

    def test_active_clients(self, fake_airtable):
        fake_airtable.list_records.return_value = [
            make_record('recA', **{'Client name': 'Acme', 'Record ID': 'acme-id'}),
            make_record('recB'),
        ]
        clients = get_active_clients(fake_airtable)

        assert clients == [
            {'id': 'acme-id', 'name': 'Acme', 'recordId': 'recA'},
            {'id': 'recB', 'name': 'Unknown', 'recordId': 'recB'},
        ]
        kwargs = fake_airtable.list_records.call_args.kwargs
        assert kwargs['formula'] == '{Active?} = TRUE()'
        assert kwargs['sort'] == [('Client name', 'asc')]

    @pytest.mark.parametrize("fields,expected", [
        ({'%Delivered 2': 0.82}, 0.82),
        ({'%Delivered': 82}, 0.82),
        ({'%Delivered': 0.5}, 0.5),
        ({}, 0),
    ])
    def test_fraction_delivered(self, fields, expected):
        assert fraction_delivered(fields) == pytest.approx(expected)

    def test_cumulative_totals(self):
        months = [
            {'campaignGoal': 100000, 'totalViews': 94000, 'totalLikes': 10, 'totalComments': 1,
             'totalShares': 2, 'totalSaves': 3, 'publishedClips': 4},
            {'campaignGoal': 50000, 'totalViews': 47123, 'totalLikes': 5, 'totalComments': 1,
             'totalShares': 0, 'totalSaves': 0, 'publishedClips': 2},
        ]
        totals = cumulative_totals(months)

        assert totals['totalGoal'] == 150000
        assert totals['totalViews'] == 141123
        assert totals['totalClips'] == 6
        assert totals['monthsCount'] == 2
        assert totals['percentDelivered'] == pytest.approx(0.9408)

    def test_cumulative_without_goal(self):
        assert cumulative_totals([])['percentDelivered'] == 0

    def test_missing_client(self, fake_airtable):
        assert get_client_dashboard(fake_airtable, 'recNOPE') is None

    def test_client_dashboard(self, fake_airtable):
        fake_airtable.first.return_value = make_record(
            'recA', **{'Client name': 'Acme', 'Contract months': ['recM1', 'recM2']}
        )
        fake_airtable.list_records.return_value = [
            make_record('recM1', Month='Acme – March', **{
                'Campaign Goal (Views)': 1000,
                'Total Views for a Contract Month': 500,
                '%Delivered 2': 0.5,
            }),
        ]
        dashboard = get_client_dashboard(fake_airtable, 'recA')

        assert dashboard['client']['name'] == 'Acme'
        assert dashboard['months'][0]['percentDelivered'] == 0.5
        assert dashboard['months'][0]['daysTotal'] == 30
        assert dashboard['cumulative']['percentDelivered'] == 0.5
        formula = fake_airtable.list_records.call_args.kwargs['formula']
        assert formula == 'OR(RECORD_ID() = "recM1",RECORD_ID() = "recM2")'

    def test_client_without_months_skips_query(self, fake_airtable):
        fake_airtable.first.return_value = make_record('recA', **{'Client name': 'Acme'})
        dashboard = get_client_dashboard(fake_airtable, 'recA')

        assert dashboard['months'] == []
        fake_airtable.list_records.assert_not_called()

    def test_contract_month_clips(self, fake_airtable):
        fake_airtable.list_records.return_value = [
            make_record('recK1', **{'Clip ID': 'K-1', 'Total Views': 1200, 'Share': 4}),
        ]
        clips = get_contract_month_clips(fake_airtable, 'recM1')

        assert clips[0]['clipId'] == 'K-1'
        assert clips[0]['views'] == 1200
        assert clips[0]['shares'] == 4
        assert clips[0]['platform'] == 'TikTok'
        assert clips[0]['status'] == 'Draft'
        assert 'recM1' in fake_airtable.list_records.call_args.kwargs['formula']
