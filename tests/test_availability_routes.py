"""
Tests for the host calendar API routes.
"""

from models.booking import create_booking

BASE = '/listings/1/availability'


def book(app, start, end):
    with app.app_context():
        return create_booking(1, 2, start, end, 2, 4000)


class TestAccess:
    """Calendar routes need a signed-in host."""

    def test_anonymous(self, client):
        response = client.post(BASE, json={'unavailableDates': []})
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_not_host(self, guest_client):
        response = guest_client.post(BASE, json={'unavailableDates': ['2030-06-01']})
        assert response.status_code == 403

    def test_unknown_listing(self, host_client):
        response = host_client.get('/listings/99/availability/pricing-variations')
        assert response.status_code == 404
        assert response.get_json()['message'] == 'Listing not found'


class TestUpdateAvailability:
    """POST /listings/<id>/availability"""

    def test_save_blocked_dates(self, host_client):
        response = host_client.post(BASE, json={
            'unavailableDates': ['2030-06-10T00:00:00.000Z', '2030-06-11']
        })
        data = response.get_json()

        assert response.status_code == 200
        assert data['success'] is True
        assert data['applied'] == ['2030-06-10', '2030-06-11']
        assert data['message'] == 'Calendar updated successfully'

    def test_booked_dates_reported(self, app, host_client):
        book(app, '2030-06-01', '2030-06-03')

        data = host_client.post(BASE, json={'unavailableDates': ['2030-06-02', '2030-06-10']}).get_json()

        assert data['success'] is True
        assert data['rejected'] == ['2030-06-02']
        assert '1 booked date' in data['message']

    def test_missing_body(self, host_client):
        response = host_client.post(BASE, data='not json', content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Request body is required'

    def test_bad_date(self, host_client):
        response = host_client.post(BASE, json={'unavailableDates': ['2030-02-30']})
        assert response.status_code == 400

    def test_missing_or_null_dates_keep_calendar(self, host_client):
        host_client.post(BASE, json={'unavailableDates': ['2030-06-10', '2030-06-11']})

        for body in ({'unavailabledates': ['2030-06-12']}, {'unavailableDates': None}):
            response = host_client.post(BASE, json=body)
            assert response.status_code == 400
            assert response.get_json()['field'] == 'unavailableDates'

        days = host_client.get(f'{BASE}/calendar?start=2030-06-10&end=2030-06-11').get_json()['days']
        assert [d['status'] for d in days] == ['blocked', 'blocked']

    def test_explicit_empty_list_clears(self, host_client):
        host_client.post(BASE, json={'unavailableDates': ['2030-06-10']})

        data = host_client.post(BASE, json={'unavailableDates': []}).get_json()

        assert data['removed'] == ['2030-06-10']


class TestCalendarAndBulk:
    """Calendar view and bulk actions."""

    def test_calendar(self, app, host_client):
        book(app, '2030-06-01', '2030-06-03')
        host_client.post(BASE, json={'unavailableDates': ['2030-06-04']})

        data = host_client.get(f'{BASE}/calendar?start=2030-06-01&end=2030-06-05').get_json()

        assert [d['status'] for d in data['days']] == [
            'booked', 'booked', 'available', 'blocked', 'available'
        ]
        assert data['currency'] == 'INR'

    def test_bulk_range_then_clear(self, host_client):
        data = host_client.post(f'{BASE}/bulk', json={
            'action': 'range', 'startDate': '2030-07-01', 'endDate': '2030-07-10'
        }).get_json()
        assert data['count'] == 10

        data = host_client.post(f'{BASE}/bulk', json={'action': 'clear'}).get_json()
        assert data['count'] == 0
        assert len(data['removed']) == 10

    def test_bulk_invalid_action(self, host_client):
        response = host_client.post(f'{BASE}/bulk', json={'action': 'explode'})
        assert response.status_code == 400


class TestAnalytics:
    """GET /listings/<id>/availability/analytics"""

    def test_default_window(self, host_client):
        data = host_client.get(f'{BASE}/analytics').get_json()

        analytics = data['analytics']
        assert analytics['totalDays'] == 90
        for key in ('blockedDays', 'bookedDays', 'availableDays', 'occupancyRate',
                    'estimatedLoss', 'projectedRevenue'):
            assert key in analytics

    def test_days_out_of_range(self, host_client):
        assert host_client.get(f'{BASE}/analytics?days=0').status_code == 400
        assert host_client.get(f'{BASE}/analytics?days=731').status_code == 400


class TestRecurringBlocks:
    """Recurring block routes."""

    def test_apply_list_remove(self, host_client):
        response = host_client.post(f'{BASE}/recurring-blocks', json={
            'type': 'weekly', 'pattern': [0, 6],
            'startDate': '2030-06-01', 'endDate': '2030-06-30'
        })
        data = response.get_json()

        assert response.status_code == 200
        assert data['datesAdded'] == 10
        block_id = data['blockId']

        blocks = host_client.get(f'{BASE}/recurring-blocks').get_json()['recurringBlocks']
        assert [b['id'] for b in blocks] == [block_id]

        response = host_client.delete(f'{BASE}/recurring-blocks/{block_id}')
        assert response.status_code == 200
        assert host_client.delete(f'{BASE}/recurring-blocks/{block_id}').status_code == 404

    def test_invalid_pattern(self, host_client):
        response = host_client.post(f'{BASE}/recurring-blocks', json={
            'type': 'weekly', 'pattern': [9],
            'startDate': '2030-06-01', 'endDate': '2030-06-30'
        })
        assert response.status_code == 400


class TestPricingVariations:
    """Pricing variation routes."""

    def test_add_list_remove(self, host_client):
        response = host_client.post(f'{BASE}/pricing-variations', json={
            'startDate': '2030-12-24', 'endDate': '2030-12-26', 'price': 5000, 'reason': 'Christmas'
        })
        assert response.status_code == 201
        variation = response.get_json()['variation']
        assert variation['price'] == 5000

        data = host_client.get(f'{BASE}/pricing-variations').get_json()
        assert data['basePrice'] == 2000
        assert [v['id'] for v in data['variations']] == [variation['id']]

        response = host_client.delete(f"{BASE}/pricing-variations/{variation['id']}")
        assert response.status_code == 200
        assert host_client.get(f'{BASE}/pricing-variations').get_json()['variations'] == []

    def test_overlap_is_conflict(self, host_client):
        host_client.post(f'{BASE}/pricing-variations', json={
            'startDate': '2030-12-24', 'endDate': '2030-12-26', 'price': 5000
        })
        response = host_client.post(f'{BASE}/pricing-variations', json={
            'startDate': '2030-12-25', 'endDate': '2030-12-28', 'price': 7000
        })

        assert response.status_code == 409
        assert response.get_json()['conflict']['reason'] == 'variation'

    def test_validation(self, host_client):
        response = host_client.post(f'{BASE}/pricing-variations', json={
            'startDate': '2030-12-26', 'endDate': '2030-12-24', 'price': 5000
        })
        assert response.status_code == 400

        response = host_client.post(f'{BASE}/pricing-variations', json={
            'startDate': '2030-12-24', 'endDate': '2030-12-26', 'price': -5
        })
        assert response.status_code == 400

    def test_replace_variation(self, host_client):
        variation = host_client.post(f'{BASE}/pricing-variations', json={
            'startDate': '2030-12-24', 'endDate': '2030-12-26', 'price': 5000
        }).get_json()['variation']

        response = host_client.put(f"{BASE}/pricing-variations/{variation['id']}", json={
            'startDate': '2030-12-24', 'endDate': '2030-12-26', 'price': 6000, 'reason': 'Peak'
        })

        assert response.status_code == 200
        assert response.get_json()['variation']['id'] == variation['id']
        variations = host_client.get(f'{BASE}/pricing-variations').get_json()['variations']
        assert [v['price'] for v in variations] == [6000]

    def test_replace_invalid_keeps_price(self, host_client):
        variation = host_client.post(f'{BASE}/pricing-variations', json={
            'startDate': '2030-12-24', 'endDate': '2030-12-26', 'price': 5000
        }).get_json()['variation']

        response = host_client.put(f"{BASE}/pricing-variations/{variation['id']}", json={
            'startDate': '2030-12-24', 'endDate': '2030-12-26', 'price': -1
        })

        assert response.status_code == 400
        variations = host_client.get(f'{BASE}/pricing-variations').get_json()['variations']
        assert [v['price'] for v in variations] == [5000]

    def test_remove_unknown(self, host_client):
        assert host_client.delete(f'{BASE}/pricing-variations/777').status_code == 404


class TestExport:
    """GET /listings/<id>/availability/export"""

    def test_ical_download(self, host_client):
        host_client.post(BASE, json={'unavailableDates': ['2030-06-10', '2030-06-11']})

        response = host_client.get(f'{BASE}/export')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert response.mimetype == 'text/calendar'
        assert 'Lakeview_Cottage_blocked_dates.ics' in response.headers['Content-Disposition']
        assert body.startswith('BEGIN:VCALENDAR\r\nVERSION:2.0\r\n')
        assert body.count('BEGIN:VEVENT') == 2
        assert 'DTSTART;VALUE=DATE:20300610\r\n' in body
        assert 'DTEND;VALUE=DATE:20300611\r\n' in body
        assert body.endswith('END:VCALENDAR\r\n')
