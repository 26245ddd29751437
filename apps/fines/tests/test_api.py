import pytest
from django.urls import reverse
from rest_framework import status

from apps.fines.models import Fine, Section
from apps.violations.models import Violation


def ticket_url(ticket_number, name='ticket-detail'):
    return reverse(f'fines:{name}', kwargs={'ticket_number': ticket_number})


TICKET_PAYLOAD = {
    'ticket_number': 'T-010',
    'issue_date': '2025-03-12',
    'items': [
        {'violation_item': '高處作業未繫安全帶', 'unit_price': 3000, 'quantity': 1, 'violator_name': '丁'},
        {'violation_item': '自訂違規', 'unit_price': 450, 'quantity': 2},
    ],
}


# =============================================================================
# Ticket API Tests
# =============================================================================

@pytest.mark.django_db
class TestTicketApi:
    """Tests for /api/fines/tickets/"""

    def test_create_ticket(self, authenticated_client, project, section):
        data = dict(TICKET_PAYLOAD, project_name=project.name, issuer=str(section.id))
        response = authenticated_client.post(reverse('fines:ticket-list'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total'] == '3900'
        assert response.data['item_count'] == 2
        assert response.data['requires_lecture'] is False
        assert response.data['contractor'] == '大成營造'
        assert response.data['issuer_name'] == '陳站長'
        assert [i['subtotal'] for i in response.data['items']] == ['3000', '900']

    def test_create_requires_ticket_number(self, authenticated_client, db):
        data = {k: v for k, v in TICKET_PAYLOAD.items() if k != 'ticket_number'}
        response = authenticated_client.post(reverse('fines:ticket-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'ticket_number' in response.data

    def test_create_existing_number(self, authenticated_client, ticket):
        data = dict(TICKET_PAYLOAD, ticket_number='T-001')
        response = authenticated_client.post(reverse('fines:ticket-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Fine.objects.filter(ticket_number='T-001').count() == 2

    def test_price_change_needs_reason(self, authenticated_client, db):
        data = dict(TICKET_PAYLOAD, items=[{'violation_item': '高處作業未繫安全帶', 'unit_price': 2000}])
        response = authenticated_client.post(reverse('fines:ticket-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert '單價修改原因' in response.data['error']

    def test_list_summaries(self, viewer_client, ticket):
        response = viewer_client.get(reverse('fines:ticket-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['ticket_number'] == 'T-001'
        assert response.data[0]['total'] == '12000'
        assert response.data[0]['requires_lecture'] is True

    def test_retrieve(self, authenticated_client, ticket):
        response = authenticated_client.get(ticket_url('T-001'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['items']) == 2
        assert response.data['violation'] is None

    def test_retrieve_unknown(self, authenticated_client, db):
        response = authenticated_client.get(ticket_url('T-404'))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_replaces_items(self, authenticated_client, ticket, project):
        data = {
            'issue_date': '2025-03-09',
            'project_name': project.name,
            'items': [{'violation_item': '未實施自動檢查', 'unit_price': 2000, 'quantity': 1}],
        }
        response = authenticated_client.put(ticket_url('T-001'), data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['item_count'] == 1
        assert response.data['total'] == '2000'

    def test_delete(self, authenticated_client, ticket):
        response = authenticated_client.delete(ticket_url('T-001'))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Fine.objects.exists()

    def test_convert(self, authenticated_client, ticket):
        response = authenticated_client.post(ticket_url('T-001', 'ticket-convert'), {}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['fine_amount'] == '12000'
        assert response.data['is_major_violation'] is True
        assert response.data['source_ticket_number'] == 'T-001'

        again = authenticated_client.post(ticket_url('T-001', 'ticket-convert'), {}, format='json')
        assert again.status_code == status.HTTP_400_BAD_REQUEST
        assert Violation.objects.count() == 1

    def test_viewer_cannot_write(self, viewer_client, ticket):
        response = viewer_client.delete(ticket_url('T-001'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Line Item and Roster Tests
# =============================================================================

@pytest.mark.django_db
class TestFineItems:
    """Tests for /api/fines/items/"""

    def test_filter_by_ticket(self, authenticated_client, ticket, project):
        authenticated_client.post(
            reverse('fines:ticket-list'),
            dict(TICKET_PAYLOAD, project_name=project.name),
            format='json',
        )

        response = authenticated_client.get(reverse('fines:fine-list'), {'ticket_number': 'T-010'})

        assert response.data['count'] == 2

    def test_preset_price_is_reported(self, authenticated_client, ticket):
        response = authenticated_client.get(reverse('fines:fine-list'), {'search': '安全帽'})

        item, = response.data['results']
        assert item['preset_unit_price'] == '1000'

    def test_patch_item_recomputes_subtotal(self, authenticated_client, ticket):
        fine = Fine.objects.get(violation_item='未依規定配戴安全帽')
        url = reverse('fines:fine-detail', kwargs={'pk': fine.id})
        response = authenticated_client.patch(url, {'quantity': 5}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['subtotal'] == '5000'


@pytest.mark.django_db
class TestSectionsApi:
    """Tests for /api/fines/sections/ and /api/fines/presets/"""

    def test_create_then_upsert(self, authenticated_client):
        url = reverse('fines:section-list')
        data = {'name': '黃技術員', 'host_team': '電氣工作隊', 'title': '技術員'}

        first = authenticated_client.post(url, data, format='json')
        second = authenticated_client.post(url, dict(data, title='專員'), format='json')

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_200_OK
        assert Section.objects.get().title == '專員'

    def test_filter_by_team(self, authenticated_client, section):
        Section.objects.create(name='吳經理', host_team='南部工作隊', title='經理')
        response = authenticated_client.get(reverse('fines:section-list'), {'host_team': '土木工作隊'})

        assert [s['name'] for s in response.data] == ['陳站長']

    def test_presets(self, viewer_client):
        response = viewer_client.get(reverse('fines:presets'))

        assert response.status_code == status.HTTP_200_OK
        assert '站長' in response.data['titles']
        assert '再承攬商' in response.data['relationships']
        assert {'violation_item': '吊掛作業無人指揮', 'unit_price': '5000'} in response.data['items']
