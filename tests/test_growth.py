from unittest import mock

import pytest
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile

from backend.exceptions import IllegalTransition, PersistenceError
from growthApp.models import GrowthUpdate


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path


def photo(name='leaf.jpg'):
    return SimpleUploadedFile(name, b'\xff\xd8\xff\xe0fake-jpeg', content_type='image/jpeg')


def test_sprouting_update_with_two_images(accepted_order, farmer_user, media_root):
    entry = GrowthUpdate.objects.append_update(
        farmer_user, accepted_order, 'sprouting', 'First leaves are out',
        files=[photo('a.jpg'), photo('b.jpg')],
    )

    assert GrowthUpdate.objects.filter(order=accepted_order).count() == 1
    assert entry.status == 'sprouting'
    assert entry.created_at is not None
    assert len(entry.images) == 2
    assert all(url.startswith(f'/media/growth-updates/{accepted_order.id}/') for url in entry.images)
    assert len(list((media_root / 'growth-updates' / str(accepted_order.id)).iterdir())) == 2

    accepted_order.refresh_from_db()
    assert accepted_order.status == 'accepted'


def test_hosted_image_urls_are_kept_in_order(accepted_order, farmer_user):
    urls = ['https://cdn.example.com/1.jpg', 'https://cdn.example.com/2.jpg']
    entry = GrowthUpdate.objects.append_update(farmer_user, accepted_order, 'flowering', image_urls=urls)
    assert entry.images == urls


def test_timeline_is_ascending(accepted_order, farmer_user):
    for tag in ('seed_planted', 'sprouting', 'growing'):
        GrowthUpdate.objects.append_update(farmer_user, accepted_order, tag)

    timeline = list(GrowthUpdate.objects.for_order(accepted_order))
    stamps = [entry.created_at for entry in timeline]
    assert stamps == sorted(stamps)
    assert [entry.status for entry in timeline] == ['seed_planted', 'sprouting', 'growing']


def test_free_text_tags_are_accepted(accepted_order, farmer_user):
    entry = GrowthUpdate.objects.append_update(farmer_user, accepted_order, 'pest check done')
    assert entry.get_status_label() == 'pest check done'


def test_too_many_images(accepted_order, farmer_user):
    with pytest.raises(ValidationError):
        GrowthUpdate.objects.append_update(
            farmer_user, accepted_order, 'growing', files=[photo() for _ in range(5)]
        )
    assert not GrowthUpdate.objects.exists()


def test_only_owning_farmer_posts(accepted_order, consumer):
    with pytest.raises(PermissionDenied):
        GrowthUpdate.objects.append_update(consumer, accepted_order, 'growing')


def test_terminal_orders_take_no_updates(order, farmer_user):
    order.reject(farmer_user)
    with pytest.raises(IllegalTransition):
        GrowthUpdate.objects.append_update(farmer_user, order, 'growing')


def test_failed_upload_removes_stored_files(accepted_order, farmer_user):
    with mock.patch('growthApp.models.default_storage') as storage:
        storage.save.side_effect = ['growth-updates/first.jpg', OSError('disk full')]

        with pytest.raises(PersistenceError):
            GrowthUpdate.objects.append_update(
                farmer_user, accepted_order, 'growing', files=[photo('1.jpg'), photo('2.jpg')]
            )

    storage.delete.assert_called_once_with('growth-updates/first.jpg')
    assert not GrowthUpdate.objects.exists()


def test_entries_are_append_only(accepted_order, farmer_user):
    entry = GrowthUpdate.objects.append_update(farmer_user, accepted_order, 'growing')

    entry.notes = 'edited'
    with pytest.raises(PermissionDenied):
        entry.save()
    with pytest.raises(PermissionDenied):
        entry.delete()
    with pytest.raises(PermissionDenied):
        GrowthUpdate.objects.filter(pk=entry.pk).update(notes='edited')


def test_growth_api_post_and_list(client_for, accepted_order, farmer_user, consumer):
    url = f'/growth/orders/{accepted_order.id}/'
    response = client_for(farmer_user).post(
        url,
        {'status': 'sprouting', 'notes': 'Looking healthy', 'images': [photo('a.jpg'), photo('b.jpg')]},
        format='multipart',
    )
    assert response.status_code == 201
    assert len(response.data['data']['images']) == 2

    response = client_for(consumer).get(url)
    assert response.status_code == 200
    assert response.data['count'] == 1
    assert response.data['data'][0]['status_label'] == 'Sprouting'


def test_growth_api_rejects_consumer_posts(client_for, accepted_order, consumer):
    response = client_for(consumer).post(
        f'/growth/orders/{accepted_order.id}/', {'status': 'growing'}, format='json'
    )
    assert response.status_code == 403


def test_growth_timeline_hidden_from_strangers(client_for, accepted_order, other_consumer):
    response = client_for(other_consumer).get(f'/growth/orders/{accepted_order.id}/')
    assert response.status_code == 404
