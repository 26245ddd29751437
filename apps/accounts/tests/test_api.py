import jwt
import pytest
from django.urls import reverse
from rest_framework import status

from apps.accounts.models import User, UserRole
from apps.accounts.services import ensure_default_admin


def google_credential(email, name='Google User'):
    """Unsigned-looking ID token; signatures are not checked without a client id."""
    return jwt.encode({'email': email, 'name': name}, 'test-signing-key-that-is-long-enough-for-hs256', algorithm='HS256')


@pytest.fixture(autouse=True)
def no_google_client_id(settings):
    settings.GOOGLE_OAUTH_CLIENT_ID = ''


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_with_email(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'username': user.email, 'password': 'UserPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['user'] == {'email': user.email, 'name': user.name, 'role': 'user'}
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']

    def test_login_with_name(self, api_client, user):
        """The display name works as a username too."""
        url = reverse('users:login')
        response = api_client.post(url, {'username': '王小明', 'password': 'UserPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == user.email

    def test_login_email_is_case_insensitive(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'username': 'USER@example.com', 'password': 'UserPass123!'})

        assert response.status_code == status.HTTP_200_OK

    def test_login_wrong_password(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'username': user.email, 'password': 'wrong'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {'success': False, 'error': '帳號或密碼錯誤'}

    def test_login_unknown_user(self, api_client, db):
        url = reverse('users:login')
        response = api_client.post(url, {'username': 'nobody@example.com', 'password': 'whatever'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_account(self, api_client, user):
        user.is_active = False
        user.save()

        url = reverse('users:login')
        response = api_client.post(url, {'username': user.email, 'password': 'UserPass123!'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_updates_last_login(self, api_client, user):
        assert user.last_login is None
        api_client.post(reverse('users:login'), {'username': user.email, 'password': 'UserPass123!'})

        user.refresh_from_db()
        assert user.last_login is not None

    def test_first_login_seeds_default_admin(self, api_client, db, settings):
        settings.DEFAULT_ADMIN_EMAIL = 'seed@example.com'
        settings.DEFAULT_ADMIN_PASSWORD = 'SeedPass123!'
        settings.DEFAULT_ADMIN_NAME = '系統管理員'

        response = api_client.post(
            reverse('users:login'),
            {'username': 'seed@example.com', 'password': 'SeedPass123!'},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['role'] == 'admin'


# =============================================================================
# Google Login Tests
# =============================================================================

@pytest.mark.django_db
class TestGoogleLogin:
    """Tests for POST /api/auth/google-login/"""

    def test_whitelisted_account(self, api_client, user):
        url = reverse('users:google-login')
        response = api_client.post(url, {'credential': google_credential(user.email)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == user.email
        assert response.data['user']['name'] == user.name

    def test_name_falls_back_to_google_profile(self, api_client, user):
        user.name = ''
        user.save()

        url = reverse('users:google-login')
        response = api_client.post(url, {'credential': google_credential(user.email, 'Ming Wang')})

        assert response.data['user']['name'] == 'Ming Wang'

    def test_unknown_account_rejected(self, api_client, user):
        url = reverse('users:google-login')
        response = api_client.post(url, {'credential': google_credential('stranger@gmail.com')})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert 'stranger@gmail.com' in response.data['error']

    def test_malformed_credential(self, api_client, user):
        url = reverse('users:google-login')
        response = api_client.post(url, {'credential': 'not-a-jwt'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False


# =============================================================================
# Account Management Tests
# =============================================================================

@pytest.mark.django_db
class TestUsers:
    """Tests for /api/auth/user/ and /api/auth/users/"""

    def test_current_user(self, authenticated_client, user):
        response = authenticated_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['role'] == 'user'

    def test_current_user_requires_auth(self, api_client):
        response = api_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_admin_lists_users(self, admin_client, user, viewer_user):
        response = admin_client.get(reverse('users:users'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 3

    def test_admin_creates_user(self, admin_client):
        data = {'email': 'new@example.com', 'password': 'NewPass123!', 'name': '新同仁', 'role': 'viewer'}
        response = admin_client.post(reverse('users:users'), data)

        assert response.status_code == status.HTTP_201_CREATED
        created = User.objects.get(email='new@example.com')
        assert created.role == UserRole.VIEWER
        assert created.check_password('NewPass123!')

    def test_duplicate_email_rejected(self, admin_client, user):
        data = {'email': 'USER@example.com', 'password': 'NewPass123!'}
        response = admin_client.post(reverse('users:users'), data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == '該 Email 已存在'

    def test_regular_user_cannot_manage_accounts(self, authenticated_client):
        response = authenticated_client.get(reverse('users:users'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert str(response.data['detail']) == '無權限'


@pytest.mark.django_db
class TestDefaultAdmin:

    def test_seeded_only_when_no_account_exists(self, settings):
        settings.DEFAULT_ADMIN_EMAIL = 'seed@example.com'

        created = ensure_default_admin()

        assert created is not None
        assert created.role == UserRole.ADMIN
        assert ensure_default_admin() is None
        assert User.objects.count() == 1

    def test_not_seeded_when_accounts_exist(self, user):
        assert ensure_default_admin() is None
        assert not User.objects.filter(role=UserRole.ADMIN).exists()
