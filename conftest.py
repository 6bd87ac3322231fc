import httpx
import pytest
from django.contrib.auth import get_user_model
from django.core import signals
from django.core.wsgi import get_wsgi_application
from django.db import close_old_connections
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import Profile

PASSWORD = "pass12345!"


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def make_user(db):
    def _make(username, role="", full_name=""):
        user = get_user_model().objects.create_user(username=username, password=PASSWORD)
        # the post_save receiver already created an empty profile
        Profile.objects.filter(user=user).update(role=role, full_name=full_name)
        return user

    return _make


@pytest.fixture
def farmer(make_user):
    return make_user("farmer1", "farmer", "Fiona Field")


@pytest.fixture
def laborer(make_user):
    return make_user("laborer1", "laborer", "Luis Lopez")


@pytest.fixture
def other_farmer(make_user):
    return make_user("farmer2", "farmer", "Frank Furrow")


@pytest.fixture
def api_client_for():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            access = RefreshToken.for_user(user).access_token
            client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        return client

    return _client


@pytest.fixture
def wsgi_transport(db):
    """
    httpx transport wired straight into the Django app, same thread and same
    test transaction. Connection recycling is switched off for the duration,
    as Django's own test client does.
    """
    signals.request_started.disconnect(close_old_connections)
    signals.request_finished.disconnect(close_old_connections)
    try:
        yield httpx.WSGITransport(app=get_wsgi_application())
    finally:
        signals.request_started.connect(close_old_connections)
        signals.request_finished.connect(close_old_connections)


@pytest.fixture
def wsgi_http(wsgi_transport):
    with httpx.Client(transport=wsgi_transport, base_url="http://testserver") as http:
        yield http
