from django.urls import path
from .api import MyProfileView, ProfileDetailView, WhoAmIView

app_name = "accounts_api"

urlpatterns = [
    path("accounts/whoami/", WhoAmIView.as_view(), name="whoami"),
    path("accounts/profile/", MyProfileView.as_view(), name="my-profile"),
    path("accounts/profiles/<int:user_id>/", ProfileDetailView.as_view(), name="profile-detail"),
]
