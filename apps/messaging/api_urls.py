from django.urls import path
from .api import MessagingActionView

app_name = "messaging_api"

urlpatterns = [
    path("messages/", MessagingActionView.as_view(), name="actions"),
]
