from django.urls import path

from .views import sign_in_view, sign_out_view, sign_up_view

app_name = "auth"

urlpatterns = [
    path("sign-in", sign_in_view, name="sign_in"),
    path("sign-up", sign_up_view, name="sign_up"),
    path("sign-out", sign_out_view, name="sign_out"),
]
