from django.urls import path

from .views import AuthSessionAPI, ChangeUserRoleAPI, MeAPI, RegisterClientAPI, RoleTokenObtainPairView

urlpatterns = [
    path("auth/register", RegisterClientAPI.as_view(), name="api_auth_register"),
    path("auth/token/", RoleTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/session", AuthSessionAPI.as_view(), name="api_auth_session"),
    path("auth/me", MeAPI.as_view(), name="api_auth_me"),
    path("accounts/<int:user_id>/role", ChangeUserRoleAPI.as_view(), name="api_account_role"),
]
