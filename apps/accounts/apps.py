from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.accounts"
    verbose_name = "Accounts"

    def ready(self) -> None:
        env = (getattr(settings, "ENVIRONMENT", "") or "").strip().lower()
        if env in {"prod", "production"}:
            if getattr(settings, "DEBUG", False):
                raise ImproperlyConfigured("DEBUG must be False in production.")
            gateway = (getattr(settings, "PAYMENT_GATEWAY", "") or "").strip().lower()
            if gateway == "sandbox":
                raise ImproperlyConfigured("Sandbox payment gateway is selected in production. Set PAYMENT_GATEWAY=razorpay.")
