from datetime import timedelta
from decimal import Decimal

from django import forms
from django.conf import settings
from django.contrib.auth.forms import AuthenticationForm
from django.utils import timezone


class AdministratorAuthenticationForm(AuthenticationForm):
    def confirm_login_allowed(self, user):
        super().confirm_login_allowed(user)
        if not user.company_administrators.exists():
            raise forms.ValidationError(
                "Only company administrators can sign in here.",
                code="not_administrator",
            )


class DividendComputationForm(forms.Form):
    amount_in_usd = forms.DecimalField(max_digits=20, decimal_places=2, min_value=Decimal("0.01"))
    dividends_issuance_date = forms.DateField()
    return_of_capital = forms.BooleanField(required=False)

    def clean_dividends_issuance_date(self):
        issuance_date = self.cleaned_data["dividends_issuance_date"]
        min_days = settings.DIVIDEND_MIN_DAYS_AHEAD
        if issuance_date < timezone.localdate() + timedelta(days=min_days):
            raise forms.ValidationError(
                f"Payment date must be at least {min_days} days in the future",
                code="too_soon",
            )
        return issuance_date
