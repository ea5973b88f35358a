from __future__ import annotations

from django import forms


class SignInForm(forms.Form):
    identifier = forms.CharField(max_length=254, label="Email or username")
    password = forms.CharField(
        label="Password",
        widget=forms.PasswordInput(attrs={"autocomplete": "current-password"}),
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field_name in ["identifier", "password"]:
            if field_name in self.fields:
                self.fields[field_name].widget.attrs.setdefault("class", "form-control")


class SignUpForm(forms.Form):
    full_name = forms.CharField(max_length=200, label="Full name")
    email = forms.EmailField(max_length=254, label="Email")
    phone = forms.CharField(max_length=32, label="Phone", required=False)
    password = forms.CharField(
        label="Password",
        widget=forms.PasswordInput(attrs={"autocomplete": "new-password"}),
        min_length=8,
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field_name in ["full_name", "email", "phone", "password"]:
            if field_name in self.fields:
                self.fields[field_name].widget.attrs.setdefault("class", "form-control")
