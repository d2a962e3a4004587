from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.utils import timezone

from .models import TIMEZONE_CHOICES, PartnerInvite, UserProfile

User = get_user_model()


class RegisterForm(forms.Form):
    """Email/password registration. The email doubles as the username."""
    email = forms.EmailField(max_length=150)
    password = forms.CharField(strip=False)
    firstName = forms.CharField(max_length=150)
    lastName = forms.CharField(max_length=150)
    timezone = forms.ChoiceField(choices=TIMEZONE_CHOICES, required=False)
    inviteCode = forms.CharField(max_length=8, required=False)

    def clean_email(self):
        email = self.cleaned_data['email'].lower()
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationError('Email already registered')
        return email

    def clean_inviteCode(self):
        code = self.cleaned_data['inviteCode'].strip().upper()
        if code and not PartnerInvite.objects.filter(code=code, status=PartnerInvite.Status.PENDING).exists():
            raise ValidationError('Invalid or already used invite code')
        return code

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get('password')
        if password:
            candidate = User(
                username=cleaned_data.get('email', ''),
                email=cleaned_data.get('email', ''),
                first_name=cleaned_data.get('firstName', ''),
                last_name=cleaned_data.get('lastName', ''),
            )
            try:
                validate_password(password, user=candidate)
            except ValidationError as e:
                self.add_error('password', e)
        return cleaned_data

    def save(self):
        """Create the user; the profile comes from the post_save signal."""
        user = User.objects.create_user(
            username=self.cleaned_data['email'],
            email=self.cleaned_data['email'],
            password=self.cleaned_data['password'],
            first_name=self.cleaned_data['firstName'],
            last_name=self.cleaned_data['lastName'],
        )
        if self.cleaned_data.get('timezone'):
            UserProfile.objects.update_or_create(
                user=user,
                defaults={'timezone': self.cleaned_data['timezone']},
            )
        if self.cleaned_data.get('inviteCode'):
            PartnerInvite.objects.filter(
                code=self.cleaned_data['inviteCode'],
                status=PartnerInvite.Status.PENDING,
            ).update(
                status=PartnerInvite.Status.ACCEPTED,
                accepted_by=user,
                accepted_at=timezone.now(),
            )
        return user


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class PasswordResetRequestForm(forms.Form):
    email = forms.EmailField()


class PasswordResetConfirmForm(forms.Form):
    uid = forms.CharField()
    token = forms.CharField()
    password = forms.CharField(strip=False)


class ProfileUpdateForm(forms.Form):
    """Partial profile update; only the keys present in the body are applied."""
    firstName = forms.CharField(max_length=150, required=False)
    lastName = forms.CharField(max_length=150, required=False)
    timezone = forms.ChoiceField(choices=TIMEZONE_CHOICES, required=False)


class PartnerInviteForm(forms.Form):
    method = forms.ChoiceField(
        choices=[('email', 'email')],
        required=False,
        error_messages={'invalid_choice': 'Only email invitations are supported'},
    )
    recipient = forms.EmailField()
    message = forms.CharField(max_length=500, required=False)
