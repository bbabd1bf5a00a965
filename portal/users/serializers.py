"""
Portal User Serializers

This module provides the serializers for signup, login, password reset and
newsletter subscription.

Serializers:
- PortalTokenObtainPairSerializer: JWT pair with user metadata, login by email
- UserSerializer: Public user data
- SignupSerializer: Account creation with name/email/password validation
- ForgotPasswordSerializer / ResetPasswordSerializer: Password reset flow
- NewsletterSubscribeSerializer: Newsletter email capture
- BookSessionSerializer: Consultation booking form

Author: Portal Development Team
Version: 1.0.0
"""

from typing import Any, Dict

from django.contrib.auth import get_user_model
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

User = get_user_model()


class PortalTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT pair serializer for email login.

    Token payload includes email and display name; the login response body
    carries the user instead of the tokens, which go into cookies.
    """

    @classmethod
    def get_token(cls, user) -> RefreshToken:
        token = super().get_token(user)
        token["email"] = user.email
        token["name"] = user.name
        return token

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        attrs[self.username_field] = (attrs.get(self.username_field) or "").strip().lower()
        data = super().validate(attrs)
        data["user"] = UserSerializer(self.user).data
        return data


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "email", "name", "date_joined")
        read_only_fields = fields


class SignupSerializer(serializers.ModelSerializer):
    """
    Account creation.

    Validation:
    - name: at least 2 characters
    - email: valid and not yet registered (case-insensitive)
    - password: at least 8 characters
    """

    name = serializers.CharField(
        min_length=2,
        max_length=150,
        error_messages={"min_length": _("Name must be at least 2 characters")},
    )
    email = serializers.EmailField(
        error_messages={"invalid": _("Invalid email address")},
    )
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        error_messages={"min_length": _("Password must be at least 8 characters")},
    )

    class Meta:
        model = User
        fields = ("id", "name", "email", "password", "date_joined")
        read_only_fields = ("id", "date_joined")

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(_("User with this email already exists"))
        return value

    def create(self, validated_data: Dict[str, Any]):
        return User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data["name"],
        )


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField(error_messages={"invalid": _("Invalid email address")})

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=64)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        error_messages={"min_length": _("Password must be at least 8 characters")},
    )


class NewsletterSubscribeSerializer(serializers.Serializer):
    email = serializers.EmailField(
        error_messages={
            "required": _("Email is required"),
            "blank": _("Email is required"),
            "invalid": _("Invalid email format"),
        },
    )

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


REQUIRED_FIELD_ERRORS = {
    "required": _("All fields are required"),
    "blank": _("All fields are required"),
    "null": _("All fields are required"),
}


class BookSessionSerializer(serializers.Serializer):
    """Consultation request from the marketing site's booking form."""

    firstName = serializers.CharField(max_length=100, error_messages=REQUIRED_FIELD_ERRORS)
    lastName = serializers.CharField(max_length=100, error_messages=REQUIRED_FIELD_ERRORS)
    email = serializers.EmailField(
        error_messages={**REQUIRED_FIELD_ERRORS, "invalid": _("Invalid email format")},
    )
    phone = serializers.CharField(max_length=50, error_messages=REQUIRED_FIELD_ERRORS)
    message = serializers.CharField(max_length=5000, error_messages=REQUIRED_FIELD_ERRORS)
    interests = serializers.ListField(
        child=serializers.CharField(max_length=100),
        allow_empty=False,
        error_messages={
            "required": _("Please select at least one area of interest"),
            "null": _("Please select at least one area of interest"),
            "empty": _("Please select at least one area of interest"),
            "not_a_list": _("Please select at least one area of interest"),
        },
    )
    newsletterOptIn = serializers.BooleanField(default=False)

    def validate_email(self, value: str) -> str:
        return value.strip().lower()
