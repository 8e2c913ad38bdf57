"""
Authentication models for the CIRA backend.

Contains:
- Custom User model with role-based access control

Roles:
- citizen: submits and follows reports
- officer: works assigned reports; participates in auto-assignment
- admin: triages, assigns and overrides report status

Token issuance lives outside this service; requests are authenticated
from JWTs signed with the shared signing key.
"""

from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin

from core.models import BaseModel


class UserRole:
    """User role constants."""
    CITIZEN = 'citizen'
    OFFICER = 'officer'
    ADMIN = 'admin'

    CHOICES = [
        (CITIZEN, 'Citizen'),
        (OFFICER, 'Officer'),
        (ADMIN, 'Administrator'),
    ]

    # Roles notified when a new report arrives
    STAFF_ROLES = [OFFICER, ADMIN]


class UserManager(BaseUserManager):
    """
    Custom user manager for the CIRA User model.
    """

    def create_user(self, identifier, password=None, **extra_fields):
        """
        Create and return a regular user.

        Args:
            identifier: Unique identifier (usually the email address)
            password: Optional password; unusable if omitted
            **extra_fields: Additional fields
        """
        if not identifier:
            raise ValueError('User must have an identifier')

        extra_fields.setdefault('email', identifier if '@' in identifier else '')
        user = self.model(identifier=identifier, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_officer(self, identifier, password=None, **extra_fields):
        """Create an officer account."""
        extra_fields['role'] = UserRole.OFFICER
        return self.create_user(identifier, password, **extra_fields)

    def create_superuser(self, identifier, password, **extra_fields):
        """Create a superuser for admin access."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(identifier, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin, BaseModel):
    """
    Custom User model for CIRA.

    Design decisions:
    - Uses UUID primary key (inherited from BaseModel)
    - identifier field instead of username
    - Role-based access control
    """

    identifier = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique identifier (email address)"
    )

    email = models.EmailField(
        blank=True,
        help_text="Contact email"
    )

    full_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Display name"
    )

    role = models.CharField(
        max_length=20,
        choices=UserRole.CHOICES,
        default=UserRole.CITIZEN,
        db_index=True,
        help_text="User role determining access level"
    )

    is_staff = models.BooleanField(
        default=False,
        help_text="Designates whether user can access admin site"
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Designates whether user account is active"
    )

    objects = UserManager()

    USERNAME_FIELD = 'identifier'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'cira_users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['created_at']

    def __str__(self):
        return self.identifier

    @property
    def display_name(self):
        return self.full_name or self.email or self.identifier

    @property
    def is_officer(self):
        return self.role == UserRole.OFFICER

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def is_citizen(self):
        return self.role == UserRole.CITIZEN
