from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils.timezone import now


class CustomUserManager(BaseUserManager):
    def create_user(self, email, role, password=None, full_name='', phone_number='', address=''):
        if not email:
            raise ValueError("The email must be provided")
        if not role:
            raise ValueError("The role must be provided")
        if role not in [choice[0] for choice in CustomUser.ROLE_CHOICES]:
            raise ValueError("Invalid role selected")

        user = self.model(
            email=self.normalize_email(email),
            role=role,
            full_name=full_name,
            phone_number=phone_number,
            address=address,
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("The email must be provided for superuser")
        if not password:
            raise ValueError("The password must be provided for superuser")

        user = self.create_user(
            email=email,
            role='admin',
            password=password,
            full_name=extra_fields.get('full_name', ''),
        )
        user.is_staff = True
        user.is_superuser = True
        user.save(using=self._db)
        return user

    def create_farmer(self, email, password=None, full_name='', phone_number=''):
        if not password:
            raise ValueError("The password must be provided for farmer")

        return self.create_user(
            email=email,
            role='farmer',
            password=password,
            full_name=full_name,
            phone_number=phone_number,
        )


class CustomUser(AbstractBaseUser, PermissionsMixin):
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('farmer', 'Farmer'),
        ('user', 'Consumer'),
    ]

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=150, blank=True)
    phone_number = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='user')
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=now)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.full_name or self.email

    @property
    def is_admin_role(self):
        return self.role == 'admin'

    @property
    def is_farmer(self):
        return self.role == 'farmer'

    @property
    def is_consumer(self):
        return self.role == 'user'
