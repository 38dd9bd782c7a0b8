from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
import uuid


class Role(models.TextChoices):
    ADMINISTRATIVO = 'administrativo', 'Administrativo'
    CONTADOR = 'contador', 'Contador'
    DIRECTOR_GENERAL = 'director_general', 'Director general'


class Capability:
    """Named capabilities checked by services and API permissions."""

    MANAGE_TRANSACTIONS = 'manage_transactions'
    MANAGE_CATALOGS = 'manage_catalogs'
    DELETE_CATALOG_ITEMS = 'delete_catalog_items'
    DELETE_TRANSACTIONS = 'delete_transactions'
    DELETE_PAYMENTS = 'delete_payments'
    MANAGE_SETTINGS = 'manage_settings'
    VIEW_REPORTS = 'view_reports'

    ALL = (
        MANAGE_TRANSACTIONS,
        MANAGE_CATALOGS,
        DELETE_CATALOG_ITEMS,
        DELETE_TRANSACTIONS,
        DELETE_PAYMENTS,
        MANAGE_SETTINGS,
        VIEW_REPORTS,
    )


# Default capabilities granted to each role; RolePermission rows override them
ROLE_CAPABILITIES = {
    Role.ADMINISTRATIVO: frozenset({
        Capability.MANAGE_TRANSACTIONS,
        Capability.MANAGE_CATALOGS,
        Capability.DELETE_CATALOG_ITEMS,
        Capability.DELETE_TRANSACTIONS,
        Capability.DELETE_PAYMENTS,
        Capability.MANAGE_SETTINGS,
        Capability.VIEW_REPORTS,
    }),
    Role.CONTADOR: frozenset({
        Capability.MANAGE_TRANSACTIONS,
        Capability.MANAGE_CATALOGS,
    }),
    Role.DIRECTOR_GENERAL: frozenset(),
}


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""
    
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user
    
    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', Role.ADMINISTRATIVO)
        
        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')
        
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Staff member of the club administration, authenticated by email."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    display_name = models.CharField(max_length=100, blank=True)
    
    # Club role, drives capabilities
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CONTADOR
    )
    
    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    
    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(null=True, blank=True)
    
    objects = UserManager()
    
    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []
    
    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email']),
            models.Index(fields=['role']),
        ]
    
    def __str__(self):
        return self.email
    
    def get_display_name(self):
        """Return display name or email prefix."""
        return self.display_name or self.email.split('@')[0]
    
    @property
    def capabilities(self):
        return RolePermission.objects.capabilities_for(self.role)
    
    def has_capability(self, capability):
        """Superusers hold every capability; everyone else gets their role's effective set."""
        if not self.is_active:
            return False
        if self.is_superuser:
            return True
        return capability in self.capabilities


class RolePermissionManager(models.Manager):

    def capabilities_for(self, role):
        """Role defaults with the stored grants and revocations applied."""
        capabilities = set(ROLE_CAPABILITIES.get(role, frozenset()))
        for capability, granted in self.filter(role=role).values_list('capability', 'granted'):
            if granted:
                capabilities.add(capability)
            else:
                capabilities.discard(capability)
        return frozenset(capabilities)


class RolePermission(models.Model):
    """
    Stored override of one capability for one role.

    Only capabilities that differ from ROLE_CAPABILITIES have a row; anything
    without a row follows the default.
    """

    id = models.BigAutoField(primary_key=True)
    role = models.CharField(max_length=20, choices=Role.choices)
    capability = models.CharField(
        max_length=30,
        choices=[(capability, capability) for capability in Capability.ALL]
    )
    granted = models.BooleanField()

    updated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='role_permission_changes'
    )
    updated_at = models.DateTimeField(auto_now=True)

    objects = RolePermissionManager()

    class Meta:
        db_table = 'role_permissions'
        constraints = [
            models.UniqueConstraint(fields=['role', 'capability'], name='unique_role_capability'),
        ]
        ordering = ['role', 'capability']

    def __str__(self):
        state = 'granted' if self.granted else 'revoked'
        return f"{self.role}: {self.capability} {state}"
