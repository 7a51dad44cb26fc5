from django.contrib.auth.models import UserManager as BaseUserManager


class UserManager(BaseUserManager):
    """Manager for email-login users that keeps a username for display"""

    def create_user(self, username=None, email=None, password=None, **extra_fields):
        """Create and save a regular user"""
        if not email:
            raise ValueError('The given email must be set')

        email = self.normalize_email(email)
        username = username or email
        user = self.model(username=username, email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username=None, email=None, password=None, **extra_fields):
        """Create and save a superuser"""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', 'admin')

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(username, email, password, **extra_fields)

    def students(self):
        """Active users holding the student role"""
        return self.filter(role='student', is_active=True)
