# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from firms.models import Firm, FirmAccess
from permissions.roles import ROLE_ACCOUNTANT, ROLE_ADMIN, ROLE_FIELD_STAFF


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    email: str
    username: str
    full_name: str = ""


SEED_USERS = [
    SeedUserSpec("Admin", ROLE_ADMIN, "admin@example.com", "admin", "System Admin"),
    SeedUserSpec("Accountant", ROLE_ACCOUNTANT, "accounts@example.com", "accounts", "Office Accountant"),
    SeedUserSpec("Field staff", ROLE_FIELD_STAFF, "field@example.com", "field", "Route Collector"),
]


class Command(BaseCommand):
    help = "Seed one firm plus an admin, an accountant and a field staff user with access to it."

    def add_arguments(self, parser):
        parser.add_argument(
            "--firm",
            type=str,
            default="Demo Traders",
            help="Firm name to create or reuse (default: Demo Traders)",
        )
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        firm_name = (options.get("firm") or "").strip()
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if not firm_name:
            raise CommandError("--firm must not be empty.")
        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()

        firm, firm_created = Firm.objects.get_or_create(name=firm_name)
        self.stdout.write(f"{'created' if firm_created else 'exists '}: firm '{firm.name}'")

        created_count = 0
        pw_reset_count = 0

        for seed in SEED_USERS:
            is_admin = seed.role == ROLE_ADMIN

            user = User.objects.filter(email__iexact=seed.email).first()
            created = user is None
            if created:
                user = User.objects.create_user(
                    email=seed.email,
                    username=seed.username,
                    password=password,
                    full_name=seed.full_name,
                    role=seed.role,
                    is_staff=is_admin,
                    is_superuser=is_admin,
                )
                created_count += 1
            else:
                user.role = seed.role
                user.is_active = True
                if force_password:
                    user.set_password(password)
                    pw_reset_count += 1
                user.save()

            FirmAccess.objects.get_or_create(user=user, firm=firm)

            self.stdout.write(
                f"{'created' if created else 'exists '}: {seed.label} ({seed.role}) -> {seed.email}"
            )

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created: {created_count}")
        if force_password:
            self.stdout.write(f"Passwords reset: {pw_reset_count}")
