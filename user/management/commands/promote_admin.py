from django.core.management.base import BaseCommand, CommandError

from user.models import User


class Command(BaseCommand):
    help = "Grant (or with --revoke, remove) admin console access for a user."

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("--revoke", action="store_true", help="Remove the admin flag instead.")

    def handle(self, *args, **options):
        email = options["email"]
        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise CommandError(f"No user with email {email!r}")

        user.is_staff = not options["revoke"]
        user.save(update_fields=["is_staff"])
        state = "is now" if user.is_staff else "is no longer"
        self.stdout.write(self.style.SUCCESS(f"{user.email} {state} an admin"))
