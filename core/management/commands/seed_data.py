from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.utils.text import slugify

from core.models import Community, CommunityMembership

User = get_user_model()

SEED_COMMUNITIES = [
    ("IIT Bombay", Community.TYPE_COLLEGE, "IIT Bombay Green Campus Initiative"),
    ("IIT Delhi", Community.TYPE_COLLEGE, "Sustainability at IIT Delhi"),
    ("Bangalore Tech Park", Community.TYPE_COMPANY, "Corporate sustainability challenge"),
    ("Mumbai Green City", Community.TYPE_CITY, "Mumbai citizens for climate"),
    ("Delhi NCR Eco Warriors", Community.TYPE_CITY, "NCR community climate action"),
    ("BITS Pilani", Community.TYPE_COLLEGE, "BITS Green Club"),
    ("Infosys Green Team", Community.TYPE_COMPANY, "Infosys employee sustainability"),
    ("Chennai Coastal Guardians", Community.TYPE_CITY, "Chennai coastal community"),
    ("NIT Trichy Eco", Community.TYPE_COLLEGE, "NIT Trichy environment club"),
    ("Hyderabad Green Society", Community.TYPE_CITY, "Hyderabad urban sustainability"),
]


class Command(BaseCommand):
    help = "Seeds the database with sample users and communities"

    def handle(self, *args, **options):
        self.stdout.write("🌱 Seeding data...")

        # 1. Ensure Users
        admin, _ = User.objects.get_or_create(
            username="admin",
            defaults={"email": "admin@example.com", "is_staff": True, "is_superuser": True},
        )
        if not admin.check_password("admin"):
            admin.set_password("admin")
            admin.save()

        alice, _ = User.objects.get_or_create(username="alice", defaults={"email": "alice@example.com"})
        alice.set_password("password")
        alice.save()

        bob, _ = User.objects.get_or_create(username="bob", defaults={"email": "bob@example.com"})
        bob.set_password("password")
        bob.save()

        # 2. Communities
        communities = []
        for name, community_type, description in SEED_COMMUNITIES:
            community, _ = Community.objects.get_or_create(
                slug=slugify(name),
                defaults={
                    "name": name,
                    "type": community_type,
                    "description": description,
                    "created_by": admin,
                },
            )
            communities.append(community)
        self.stdout.write(f"Communities: {len(communities)}")

        # 3. Memberships (first community is everyone's default)
        home = communities[0]
        for u, role in [(admin, CommunityMembership.ROLE_OWNER), (alice, CommunityMembership.ROLE_ADMIN), (bob, CommunityMembership.ROLE_MEMBER)]:
            CommunityMembership.objects.get_or_create(
                community=home,
                user=u,
                defaults={"role": role, "is_active": True, "is_default": True},
            )

        self.stdout.write(self.style.SUCCESS("✅ Seeding complete. Run seed_missions for the mission catalog."))
