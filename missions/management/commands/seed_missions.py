from django.core.management.base import BaseCommand

from missions.models import Mission

SEED_MISSIONS = [
    # (title, description, category, co2_saved_kg, base_points, difficulty, icon)
    ("Bike Instead of Car", "Use a bicycle for a trip under 5km instead of driving", "transport", 1.05, 50, "easy", "bicycle"),
    ("Take the Metro", "Commute by metro or bus instead of personal vehicle", "transport", 2.1, 80, "easy", "train"),
    ("Carpool Today", "Share your car ride with at least one other person", "transport", 1.5, 60, "medium", "people"),
    ("Walk for Short Trips", "Walk all trips under 1km today", "transport", 0.5, 30, "easy", "walk"),
    ("Work From Home", "Avoid commuting by working from home", "transport", 3.2, 100, "medium", "home"),
    ("Go Meat-Free Today", "Eat a fully vegetarian diet for the day", "food", 2.5, 90, "easy", "leaf"),
    ("Try Vegan for a Day", "Avoid all animal products including dairy and eggs", "food", 4.1, 130, "medium", "nutrition"),
    ("Zero Food Waste", "Consume or compost all food, waste nothing", "food", 1.2, 50, "easy", "trash-outline"),
    ("Buy Local Produce", "Purchase locally grown fruits and vegetables", "food", 0.8, 40, "easy", "basket"),
    ("Unplug Idle Devices", "Unplug chargers, TVs, and appliances not in use", "energy", 0.3, 25, "easy", "flash-off"),
    ("AC Off for 4 Hours", "Turn off air conditioning for at least 4 hours", "energy", 0.9, 45, "medium", "thermometer"),
    ("Line-Dry Laundry", "Air dry your clothes instead of using a dryer", "energy", 1.1, 50, "easy", "shirt"),
    ("Switch to LED", "Replace one incandescent bulb with an LED bulb", "energy", 25.5, 200, "hard", "bulb"),
    ("Cold Water Wash", "Wash clothes in cold water instead of hot", "energy", 0.6, 35, "easy", "water"),
    ("Skip Single-Use Plastic", "Refuse plastic bags, straws, and cutlery today", "shopping", 0.3, 30, "easy", "close-circle"),
    ("Buy Second-Hand", "Purchase a clothing item from a thrift store", "shopping", 5.0, 150, "medium", "repeat"),
    ("Repair Don't Replace", "Fix a broken item instead of buying new", "shopping", 3.5, 120, "medium", "build"),
    ("Bring a Reusable Bag", "Use a cloth or reusable bag for all shopping today", "shopping", 0.1, 15, "easy", "bag"),
    ("2-Minute Shower", "Limit your shower to 2 minutes", "water", 0.4, 30, "medium", "water"),
    ("Fix a Dripping Tap", "Repair a leaking tap to save water", "water", 15.0, 300, "hard", "construct"),
]


class Command(BaseCommand):
    help = "Seeds the mission catalog (idempotent: existing titles are updated, not duplicated)"

    def handle(self, *args, **options):
        self.stdout.write("🌱 Seeding missions...")

        created_count = 0
        for title, description, category, co2, base_points, difficulty, icon in SEED_MISSIONS:
            _, created = Mission.objects.update_or_create(
                title=title,
                defaults={
                    "description": description,
                    "category": category,
                    "co2_saved_kg": co2,
                    "base_points": base_points,
                    "difficulty": difficulty,
                    "icon": icon,
                    "is_active": True,
                },
            )
            if created:
                created_count += 1

        self.stdout.write(self.style.SUCCESS(
            f"✅ Missions seeded: {created_count} new, {len(SEED_MISSIONS) - created_count} updated"
        ))
