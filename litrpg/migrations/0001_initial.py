from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CharacterRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("header_image_url", models.CharField(blank=True, max_length=500, null=True)),
                ("level", models.IntegerField(default=1)),
                ("xp", models.BigIntegerField(default=0)),
                ("credits", models.BigIntegerField(default=0)),
                ("class_name", models.CharField(default="Recruit", max_length=60)),
                ("attributes", models.JSONField(default=dict)),
                ("abilities", models.JSONField(default=dict)),
                ("inventory", models.JSONField(default=list)),
                ("history", models.JSONField(default=list)),
                ("quests", models.JSONField(blank=True, default=list)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="characters",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name", "id"],
            },
        ),
        migrations.CreateModel(
            name="MonsterEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=60, unique=True)),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True)),
                ("level", models.IntegerField(default=1)),
                (
                    "rank",
                    models.CharField(
                        choices=[("Trash", "Trash"), ("Regular", "Regular"), ("Champion", "Champion"), ("Boss", "Boss")],
                        default="Regular",
                        max_length=20,
                    ),
                ),
                ("xp_reward", models.IntegerField(blank=True, null=True)),
                ("credits", models.IntegerField(blank=True, null=True)),
                ("stats", models.JSONField(blank=True, default=dict)),
                ("abilities", models.JSONField(blank=True, default=list)),
            ],
            options={
                "ordering": ["level", "name"],
            },
        ),
    ]
