import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ("litrpg", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="monsterentry",
            name="level",
            field=models.IntegerField(
                default=1,
                validators=[
                    django.core.validators.MinValueValidator(1),
                    django.core.validators.MaxValueValidator(200),
                ],
            ),
        ),
        migrations.CreateModel(
            name="PendingReward",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_id", models.BigIntegerField()),
                ("xp", models.BigIntegerField(default=0)),
                ("credits", models.BigIntegerField(default=0)),
                ("description", models.CharField(max_length=300)),
                ("loot", models.JSONField(blank=True, default=list)),
                ("loot_summary", models.TextField(blank=True)),
                ("timestamp", models.BigIntegerField(default=0)),
                ("chapter_ref", models.CharField(blank=True, max_length=120)),
                (
                    "character",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pending_rewards",
                        to="litrpg.characterrecord",
                    ),
                ),
            ],
            options={
                "ordering": ["-id"],
                "unique_together": {("character", "entry_id")},
            },
        ),
    ]
