from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("litrpg.urls")),          # API lives under /api/ inside litrpg.urls
]
