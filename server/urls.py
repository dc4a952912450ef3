"""
Main URL mapping configuration file.

Include other URLConfs from external apps using method `include()`.

It is also a good practice to keep a single URL to the root index page.
"""

from django.contrib import admin
from django.contrib.admindocs import urls as admindocs_urls
from django.urls import include, path

from server.apps.tierlists import urls as tierlists_urls
from server.apps.tierlists.views import health

admin.autodiscover()

urlpatterns = [
    # Tierlist API:
    path('', include(tierlists_urls, namespace='tierlists')),

    # Health checks:
    path('health', health, name='health'),

    # django-admin:
    path('admin/doc/', include(admindocs_urls)),
    path('admin/', admin.site.urls),
]
